"""
Configuration package for the client contract setup step.
"""

from client_setup.config.network import (
    CHAINS,
    DEFAULT_CONTRACT_NAME,
    DEFAULT_NETWORK,
    get_chain_config,
    get_faucet_url,
    get_rpc_url,
)

from client_setup.config.installer_state import (
    InstallerState,
    STATE_VERSION,
    SECRET_FILE_MODE,
)

from client_setup.config.logging_config import (
    setup_logger,
    get_setup_logger,
)

__all__ = [
    # Network
    'CHAINS',
    'DEFAULT_CONTRACT_NAME',
    'DEFAULT_NETWORK',
    'get_chain_config',
    'get_faucet_url',
    'get_rpc_url',

    # Installer state
    'InstallerState',
    'STATE_VERSION',
    'SECRET_FILE_MODE',

    # Logging
    'setup_logger',
    'get_setup_logger',
]
