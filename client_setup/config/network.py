"""
Network configuration for the client contract deployment.

Maps migration network names (as passed to ``truffle migrate --network``)
to chain metadata, RPC templates and the faucets referenced in the
post-deployment instructions.
"""

from typing import Any


# =============================================================================
# CHAIN CONFIGURATIONS
# =============================================================================

CHAINS: dict[str, dict[str, Any]] = {
    "base_sepolia": {
        "chain_id": 84532,
        "name": "Base Sepolia",
        "currency": "ETH",
        "infura_rpc": "https://base-sepolia.infura.io/v3/{api_key}",
        "rpc_urls": [
            "https://sepolia.base.org",
            "https://base-sepolia-rpc.publicnode.com",
        ],
        "explorer": {
            "name": "Basescan Sepolia",
            "url": "https://sepolia.basescan.org",
        },
        "faucets": {
            "link": "https://faucets.chain.link",
            "native": "https://www.coinbase.com/faucets/base-sepolia-faucet",
        },
    },
    "base": {
        "chain_id": 8453,
        "name": "Base",
        "currency": "ETH",
        "infura_rpc": "https://base-mainnet.infura.io/v3/{api_key}",
        "rpc_urls": [
            "https://mainnet.base.org",
            "https://base.publicnode.com",
        ],
        "explorer": {
            "name": "Basescan",
            "url": "https://basescan.org",
        },
        "faucets": {},
    },
}

# Aliases used by some truffle configs
CHAIN_ALIASES = {
    "baseSepolia": "base_sepolia",
    "base_mainnet": "base",
}

DEFAULT_NETWORK = "base_sepolia"
DEFAULT_CONTRACT_NAME = "AIChainlinkRequest"

# Fee charged per oracle request by the client contract
REQUEST_FEE_LINK = "0.05"
# Minimum node funding recommended in the instructions
NODE_MIN_FUNDING_ETH = "0.1"
# Below this deployer balance the pre-flight check warns
MIN_DEPLOY_BALANCE_ETH = "0.01"

CHAINLINK_UI_URL = "http://localhost:6688"


def get_chain_config(network: str = DEFAULT_NETWORK) -> dict[str, Any]:
    """Return chain metadata for a migration network name."""
    key = CHAIN_ALIASES.get(network, network)
    if key not in CHAINS:
        raise ValueError(f"Unknown network: {network}. Available: {', '.join(CHAINS)}")
    return CHAINS[key]


def get_rpc_url(network: str = DEFAULT_NETWORK, infura_api_key: str | None = None) -> str:
    """Infura endpoint when an API key is known, else the first public RPC."""
    chain = get_chain_config(network)
    if infura_api_key:
        return chain["infura_rpc"].format(api_key=infura_api_key)
    return chain["rpc_urls"][0]


def get_faucet_url(network: str, kind: str) -> str | None:
    return get_chain_config(network).get("faucets", {}).get(kind)
