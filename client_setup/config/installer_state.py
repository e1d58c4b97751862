"""Installer state shared between installer steps.

Earlier steps leave flat ``KEY="value"`` files in the installer directory:

- ``.env``            INSTALL_DIR, optional PRIVATE_KEY
- ``.api_keys``       INFURA_API_KEY and other provider keys
- ``.contracts``      OPERATOR_ADDRESS, JOB_ID, JOB_ID_NO_HYPHENS, ...
- ``.job_placeholder`` marker left when no real job id was created yet

``InstallerState.load`` turns them into a typed object and raises
``PrerequisiteMissing`` naming the step to re-run. All writes go through
``set_or_append_key`` so every key stays on a single line.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import dotenv_values

from client_setup.setup.config_patcher import set_or_append_key
from client_setup.setup.errors import PrerequisiteMissing
from client_setup.setup.validation import is_valid_job_id, strip_job_id

logger = logging.getLogger(__name__)

ENV_FILE = ".env"
API_KEYS_FILE = ".api_keys"
CONTRACTS_FILE = ".contracts"
JOB_PLACEHOLDER_FILE = ".job_placeholder"

STATE_VERSION = "1"
STATE_VERSION_KEY = "INSTALLER_STATE_VERSION"

# Sensitive files are owner read/write only
SECRET_FILE_MODE = 0o600

SETUP_ENVIRONMENT = "setup-environment.sh"
DEPLOY_CONTRACTS = "deploy-contracts.sh"
CONFIGURE_NODE = "configure-node.sh"


def _read(path: Path) -> dict[str, str]:
    return {k: (v or "") for k, v in dotenv_values(path).items()}


@dataclass
class InstallerState:
    installer_dir: Path
    install_dir: Path
    operator_address: str
    job_id: str
    job_id_no_hyphens: str
    infura_api_key: str = ""
    private_key: str = ""
    job_is_placeholder: bool = False
    env: dict[str, str] = field(default_factory=dict, repr=False)
    api_keys: dict[str, str] = field(default_factory=dict, repr=False)
    contracts: dict[str, str] = field(default_factory=dict, repr=False)

    @property
    def env_path(self) -> Path:
        return self.installer_dir / ENV_FILE

    @property
    def contracts_path(self) -> Path:
        return self.installer_dir / CONTRACTS_FILE

    @property
    def client_address(self) -> str:
        return self.contracts.get("CLIENT_ADDRESS", "")

    @classmethod
    def load(cls, installer_dir: str | Path) -> "InstallerState":
        installer_dir = Path(installer_dir)

        env_path = installer_dir / ENV_FILE
        if not env_path.is_file():
            raise PrerequisiteMissing(
                f"Environment file not found: {env_path}",
                remedy=f"Please run {SETUP_ENVIRONMENT} first.",
            )
        env = _read(env_path)
        install_dir = env.get("INSTALL_DIR", "").strip()
        if not install_dir:
            raise PrerequisiteMissing(
                f"INSTALL_DIR not set in {env_path}",
                remedy=f"Please run {SETUP_ENVIRONMENT} first.",
            )

        api_keys_path = installer_dir / API_KEYS_FILE
        if not api_keys_path.is_file():
            raise PrerequisiteMissing(
                f"API keys file not found: {api_keys_path}",
                remedy=f"Please run {SETUP_ENVIRONMENT} first.",
            )
        api_keys = _read(api_keys_path)

        contracts_path = installer_dir / CONTRACTS_FILE
        if not contracts_path.is_file():
            raise PrerequisiteMissing(
                f"Contract information file not found: {contracts_path}",
                remedy=f"Please run {DEPLOY_CONTRACTS} first.",
            )
        contracts = _read(contracts_path)

        operator_address = contracts.get("OPERATOR_ADDRESS", "").strip()
        if not operator_address:
            raise PrerequisiteMissing(
                "Operator contract address not found.",
                remedy=f"Please run {DEPLOY_CONTRACTS} first.",
            )

        placeholder = (installer_dir / JOB_PLACEHOLDER_FILE).exists()
        job_id = contracts.get("JOB_ID", "").strip()
        job_id_no_hyphens = contracts.get("JOB_ID_NO_HYPHENS", "").strip()
        if job_id and not job_id_no_hyphens:
            job_id_no_hyphens = strip_job_id(job_id)
        if not job_id or not job_id_no_hyphens:
            if placeholder:
                raise PrerequisiteMissing(
                    "Only a temporary job ID placeholder was found. "
                    "A real job must be created in the Chainlink node first.",
                    remedy=f"Please run {CONFIGURE_NODE} first to create the job and get the actual job ID.",
                )
            raise PrerequisiteMissing(
                "Job ID not found.",
                remedy=f"Please run {CONFIGURE_NODE} first to create a job and get a job ID.",
            )

        if not is_valid_job_id(job_id):
            logger.warning(f"⚠️  JOB_ID {job_id!r} in {contracts_path} does not look like a Chainlink job id")

        # setup-environment also writes the key into .env
        infura_api_key = (api_keys.get("INFURA_API_KEY") or env.get("INFURA_API_KEY", "")).strip()
        if not infura_api_key:
            logger.warning(f"⚠️  INFURA_API_KEY is empty in {api_keys_path} and {env_path}; the migration will likely fail")

        return cls(
            installer_dir=installer_dir,
            install_dir=Path(install_dir),
            operator_address=operator_address,
            job_id=job_id,
            job_id_no_hyphens=job_id_no_hyphens,
            infura_api_key=infura_api_key,
            private_key=env.get("PRIVATE_KEY", "").strip(),
            job_is_placeholder=placeholder,
            env=env,
            api_keys=api_keys,
            contracts=contracts,
        )

    def save_private_key(self, private_key: str) -> Path:
        """Persist the deployer key into the installer .env (mode 600)."""
        path = set_or_append_key(self.env_path, "PRIVATE_KEY", private_key, mode=SECRET_FILE_MODE)
        self.private_key = private_key
        self.env["PRIVATE_KEY"] = private_key
        return path

    def save_client_address(self, address: str) -> Path:
        """Record the deployed client contract for later steps."""
        path = set_or_append_key(self.contracts_path, "CLIENT_ADDRESS", address)
        set_or_append_key(path, STATE_VERSION_KEY, STATE_VERSION)
        self.contracts["CLIENT_ADDRESS"] = address
        self.contracts[STATE_VERSION_KEY] = STATE_VERSION
        logger.debug(f"Saved CLIENT_ADDRESS={address} to {path}")
        return path
