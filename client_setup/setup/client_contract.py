#!/usr/bin/env python3
"""
Client contract setup flow.

Runs the installer step that deploys the client contract against the
operator contract and job created by earlier steps:

    load state -> placeholder gate -> tool checks -> stage sources
    -> npm install -> truffle present -> deployer key -> build .env
    -> patch migration -> (balance check) -> confirm -> truffle migrate
    -> extract address -> persist -> instructions + info file -> cleanup

Prompts and external commands are injected so the flow can run scripted.
Errors are raised as ``SetupError`` subclasses; the CLI maps them to exit 1.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from client_setup.config.installer_state import CONFIGURE_NODE, InstallerState
from client_setup.config.network import DEFAULT_CONTRACT_NAME, DEFAULT_NETWORK
from .artifact_extractor import extract_address
from .balance import check_deployer_balance
from .config_patcher import patch_migration_file
from .errors import PlaceholderDeclined, ValidationFailed
from .prompts import TerminalPrompter
from .staging import BUILD_DIR_NAME, MIGRATION_FILE, remove_build_dir, stage_client_build, write_build_env
from .summary import DeploymentSummary, funding_instructions, write_info_file
from .toolchain import Toolchain, ToolRunner, check_required_commands, command_exists
from .validation import deployer_address, is_valid_address, is_valid_private_key

logger = logging.getLogger(__name__)


@dataclass
class SetupOptions:
    installer_dir: Path
    client_source: Path | None = None
    build_dir: Path | None = None
    network: str = DEFAULT_NETWORK
    contract_name: str = DEFAULT_CONTRACT_NAME
    keep_build: bool = False
    check_balance: bool = False
    rpc_url: str | None = None

    def resolve_source(self) -> Path:
        if self.client_source:
            return Path(self.client_source)
        env_source = os.getenv("CLIENT_SOURCE_DIR")
        if env_source:
            return Path(env_source)
        return Path(self.installer_dir).resolve().parent / "demo-client"

    def resolve_build_dir(self, state: InstallerState) -> Path:
        return Path(self.build_dir) if self.build_dir else state.install_dir / BUILD_DIR_NAME


@dataclass
class SetupResult:
    exit_code: int
    client_address: str = ""
    info_file: Path | None = None
    deployed: bool = False


class ClientContractSetup:
    def __init__(self, options: SetupOptions, prompter=None, runner: ToolRunner | None = None, which=command_exists):
        self.options = options
        self.prompter = prompter or TerminalPrompter()
        self.runner = runner or ToolRunner()
        self._which = which
        self.state: InstallerState | None = None
        self.source_dir: Path | None = None
        self.build_dir: Path | None = None

    # -- steps ---------------------------------------------------------------

    def load_state(self) -> InstallerState:
        self.state = InstallerState.load(self.options.installer_dir)
        return self.state

    def current_state(self) -> InstallerState:
        """Loaded installer state, loading it on first use."""
        return self.state if self.state is not None else self.load_state()

    def placeholder_gate(self) -> None:
        if not self.current_state().job_is_placeholder:
            return
        logger.warning("⚠️  You are using a placeholder job ID, not a real one from Chainlink!")
        logger.warning("This will likely cause your client contract to fail when making requests.")
        logger.warning(f"Please run {CONFIGURE_NODE} first to create a real job and get the actual job ID.")
        if not self.prompter.ask_yes_no("Continue anyway with the placeholder job ID?"):
            raise PlaceholderDeclined(
                "Placeholder job ID rejected.",
                remedy=f"Please run {CONFIGURE_NODE} first.",
            )
        logger.warning("Continuing with placeholder job ID as requested. This is not recommended.")

    def check_tools(self) -> None:
        logger.info("🔍 Checking prerequisites...")
        check_required_commands(which=self._which)

    def stage(self) -> Path:
        state = self.current_state()
        self.source_dir = self.options.resolve_source()
        self.build_dir = self.options.resolve_build_dir(state)
        logger.info(f"Creating temporary directory for client contract build: {self.build_dir}")
        return stage_client_build(self.source_dir, self.build_dir, protected=(state.installer_dir,))

    def resolve_private_key(self) -> str:
        state = self.current_state()
        if state.private_key:
            logger.info("✅ Using private key from environment configuration.")
            return state.private_key

        print("You need to provide a private key for a wallet with testnet ETH for deployment.")
        print("IMPORTANT: Never use your main wallet key. Use a testing wallet with minimal funds.")
        print("NOTE: Do NOT include the '0x' prefix - Truffle does not expect it.")
        private_key = self.prompter.ask_text("Enter private key (without 0x prefix): ")
        if not is_valid_private_key(private_key):
            raise ValidationFailed(
                "Invalid private key format. It should be a 64-character hex string without 0x prefix."
            )
        state.save_private_key(private_key)
        logger.info(f"🔐 Private key saved to {state.env_path} (mode 600)")
        return private_key

    def patch_migration(self) -> Path:
        state = self.current_state()
        build_dir = self.build_dir or self.options.resolve_build_dir(state)
        migration = build_dir / MIGRATION_FILE
        logger.info("Updating migration file with oracle address and job ID...")
        patch_migration_file(migration, state.operator_address, state.job_id_no_hyphens)
        logger.info("✅ Migration file updated successfully with:")
        logger.info(f"- Oracle Address: {state.operator_address}")
        logger.info(f"- Job ID (used in contract): {state.job_id_no_hyphens}")
        return migration

    def prompt_manual_address(self) -> str:
        logger.warning(f"⚠️  Unable to automatically extract client contract address from build artifacts in {self.build_dir}.")
        print("Please check the deployment logs above for the contract address.")
        entered = self.prompter.ask_text("Enter the deployed contract address (0x...): ")
        if not entered:
            return ""
        if not is_valid_address(entered):
            logger.error("❌ Invalid address format entered.")
            return ""
        return entered

    def print_manual_deploy(self) -> None:
        logger.info("Contract deployment skipped.")
        print("You can deploy the contract manually later from the temporary directory:")
        print(f"  cd {self.build_dir}")
        print(f"  truffle migrate --network {self.options.network}")

    # -- flow ----------------------------------------------------------------

    def run(self) -> SetupResult:
        logger.info("Setting up Client Contract for the validator node...")
        state = self.load_state()
        self.placeholder_gate()
        self.check_tools()
        build_dir = self.stage()

        toolchain = Toolchain(build_dir, runner=self.runner, which=self._which)
        toolchain.install_dependencies()
        toolchain.ensure_truffle()

        private_key = self.resolve_private_key()
        write_build_env(build_dir, private_key, state.infura_api_key)
        logger.info("✅ .env file created in build directory.")

        self.patch_migration()

        if self.options.check_balance:
            check_deployer_balance(
                deployer_address(private_key),
                self.options.network,
                infura_api_key=state.infura_api_key,
                rpc_url=self.options.rpc_url,
            )

        print(f"WARNING: This will deploy the contract to the {self.options.network} network.")
        print("Make sure your wallet has enough ETH for gas fees.")
        if not self.prompter.ask_yes_no("Do you want to deploy the contract now?"):
            self.print_manual_deploy()
            return SetupResult(exit_code=0)

        toolchain.migrate(self.options.network, private_key, state.infura_api_key)
        logger.info("✅ Client contract deployed successfully!")

        client_address = extract_address(build_dir, self.options.contract_name)
        if client_address:
            logger.info(f"Client contract deployed at: {client_address}")
        else:
            client_address = self.prompt_manual_address()
        if client_address:
            state.save_client_address(client_address)
            logger.info(f"✅ Client contract address saved: {client_address}")

        summary = DeploymentSummary(
            client_address=client_address,
            operator_address=state.operator_address,
            job_id=state.job_id,
            job_id_no_hyphens=state.job_id_no_hyphens,
            contract_name=self.options.contract_name,
            network=self.options.network,
            source_dir=self.source_dir or self.options.resolve_source(),
            build_dir=build_dir,
        )
        print(funding_instructions(summary))
        info_file = write_info_file(state.installer_dir, summary)

        logger.info("✅ Client contract setup completed!")
        logger.info(f"Deployed Client Contract Address: {summary.address_label}")
        logger.info(f"Check {info_file} for all details.")

        if not self.options.keep_build and self.prompter.ask_yes_no(
            f"Do you want to remove the temporary client build directory ({build_dir})?"
        ):
            remove_build_dir(build_dir)
            logger.info("🧹 Temporary client build directory removed.")

        return SetupResult(exit_code=0, client_address=client_address, info_file=info_file, deployed=True)
