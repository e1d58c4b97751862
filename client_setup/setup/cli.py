#!/usr/bin/env python3
from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from client_setup.config.installer_state import SECRET_FILE_MODE
from client_setup.config.logging_config import get_setup_logger
from client_setup.config.network import CHAINS, DEFAULT_CONTRACT_NAME, DEFAULT_NETWORK
from .artifact_extractor import extract_address
from .client_contract import ClientContractSetup, SetupOptions
from .config_patcher import patch_migration_file, set_or_append_key
from .errors import SetupError
from .prompts import AutoPrompter, TerminalPrompter
from .validation import is_valid_address, is_valid_private_key, strip_job_id

logger = logging.getLogger(__name__)

INTRO = """============================================================
          Validator Node - Client Contract Setup
============================================================

This step sets up the client contract for your validator node.
The client contract connects frontend applications to the oracle
network and lets you make requests to your Chainlink node.

The step will:
  1. Stage the client contract sources in a temporary directory
  2. Install dependencies (Truffle, Chainlink contracts, etc.)
  3. Configure the contract with your operator address and job ID
  4. Deploy the contract to the target network
  5. Guide you through funding and authorization steps

Prerequisites:
  - Operator contract deployed (from deploy-contracts.sh)
  - Chainlink job configured (from configure-node.sh)
  - A wallet with testnet ETH for deployment
  - Access to testnet LINK tokens for oracle payments
"""


def _report(err: SetupError) -> int:
    print(f"❌ Error: {err}", file=sys.stderr)
    if err.remedy:
        print(err.remedy, file=sys.stderr)
    logger.error(f"{type(err).__name__}: {err}")
    return 1


def cmd_deploy(args: argparse.Namespace) -> int:
    installer_dir = Path(args.installer_dir or os.getenv("INSTALLER_DIR") or ".").resolve()
    log_dir = Path(os.getenv("CLIENT_SETUP_LOG_DIR") or installer_dir / "logs")
    get_setup_logger(log_dir=log_dir, debug=args.debug)

    prompter = AutoPrompter(answer=True) if args.yes else TerminalPrompter()
    if args.intro:
        print(INTRO)
        if not args.yes:
            input("Press ENTER to continue or CTRL+C to cancel")

    options = SetupOptions(
        installer_dir=installer_dir,
        client_source=Path(args.client_source) if args.client_source else None,
        build_dir=Path(args.build_dir) if args.build_dir else None,
        network=args.network,
        contract_name=args.contract_name,
        keep_build=args.keep_build,
        check_balance=args.check_balance,
        rpc_url=args.rpc_url,
    )
    try:
        result = ClientContractSetup(options, prompter=prompter).run()
        return result.exit_code
    except SetupError as e:
        return _report(e)
    except (ValueError, OSError) as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        logger.error(f"Setup aborted: {e}", exc_info=True)
        return 1


def cmd_set_key(args: argparse.Namespace) -> int:
    try:
        path = set_or_append_key(args.file, args.key, args.value, mode=SECRET_FILE_MODE if args.secure else None)
        print(f"✅ {args.key} set in {path}")
        return 0
    except (ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_patch_migration(args: argparse.Namespace) -> int:
    job_id = strip_job_id(args.job_id)
    try:
        backup = patch_migration_file(args.file, args.oracle_address, job_id)
    except SetupError as e:
        return _report(e)
    except (ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    print(f"✅ Patched {args.file} (backup: {backup})")
    print(f"- Oracle Address: {args.oracle_address}")
    print(f"- Job ID: {job_id}")
    return 0


def cmd_extract_address(args: argparse.Namespace) -> int:
    address = extract_address(Path(args.build_dir), args.contract_name)
    if not address:
        print(f"No deployed address found for {args.contract_name} in {args.build_dir}", file=sys.stderr)
        return 1
    print(address)
    return 0


def cmd_validate_address(args: argparse.Namespace) -> int:
    ok = is_valid_address(args.address)
    print("valid" if ok else "invalid")
    return 0 if ok else 1


def cmd_validate_private_key(args: argparse.Namespace) -> int:
    ok = is_valid_private_key(args.key)
    print("valid" if ok else "invalid (expected 64 hex characters without 0x prefix)")
    return 0 if ok else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Client contract setup for the validator node installer")
    sub = parser.add_subparsers(dest="cmd")

    p_dep = sub.add_parser("deploy", help="Stage, configure and deploy the client contract")
    p_dep.add_argument("--installer-dir", help="Installer directory holding .env/.api_keys/.contracts (default INSTALLER_DIR or cwd)")
    p_dep.add_argument("--client-source", help="Client contract source directory (default <installer-dir>/../demo-client)")
    p_dep.add_argument("--build-dir", help="Temporary build directory (default <INSTALL_DIR>/temp_client_build)")
    p_dep.add_argument("--network", default=DEFAULT_NETWORK, choices=sorted(CHAINS), help=f"Migration network (default {DEFAULT_NETWORK})")
    p_dep.add_argument("--contract-name", default=DEFAULT_CONTRACT_NAME, help=f"Deployed contract name (default {DEFAULT_CONTRACT_NAME})")
    p_dep.add_argument("--yes", action="store_true", help="Answer yes to every confirmation (non-interactive)")
    p_dep.add_argument("--keep-build", action="store_true", help="Keep the temporary build directory without asking")
    p_dep.add_argument("--check-balance", action="store_true", help="Check the deployer balance over RPC before deploying")
    p_dep.add_argument("--rpc-url", help="RPC URL for --check-balance (default Infura endpoint from INFURA_API_KEY)")
    p_dep.add_argument("--intro", action="store_true", help="Print an overview of the step before starting")
    p_dep.add_argument("--debug", action="store_true", help="Verbose logging")
    p_dep.set_defaults(func=cmd_deploy)

    p_key = sub.add_parser("set-key", help="Set or append KEY=\"value\" in a key=value file")
    p_key.add_argument("file", help="Target file (created if missing)")
    p_key.add_argument("key", help="Key name")
    p_key.add_argument("value", help="Value (no double quotes or newlines)")
    p_key.add_argument("--secure", action="store_true", help="Restrict the file to owner read/write (600)")
    p_key.set_defaults(func=cmd_set_key)

    p_mig = sub.add_parser("patch-migration", help="Write oracle address and job ID into a migration script")
    p_mig.add_argument("file", help="Migration script, e.g. migrations/2_deploy_contract.js")
    p_mig.add_argument("--oracle-address", required=True, help="Operator contract address")
    p_mig.add_argument("--job-id", required=True, help="Job ID (hyphens are stripped)")
    p_mig.set_defaults(func=cmd_patch_migration)

    p_ext = sub.add_parser("extract-address", help="Find the deployed contract address in build output")
    p_ext.add_argument("build_dir", help="Directory the migration ran in")
    p_ext.add_argument("--contract-name", default=DEFAULT_CONTRACT_NAME, help=f"Contract name (default {DEFAULT_CONTRACT_NAME})")
    p_ext.set_defaults(func=cmd_extract_address)

    p_va = sub.add_parser("validate-address", help="Check a 0x-prefixed 20-byte hex address")
    p_va.add_argument("address")
    p_va.set_defaults(func=cmd_validate_address)

    p_vk = sub.add_parser("validate-private-key", help="Check a 64-hex-character private key without 0x")
    p_vk.add_argument("key")
    p_vk.set_defaults(func=cmd_validate_private_key)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return 2
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
