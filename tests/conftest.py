from __future__ import annotations

import json
from pathlib import Path

import pytest

OPERATOR_ADDRESS = "0xAbC1234567890aBcDeF1234567890AbCdEf12123"
JOB_ID = "abcdef12-3456-7890-1234-567890123456"
JOB_ID_NO_HYPHENS = "abcdef12345678901234567890123456"
PRIVATE_KEY = "4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
CLIENT_ADDRESS = "0x1111111111111111111111111111111111111111"
ARTIFACT_ADDRESS = "0x2222222222222222222222222222222222222222"

MIGRATION_TEMPLATE = """const AIChainlinkRequest = artifacts.require("AIChainlinkRequest");

module.exports = function(deployer, network, accounts) {
  const linkTokenAddress = "0xE4aB69C077896252FAFBD49EFD26B5D171A32410";
  const oracleAddress = "0x565d2Be50501f7eCbaAD81d388530Bf8032f51dD";

  // The Job ID must be converted to bytes32
  const jobId = web3.utils.fromAscii("61746bd49cdf4ff9b596311474f0b026");

  const fee = web3.utils.toWei("0.05", "ether");
  deployer.deploy(AIChainlinkRequest, oracleAddress, jobId, fee, linkTokenAddress);
};
"""


def truffle_log(contract_name: str, address: str) -> str:
    return f"""
Compiling your contracts...
===========================
> Everything is up to date, there is nothing to compile.

2_deploy_contract.js
====================

   Deploying '{contract_name}'
   ---------------------------
   > transaction hash:    0x9e4d1f0b3c2a
   > Blocks: 2            Seconds: 4
   > contract address:    {address}
   > block number:        1234567
"""


def write_artifact(build_dir: Path, contract_name: str, address: str | None, network_id: str = "84532") -> Path:
    contracts = build_dir / "build" / "contracts"
    contracts.mkdir(parents=True, exist_ok=True)
    networks = {network_id: {"address": address, "transactionHash": "0xabc"}} if address else {}
    path = contracts / f"{contract_name}.json"
    path.write_text(json.dumps({"contractName": contract_name, "abi": [], "networks": networks}, indent=2))
    return path


class FakeRunner:
    """Stands in for npm/truffle; the migrate call writes a truffle log."""

    def __init__(self, returncodes: dict[str, int] | None = None, log_text: str | None = None, artifact_address: str | None = None,
                 contract_name: str = "AIChainlinkRequest"):
        self.returncodes = returncodes or {}
        self.log_text = log_text
        self.artifact_address = artifact_address
        self.contract_name = contract_name
        self.calls: list[dict] = []

    def run(self, cmd, cwd=None, env=None, log_path=None) -> int:
        self.calls.append({"cmd": list(cmd), "cwd": cwd, "env": dict(env or {}), "log_path": log_path})
        key = " ".join(cmd[:2])
        rc = self.returncodes.get(key, 0)
        if cmd[:2] == ["truffle", "migrate"] and rc == 0:
            if log_path is not None and self.log_text is not None:
                Path(log_path).write_text(self.log_text)
            if self.artifact_address:
                write_artifact(Path(cwd), self.contract_name, self.artifact_address)
        return rc

    def commands(self) -> list[str]:
        return [" ".join(c["cmd"]) for c in self.calls]


def all_tools(name: str) -> bool:
    return True


class ScriptedPrompter:
    """Replays a fixed sequence of answers and records the questions asked."""

    def __init__(self, answers):
        self._answers = list(answers)
        self.asked: list[str] = []

    def _next(self, prompt: str):
        self.asked.append(prompt)
        if not self._answers:
            raise AssertionError(f"Unexpected prompt: {prompt}")
        return self._answers.pop(0)

    def ask_yes_no(self, prompt: str) -> bool:
        return bool(self._next(prompt))

    def ask_text(self, prompt: str) -> str:
        return str(self._next(prompt))


@pytest.fixture
def installer(tmp_path):
    """Installer tree as left by the earlier steps, plus the client sources."""
    installer_dir = tmp_path / "installer"
    installer_dir.mkdir()
    install_dir = tmp_path / "install"
    install_dir.mkdir()

    (installer_dir / ".env").write_text(f'# written by setup-environment\nINSTALL_DIR="{install_dir}"\nNETWORK_TYPE="testnet"\n')
    (installer_dir / ".api_keys").write_text('INFURA_API_KEY="infura-test-key"\nOPENAI_API_KEY=""\n')
    (installer_dir / ".contracts").write_text(
        f'OPERATOR_ADDRESS="{OPERATOR_ADDRESS}"\n'
        f'JOB_ID="{JOB_ID}"\n'
        f'JOB_ID_NO_HYPHENS="{JOB_ID_NO_HYPHENS}"\n'
    )

    source = tmp_path / "demo-client"
    (source / "contracts").mkdir(parents=True)
    (source / "contracts" / "AIChainlinkRequest.sol").write_text("// SPDX-License-Identifier: MIT\ncontract AIChainlinkRequest {}\n")
    (source / "migrations").mkdir()
    (source / "migrations" / "1_initial_migration.js").write_text("module.exports = function() {};\n")
    (source / "migrations" / "2_deploy_contract.js").write_text(MIGRATION_TEMPLATE)
    (source / "truffle-config.js").write_text("require('dotenv').config();\nmodule.exports = {};\n")
    (source / "package.json").write_text('{"name": "client", "version": "1.0.0"}\n')
    (source / "scripts").mkdir()
    (source / "scripts" / "create_request.js").write_text("// request helper\n")

    return installer_dir
