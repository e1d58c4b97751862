#!/usr/bin/env python3
"""
External toolchain invocations (npm, truffle).

All commands are blocking and have no timeout. ``migrate`` streams the tool
output to the console and copies it into ``<build_dir>/truffle-output.log``
so the address extractor can read it afterwards.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import sys
from pathlib import Path

from .artifact_extractor import DEPLOY_LOG_NAME
from .errors import PrerequisiteMissing, ToolInvocationFailed

logger = logging.getLogger(__name__)

INSTALL_HINTS: dict[str, list[str]] = {
    "node": [
        "curl -o- https://raw.githubusercontent.com/nvm-sh/nvm/v0.39.0/install.sh | bash",
        "source ~/.bashrc",
        "nvm install 18.17",
    ],
    "npm": ["Please install npm first."],
    "git": ["Please install git first."],
}
REQUIRED_COMMANDS = ("node", "npm", "git")


def command_exists(name: str) -> bool:
    return shutil.which(name) is not None


def check_required_commands(commands: tuple[str, ...] = REQUIRED_COMMANDS, which=command_exists) -> None:
    for name in commands:
        if not which(name):
            hints = "\n  ".join(INSTALL_HINTS.get(name, []))
            raise PrerequisiteMissing(
                f"{name} is not installed.",
                remedy=f"Please install {name} first:\n  {hints}" if hints else None,
            )


class ToolRunner:
    """Runs external commands; replaced by a fake in tests."""

    def run(
        self,
        cmd: list[str],
        cwd: Path | None = None,
        env: dict[str, str] | None = None,
        log_path: Path | None = None,
    ) -> int:
        full_env = {**os.environ, **(env or {})}
        logger.debug(f"Running: {' '.join(cmd)} (cwd={cwd})")
        if log_path is None:
            return subprocess.run(cmd, cwd=cwd, env=full_env).returncode

        # Tee stdout/stderr to the console and the log file
        with open(log_path, "w", encoding="utf-8") as log_file:
            proc = subprocess.Popen(
                cmd,
                cwd=cwd,
                env=full_env,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
                bufsize=1,
            )
            try:
                for line in proc.stdout:
                    sys.stdout.write(line)
                    log_file.write(line)
            finally:
                rc = proc.wait()
            return rc


class Toolchain:
    """npm + truffle steps run inside the staged build directory."""

    def __init__(self, build_dir: Path, runner: ToolRunner | None = None, which=command_exists):
        self.build_dir = Path(build_dir)
        self.runner = runner or ToolRunner()
        self._which = which

    def _run(self, cmd: list[str], remedy: str | None = None, **kwargs) -> None:
        rc = self.runner.run(cmd, cwd=self.build_dir, **kwargs)
        if rc != 0:
            raise ToolInvocationFailed(cmd, rc, remedy=remedy)

    def install_dependencies(self) -> None:
        logger.info("📦 Installing npm dependencies in build directory...")
        self._run(["npm", "install", "--legacy-peer-deps"])
        # truffle-config.js requires dotenv
        logger.info("📦 Installing dotenv package in build directory...")
        self._run(["npm", "install", "dotenv", "--save"])

    def ensure_truffle(self) -> None:
        if self._which("truffle"):
            return
        logger.warning("⚠️  Truffle not found. Installing globally...")
        self._run(["npm", "install", "-g", "truffle"], remedy="Please install manually:\n  npm install -g truffle")
        if not self._which("truffle"):
            raise ToolInvocationFailed(
                ["npm", "install", "-g", "truffle"],
                0,
                remedy="Truffle is still not on PATH. Please install manually:\n  npm install -g truffle",
            )
        logger.info("✅ Truffle installed successfully.")

    @property
    def deploy_log(self) -> Path:
        return self.build_dir / DEPLOY_LOG_NAME

    def migrate(self, network: str, private_key: str, infura_api_key: str) -> None:
        logger.info(f"🚀 Running truffle migrate --network {network}...")
        self._run(
            ["truffle", "migrate", "--network", network],
            remedy="Please check the output above for more information.",
            env={"PRIVATE_KEY": private_key, "INFURA_API_KEY": infura_api_key},
            log_path=self.deploy_log,
        )
