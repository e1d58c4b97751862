#!/usr/bin/env python3
"""
Deployed address recovery from migration output.

Artifact layouts differ between toolchain versions, so the address is looked
up by an ordered list of strategies; the first non-empty answer wins:

1. the migrate console log tee'd into ``<build_dir>/truffle-output.log``
2. ``networks.*.address`` in ``<build_dir>/build/contracts/**/<Name>.json``
3. a raw text scan of ``build/contracts`` for ``"address": "0x..."``

An empty string means nothing was found and the operator has to be asked.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable
from pathlib import Path

from .validation import is_valid_address

logger = logging.getLogger(__name__)

DEPLOY_LOG_NAME = "truffle-output.log"
ARTIFACTS_SUBDIR = Path("build") / "contracts"
# How many lines after "Deploying '<Name>'" may hold the address
LOG_LOOKAHEAD = 5

RAW_ADDRESS_RE = re.compile(r'"address":\s*"([^"]+)"')

Strategy = Callable[[Path, str], str]


def _accept(candidate: str | None, source: str) -> str:
    if not candidate:
        return ""
    candidate = candidate.strip().strip("'\",")
    if not is_valid_address(candidate):
        logger.debug(f"Ignoring malformed address {candidate!r} from {source}")
        return ""
    return candidate


def from_deploy_log(build_dir: Path, contract_name: str) -> str:
    log_path = Path(build_dir) / DEPLOY_LOG_NAME
    if not log_path.is_file():
        return ""
    lines = log_path.read_text(errors="replace").splitlines()
    marker = f"Deploying '{contract_name}'"
    for i, line in enumerate(lines):
        if marker not in line:
            continue
        for follow in lines[i + 1 : i + 1 + LOG_LOOKAHEAD]:
            if "contract address:" in follow:
                tokens = follow.split()
                address = _accept(tokens[-1] if tokens else "", str(log_path))
                if address:
                    return address
    return ""


def _artifact_files(build_dir: Path) -> list[Path]:
    root = Path(build_dir) / ARTIFACTS_SUBDIR
    if not root.is_dir():
        return []
    return sorted(p for p in root.rglob("*") if p.is_file())


def from_structured_artifacts(build_dir: Path, contract_name: str) -> str:
    for path in _artifact_files(build_dir):
        if path.name != f"{contract_name}.json":
            continue
        try:
            with open(path) as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.debug(f"Skipping unreadable artifact {path}: {e}")
            continue
        networks = data.get("networks") if isinstance(data, dict) else None
        if not isinstance(networks, dict):
            continue
        for network_id, deployment in networks.items():
            if not isinstance(deployment, dict):
                continue
            address = _accept(deployment.get("address"), f"{path} (network {network_id})")
            if address:
                return address
    return ""


def from_raw_artifact_text(build_dir: Path, contract_name: str) -> str:
    needle = contract_name.lower()
    for path in _artifact_files(build_dir):
        try:
            text = path.read_text(errors="replace")
        except OSError as e:
            logger.debug(f"Skipping unreadable file {path}: {e}")
            continue
        for line in text.splitlines():
            if '"address":' not in line:
                continue
            # grep -r style context: artifact path plus the matching line
            if needle not in f"{path.relative_to(build_dir)}:{line}".lower():
                continue
            m = RAW_ADDRESS_RE.search(line)
            address = _accept(m.group(1) if m else "", str(path))
            if address:
                return address
    return ""


DEFAULT_STRATEGIES: tuple[Strategy, ...] = (
    from_deploy_log,
    from_structured_artifacts,
    from_raw_artifact_text,
)


def extract_address(
    build_dir: str | Path,
    contract_name: str,
    strategies: tuple[Strategy, ...] | list[Strategy] = DEFAULT_STRATEGIES,
) -> str:
    """Return the deployed address of ``contract_name`` or "" when not found."""
    build_dir = Path(build_dir)
    for strategy in strategies:
        address = strategy(build_dir, contract_name)
        if address:
            logger.debug(f"{strategy.__name__} found {contract_name} at {address}")
            return address
        logger.debug(f"{strategy.__name__} found nothing for {contract_name}")
    return ""
