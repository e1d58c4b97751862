from __future__ import annotations

import re

from eth_account import Account
from eth_utils import to_checksum_address

from .errors import ValidationFailed

ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")
# Truffle's HD wallet provider expects the bare hex key
PRIVATE_KEY_RE = re.compile(r"^[a-fA-F0-9]{64}$")
JOB_ID_RE = re.compile(r"^[a-fA-F0-9-]{36}$|^[a-fA-F0-9]{32}$")


def is_valid_address(value: str | None) -> bool:
    return bool(value) and ADDRESS_RE.fullmatch(value) is not None


def is_valid_private_key(value: str | None) -> bool:
    return bool(value) and PRIVATE_KEY_RE.fullmatch(value) is not None


def is_valid_job_id(value: str | None) -> bool:
    return bool(value) and JOB_ID_RE.fullmatch(value) is not None


def strip_job_id(job_id: str) -> str:
    """Job id as embedded in the contract (UUID without hyphens)."""
    return job_id.strip().replace("-", "")


def deployer_address(private_key: str) -> str:
    """Checksum address of the account behind ``private_key`` (with or without 0x)."""
    key = private_key.strip()
    if not key.startswith("0x"):
        key = "0x" + key
    try:
        return to_checksum_address(Account.from_key(key).address)
    except ValueError as e:
        raise ValidationFailed(f"Private key is not usable: {e}") from e
