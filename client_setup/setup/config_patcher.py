#!/usr/bin/env python3
"""
Config patching helpers.

Two operations on text files shared between installer steps:

- ``set_or_append_key`` keeps a flat ``KEY="value"`` file (the installer's
  ``.env`` / ``.contracts``) at one line per key.
- ``substitute_template_value`` rewrites the quoted argument of a placeholder
  in a migration script, keeping a ``.backup`` copy and verifying the result.
"""

from __future__ import annotations

import logging
import os
import re
import shutil
from dataclasses import dataclass
from pathlib import Path

from .errors import VerificationFailed

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".backup"


def _key_regex(key: str) -> re.Pattern[str]:
    return re.compile(rf"^\s*(?:export\s+)?{re.escape(key)}\s*=")


def _check_value(value: str) -> None:
    if any(ch in value for ch in ('"', "\n", "\r")):
        raise ValueError("value must not contain double quotes or line breaks")


def set_or_append_key(path: str | Path, key: str, value: str, mode: int | None = None) -> Path:
    """Set ``key`` to ``value`` in a key=value file, appending when absent.

    The first line holding the key is rewritten in place; further lines for the
    same key are dropped. Everything else (order, comments, blanks) is kept.
    The file is created when missing. ``mode`` is applied after writing.

    Raises:
        ValueError: invalid key or value
        OSError: file cannot be read or written
    """
    if not key or not re.fullmatch(r"[A-Za-z_][A-Za-z0-9_]*", key):
        raise ValueError(f"invalid key name: {key!r}")
    _check_value(value)

    path = Path(path)
    new_line = f'{key}="{value}"'
    lines = path.read_text().splitlines() if path.exists() else []

    matcher = _key_regex(key)
    out: list[str] = []
    replaced = False
    for line in lines:
        if matcher.match(line):
            if replaced:
                logger.debug(f"Dropping duplicate {key} line in {path}")
                continue
            out.append(new_line)
            replaced = True
        else:
            out.append(line)
    if not replaced:
        out.append(new_line)

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(out) + "\n")
    if mode is not None:
        os.chmod(path, mode)
    logger.debug(f"{'Updated' if replaced else 'Appended'} {key} in {path}")
    return path


@dataclass(frozen=True)
class Placeholder:
    """A quoted literal inside a template, split into prefix/value/suffix groups."""

    name: str
    pattern: re.Pattern[str]

    def occurrences(self, text: str) -> list[re.Match[str]]:
        return list(self.pattern.finditer(text))


ORACLE_ADDRESS = Placeholder(
    name="oracle address",
    pattern=re.compile(r'(?P<prefix>const\s+oracleAddress\s*=\s*")(?P<value>[^"\n]*)(?P<suffix>";)'),
)

# Migration templates encode the job id with either helper
JOB_ID = Placeholder(
    name="job id",
    pattern=re.compile(r'(?P<prefix>web3\.utils\.(?:fromAscii|toHex)\(")(?P<value>[^"\n]*)(?P<suffix>"\))'),
)


def _verify(path: Path, placeholder: Placeholder, new_value: str) -> None:
    text = path.read_text()
    matches = placeholder.occurrences(text)
    if not matches:
        raise VerificationFailed(f"No {placeholder.name} placeholder found in {path}")
    stale = [m.group("value") for m in matches if m.group("value") != new_value]
    if stale:
        raise VerificationFailed(
            f"{placeholder.name} in {path} still holds {stale[0]!r} after substitution"
        )
    expected = matches[0].group("prefix") + new_value + matches[0].group("suffix")
    if expected not in text:
        raise VerificationFailed(f"Expected literal {expected!r} not found in {path}")


def substitute_template_value(
    path: str | Path, placeholder: Placeholder, new_value: str, backup: bool = True
) -> Path:
    """Replace every occurrence of ``placeholder``'s quoted value with ``new_value``.

    With ``backup`` the current content is first copied to ``<file>.backup``,
    replacing any older backup. Returns the backup path.

    Raises:
        VerificationFailed: the new literal is not present afterwards
        OSError: file cannot be read or written
    """
    _check_value(new_value)
    path = Path(path)
    text = path.read_text()

    backup_path = path.with_name(path.name + BACKUP_SUFFIX)
    if backup:
        shutil.copy2(path, backup_path)

    # callable replacement keeps backslashes in new_value literal
    patched, count = placeholder.pattern.subn(
        lambda m: m.group("prefix") + new_value + m.group("suffix"), text
    )
    if count:
        path.write_text(patched)
    logger.debug(f"Replaced {count} {placeholder.name} occurrence(s) in {path}")

    _verify(path, placeholder, new_value)
    return backup_path


def patch_migration_file(path: str | Path, oracle_address: str, job_id: str) -> Path:
    """Point a migration script at the operator contract and job id.

    One backup is taken before the first substitution, so it holds the
    migration as it was before this call.
    """
    backup = substitute_template_value(path, ORACLE_ADDRESS, oracle_address)
    substitute_template_value(path, JOB_ID, job_id, backup=False)
    return backup
