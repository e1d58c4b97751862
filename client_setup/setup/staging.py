from __future__ import annotations

import logging
import shutil
from pathlib import Path

from client_setup.config.installer_state import SECRET_FILE_MODE
from .config_patcher import set_or_append_key
from .errors import PrerequisiteMissing, ValidationFailed

logger = logging.getLogger(__name__)

SOURCE_DIRS = ("contracts", "migrations")
SOURCE_FILES = ("truffle-config.js", "package.json")
MIGRATION_FILE = Path("migrations") / "2_deploy_contract.js"
BUILD_DIR_NAME = "temp_client_build"


def check_source_dir(source_dir: Path) -> None:
    if not source_dir.is_dir():
        raise PrerequisiteMissing(f"Source client directory not found at {source_dir}")
    missing = [d for d in SOURCE_DIRS if not (source_dir / d).is_dir()]
    if missing:
        raise PrerequisiteMissing(
            f"Source client directory {source_dir} is missing {' and '.join(repr(m) for m in missing)} subdirectories."
        )
    missing_files = [f for f in SOURCE_FILES if not (source_dir / f).is_file()]
    if missing_files:
        raise PrerequisiteMissing(f"Source client directory {source_dir} is missing {', '.join(missing_files)}.")


def check_build_dir(build_dir: Path, source_dir: Path, protected: tuple[Path, ...] = ()) -> None:
    """Refuse build dirs whose removal would take user files with it.

    The build dir may not be, or contain, the source dir or any ``protected``
    dir, and may not sit inside the source dir.
    """
    build = build_dir.resolve()
    source = source_dir.resolve()
    for keep in (source, *(Path(p).resolve() for p in protected)):
        if build == keep or build in keep.parents:
            raise ValidationFailed(
                f"Build directory {build_dir} would remove {keep}.",
                remedy="Choose an empty or dedicated --build-dir.",
            )
    if source in build.parents:
        raise ValidationFailed(
            f"Build directory {build_dir} is inside the client source {source_dir}.",
            remedy="Choose a --build-dir outside the client source.",
        )


def stage_client_build(source_dir: str | Path, build_dir: str | Path, protected: tuple[Path, ...] = ()) -> Path:
    """Copy the client contract project into a fresh build directory.

    Any previous build directory is removed first, after ``check_build_dir``
    has cleared it. Returns the build dir.
    """
    source_dir = Path(source_dir)
    build_dir = Path(build_dir)
    check_source_dir(source_dir)
    check_build_dir(build_dir, source_dir, protected)

    if build_dir.exists():
        logger.debug(f"Removing previous build directory {build_dir}")
        shutil.rmtree(build_dir)
    build_dir.mkdir(parents=True)

    for name in SOURCE_DIRS:
        shutil.copytree(source_dir / name, build_dir / name)
    for name in SOURCE_FILES:
        shutil.copy2(source_dir / name, build_dir / name)
    logger.info(f"📁 Staged client contract sources in {build_dir}")
    return build_dir


def write_build_env(build_dir: str | Path, private_key: str, infura_api_key: str) -> Path:
    """Write the .env read by truffle-config.js (owner-only permissions)."""
    env_path = Path(build_dir) / ".env"
    if env_path.exists():
        env_path.unlink()
    set_or_append_key(env_path, "PRIVATE_KEY", private_key, mode=SECRET_FILE_MODE)
    set_or_append_key(env_path, "INFURA_API_KEY", infura_api_key, mode=SECRET_FILE_MODE)
    return env_path


def remove_build_dir(build_dir: str | Path) -> None:
    shutil.rmtree(Path(build_dir))
