"""
Package descriptor utilities.

The descriptor (``contractgen.json``) records what an assembled package is
and which files contractgen manages in its directory. The next run relies on
it to tell generated files (safe to replace) from files a person added
(never overwritten).
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from contractgen.constants import AUTH_ENV_BY_TARGET, DESCRIPTOR_FILENAME
from contractgen.schemas.contract import EmissionResult, TargetConfig
from contractgen.utils.text import digest_files

DESCRIPTOR_SCHEMA_VERSION = 1


def build_descriptor(
    result: EmissionResult,
    config: TargetConfig,
    name: str,
    files: Mapping[str, str],
) -> Dict[str, object]:
    """Create the descriptor dictionary for an assembled package."""
    return {
        "schema_version": DESCRIPTOR_SCHEMA_VERSION,
        "name": name,
        "version": config.version,
        "target": config.target,
        "registry": config.registry_url,
        "dependencies": [f"{dep}@{version}" for dep, version in result.dependencies],
        "auth_env": list(AUTH_ENV_BY_TARGET[config.target]),
        "warnings": [str(w) for w in result.warnings],
        "files": sorted(files),
        "content_hash": digest_files(files),
    }


def write_descriptor(output_dir: Path, descriptor: Dict[str, object]) -> Path:
    """Persist descriptor to disk."""
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / DESCRIPTOR_FILENAME
    with open(path, "w", encoding="utf-8", newline="\n") as fh:
        json.dump(descriptor, fh, indent=2, sort_keys=True)
        fh.write("\n")
    return path


def load_descriptor(output_dir: Path) -> Dict[str, object]:
    """Load descriptor from disk."""
    path = output_dir / DESCRIPTOR_FILENAME
    if not path.exists():
        raise FileNotFoundError(f"No contractgen descriptor found at {path}")
    with open(path, "r", encoding="utf-8") as fh:
        return json.load(fh)


def list_files(directory: Path) -> List[str]:
    """Every regular file under ``directory`` as sorted POSIX relative paths."""
    found: List[str] = []
    for root, _, names in os.walk(directory):
        for name in names:
            found.append((Path(root) / name).relative_to(directory).as_posix())
    return sorted(found)


def unmanaged_files(directory: Path) -> Optional[List[str]]:
    """
    Files in an existing package directory that contractgen does not own.

    Returns None when the directory does not exist. A non-empty directory
    without a descriptor is entirely unmanaged.

    Raises:
        ValueError: The descriptor exists but cannot be parsed.
    """
    if not directory.exists():
        return None
    present = list_files(directory)
    try:
        descriptor = load_descriptor(directory)
    except FileNotFoundError:
        return present
    except json.JSONDecodeError as e:
        raise ValueError(f"Unreadable descriptor in {directory}: {e}")

    managed = set(descriptor.get("files") or []) | {DESCRIPTOR_FILENAME}
    return [path for path in present if path not in managed]


__all__ = [
    "DESCRIPTOR_SCHEMA_VERSION",
    "build_descriptor",
    "write_descriptor",
    "load_descriptor",
    "list_files",
    "unmanaged_files",
]
