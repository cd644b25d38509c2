"""
Package assembly.

Writes one target's EmissionResult to ``<out_dir>/<target>`` as a
publishable package.

Assembly Contract
1) Only successful emissions are assembled.
2) Files not listed in the previous descriptor are never overwritten; their
   presence fails the target with AssemblyError.
3) All-or-nothing: everything is written to a staging directory next to the
   target directory, then swapped into place with renames. The previous
   tree is removed only after the swap succeeded. On any failure the staging
   directory is removed and the previous tree is left as it was.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
import uuid
from pathlib import Path, PurePosixPath
from typing import Dict, Optional

from contractgen.assembly.descriptors import package_name, render_descriptors
from contractgen.assembly.manifest import build_descriptor, unmanaged_files, write_descriptor
from contractgen.cancellation import CancellationToken
from contractgen.constants import (
    AUTH_ENV_BY_TARGET,
    DESCRIPTOR_FILENAME,
    RETIRED_PREFIX,
    STAGING_PREFIX,
)
from contractgen.errors import AssemblyError, TargetTimeoutError
from contractgen.schemas.contract import EmissionResult, PublishablePackage, TargetConfig

logger = logging.getLogger(__name__)


def assemble(
    result: EmissionResult,
    config: TargetConfig,
    out_dir: Path,
    token: Optional[CancellationToken] = None,
) -> PublishablePackage:
    """
    Assemble one target's output into ``out_dir/<target>``.

    Args:
        result: Successful EmissionResult for the target.
        config: The TargetConfig the result was emitted with.
        out_dir: Root output directory.
        token: Cancellation token committed before the swap.

    Returns:
        PublishablePackage describing the written directory.

    Raises:
        AssemblyError: Failed emission, unmanaged files in the target
            directory, an unsafe path, or an I/O failure.
        TargetTimeoutError: The token was cancelled before the commit.
    """
    target = config.target
    if not result.success:
        reason = "; ".join(result.errors) or "unknown error"
        raise AssemblyError(target, f"cannot assemble a failed emission: {reason}")
    if result.target != target:
        raise AssemblyError(target, f"emission is for {result.target!r}, config is for {target!r}")

    out_dir = Path(out_dir)
    target_dir = out_dir / target
    if target_dir.exists() and not target_dir.is_dir():
        raise AssemblyError(target, f"{target_dir} exists and is not a directory", path=str(target_dir))

    try:
        conflicts = unmanaged_files(target_dir)
    except ValueError as e:
        raise AssemblyError(target, str(e), path=str(target_dir))
    if conflicts:
        raise AssemblyError(
            target,
            f"refusing to overwrite {target_dir}: unmanaged files {', '.join(conflicts)}",
            path=str(target_dir),
        )

    files: Dict[str, str] = {}
    for generated in result.files:
        files[_check_path(target, generated.path)] = generated.content
    for descriptor_file in render_descriptors(result, config):
        if descriptor_file.path in files:
            raise AssemblyError(target, f"generated file collides with descriptor {descriptor_file.path}")
        files[descriptor_file.path] = descriptor_file.content

    name = package_name(config)
    descriptor = build_descriptor(result, config, name, files)

    out_dir.mkdir(parents=True, exist_ok=True)
    staging = Path(tempfile.mkdtemp(prefix=f"{STAGING_PREFIX}{target}-", dir=out_dir))
    logger.debug(f"{target}: staging {len(files)} files in {staging}")
    try:
        for path in sorted(files):
            destination = staging / path
            destination.parent.mkdir(parents=True, exist_ok=True)
            with open(destination, "w", encoding="utf-8", newline="\n") as fh:
                fh.write(files[path])
        write_descriptor(staging, descriptor)
        if token is not None:
            token.commit()
        _swap(staging, target_dir, out_dir)
    except TargetTimeoutError:
        raise
    except OSError as e:
        raise AssemblyError(target, f"failed to write package: {e}", path=str(target_dir))
    finally:
        if staging.exists():
            shutil.rmtree(staging, ignore_errors=True)

    logger.info(f"{target}: assembled {name} {config.version} in {target_dir}")
    return PublishablePackage(
        target=target,
        name=name,
        version=config.version,
        registry_url=config.registry_url,
        path=target_dir,
        descriptor_path=target_dir / DESCRIPTOR_FILENAME,
        files=tuple(sorted(list(files) + [DESCRIPTOR_FILENAME])),
        dependencies=tuple(descriptor["dependencies"]),
        auth_env=AUTH_ENV_BY_TARGET[target],
    )


def _check_path(target: str, path: str) -> str:
    """Reject paths that would land outside the package directory."""
    pure = PurePosixPath(path)
    if pure.is_absolute() or ".." in pure.parts or not pure.parts:
        raise AssemblyError(target, f"unsafe generated path {path!r}", path=path)
    if pure.as_posix() == DESCRIPTOR_FILENAME:
        raise AssemblyError(target, f"generated file collides with descriptor {path}", path=path)
    return pure.as_posix()


def _swap(staging: Path, target_dir: Path, out_dir: Path) -> None:
    """Move ``staging`` into place as ``target_dir``, retiring the old tree."""
    retired: Optional[Path] = None
    if target_dir.exists():
        retired = out_dir / f"{RETIRED_PREFIX}{target_dir.name}-{uuid.uuid4().hex[:8]}"
        os.replace(target_dir, retired)
    try:
        os.replace(staging, target_dir)
    except OSError:
        if retired is not None:
            os.replace(retired, target_dir)
        raise
    if retired is not None:
        shutil.rmtree(retired, ignore_errors=True)


__all__ = ["assemble"]
