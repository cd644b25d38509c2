"""
Generator configuration for contractgen.

This module defines:
- GeneratorConfig: the run-level parameters (spec path, targets, output
  directory, timeout, worker pool) in one dataclass
- build_target_config(): validation of one target's option mapping into a
  TargetConfig
- load_target_options() / load_target_configs(): the YAML/JSON config file
  passed with ``--config``

Environment defaults (``CONTRACTGEN_TIMEOUT_SECONDS``,
``CONTRACTGEN_MAX_WORKERS``) are read through python-dotenv so a ``.env``
file next to the build works the same as exported variables.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Union

import yaml
from dotenv import load_dotenv

from contractgen.constants import (
    COMMON_OPTIONS,
    DATE_REPRESENTATIONS,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_VERSION,
    NAMING_CONVENTIONS,
    NULLABILITY_POLICIES,
    TARGET_ALIASES,
    TARGET_DEFAULTS,
    TARGET_OPTIONS,
    TARGETS,
)
from contractgen.errors import ConfigError
from contractgen.schemas.contract import TargetConfig
from contractgen.utils.text import is_semver

logger = logging.getLogger(__name__)

ENV_TIMEOUT = "CONTRACTGEN_TIMEOUT_SECONDS"
ENV_MAX_WORKERS = "CONTRACTGEN_MAX_WORKERS"


# =============================================================================
# TARGET NAMES
# =============================================================================

def normalize_target_name(name: str) -> str:
    """Map a target name or alias (``ts``, ``py``) to its canonical name."""
    key = str(name).strip().lower()
    key = TARGET_ALIASES.get(key, key)
    if key not in TARGETS:
        raise ConfigError(
            f"Unknown target {name!r}; expected one of {', '.join(TARGETS)}"
        )
    return key


def normalize_targets(targets: Union[str, Iterable[str]]) -> List[str]:
    """Parse a CSV string or list of targets, dropping duplicates in order."""
    if isinstance(targets, str):
        raw = [t for t in targets.split(",")]
    else:
        raw = list(targets)
    result: List[str] = []
    for name in raw:
        if not str(name).strip():
            continue
        canonical = normalize_target_name(name)
        if canonical not in result:
            result.append(canonical)
    if not result:
        raise ConfigError("No targets requested")
    return result


# =============================================================================
# RUN CONFIG
# =============================================================================

@dataclass
class GeneratorConfig:
    """
    Configuration for one generation run.

    Attributes:
        spec_path: Contract document to load.
        out_dir: Root output directory; each target writes ``out_dir/<target>``.
        targets: Canonical target names, in requested order.
        config_path: Optional YAML/JSON file with per-target options.
        timeout_seconds: Per-target deadline for emit + assemble.
        max_workers: Thread pool size. None means one worker per target.
        parallel: Run targets on a thread pool (False runs them in order).
        show_progress: Show a tqdm progress bar over target completion.
    """

    spec_path: Path
    out_dir: Path = field(default_factory=lambda: Path("generated"))
    targets: List[str] = field(default_factory=lambda: list(TARGETS))
    config_path: Optional[Path] = None

    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    max_workers: Optional[int] = None
    parallel: bool = True
    show_progress: bool = False

    def __post_init__(self):
        if isinstance(self.spec_path, str):
            self.spec_path = Path(self.spec_path)
        if isinstance(self.out_dir, str):
            self.out_dir = Path(self.out_dir)
        if isinstance(self.config_path, str):
            self.config_path = Path(self.config_path)

        self.targets = normalize_targets(self.targets)

        if self.timeout_seconds is None or float(self.timeout_seconds) <= 0:
            raise ConfigError(f"timeout_seconds must be positive, got {self.timeout_seconds!r}")
        self.timeout_seconds = float(self.timeout_seconds)
        if self.max_workers is not None and int(self.max_workers) < 1:
            raise ConfigError(f"max_workers must be >= 1, got {self.max_workers!r}")

    @classmethod
    def from_env(
        cls,
        spec_path: Union[str, Path],
        env_file: Optional[Path] = None,
        **overrides,
    ) -> "GeneratorConfig":
        """
        Create a config with defaults taken from the environment.

        Args:
            spec_path: Contract document to load.
            env_file: Explicit dotenv file. Defaults to ``.env`` lookup.
            **overrides: Field values that win over environment defaults.
                None values are treated as "not given".

        Returns:
            GeneratorConfig.
        """
        load_dotenv(dotenv_path=env_file, override=False)
        values: Dict[str, object] = {}

        raw_timeout = os.getenv(ENV_TIMEOUT)
        if raw_timeout:
            try:
                values["timeout_seconds"] = float(raw_timeout)
            except ValueError:
                raise ConfigError(f"{ENV_TIMEOUT} is not a number: {raw_timeout!r}")

        raw_workers = os.getenv(ENV_MAX_WORKERS)
        if raw_workers:
            try:
                values["max_workers"] = int(raw_workers)
            except ValueError:
                raise ConfigError(f"{ENV_MAX_WORKERS} is not an integer: {raw_workers!r}")

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(spec_path=Path(spec_path), **values)


# =============================================================================
# TARGET CONFIG
# =============================================================================

def _check_choice(target: str, key: str, value: object, choices) -> str:
    if value not in choices:
        raise ConfigError(
            f"{key} must be one of {', '.join(choices)}, got {value!r}",
            target=target,
        )
    return str(value)


def build_target_config(
    target: str,
    options: Optional[Mapping[str, object]] = None,
) -> TargetConfig:
    """
    Validate an option mapping into a TargetConfig.

    Target defaults are applied first, then ``options``. Unrecognized keys are
    ignored with a warning; invalid values of recognized keys raise.

    Args:
        target: Target name or alias.
        options: Raw options (camelCase keys as written in the config file).

    Returns:
        TargetConfig.

    Raises:
        ConfigError: Unknown target, invalid enum value, empty package name or
            a version that is not a semantic version.
    """
    target = normalize_target_name(target)
    merged: Dict[str, object] = {"version": DEFAULT_VERSION}
    merged.update(TARGET_DEFAULTS[target])
    merged.update(dict(options or {}))

    recognized = COMMON_OPTIONS | TARGET_OPTIONS[target]
    warnings: List[str] = []
    for key in sorted(k for k in merged if k not in recognized):
        message = f"Ignoring unrecognized option {key!r}"
        logger.warning(f"{target}: {message}")
        warnings.append(message)

    naming = _check_choice(target, "namingConvention", merged["namingConvention"], NAMING_CONVENTIONS)
    dates = _check_choice(target, "dateRepresentation", merged["dateRepresentation"], DATE_REPRESENTATIONS)
    nullability = _check_choice(target, "nullabilityPolicy", merged["nullabilityPolicy"], NULLABILITY_POLICIES)

    version = merged.get("version")
    if not isinstance(version, str) or not is_semver(version):
        raise ConfigError(f"version {version!r} is not a valid semantic version", target=target)

    package_name = merged.get("packageName")
    if not isinstance(package_name, str) or not package_name.strip():
        raise ConfigError("packageName must be a non-empty string", target=target)

    extra = {
        key: str(value)
        for key, value in merged.items()
        if key in recognized
        and key not in {"namingConvention", "dateRepresentation", "nullabilityPolicy", "packageName", "version", "registryUrl"}
        and value is not None
    }

    return TargetConfig(
        target=target,
        naming_convention=naming,
        date_representation=dates,
        nullability_policy=nullability,
        package_name=package_name.strip(),
        version=version,
        registry_url=str(merged.get("registryUrl") or ""),
        options=extra,
        warnings=tuple(warnings),
    )


# =============================================================================
# CONFIG FILE
# =============================================================================

def read_config_file(path: Path) -> Dict[str, object]:
    """Read the raw config mapping from a YAML or JSON file."""
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except yaml.YAMLError as e:
        raise ConfigError(f"Config file {path} is not valid YAML/JSON: {e}")
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


def load_target_options(
    path: Optional[Path],
    targets: Iterable[str],
) -> Dict[str, Dict[str, object]]:
    """
    Resolve the raw option mapping for each requested target.

    ``defaults`` apply to every target; ``targets.<name>`` (aliases allowed)
    override them. Sections for targets that were not requested are skipped.
    """
    targets = [normalize_target_name(t) for t in targets]
    if path is None:
        return {t: {} for t in targets}

    data = read_config_file(path)
    for key in sorted(k for k in data if k not in {"defaults", "targets"}):
        logger.warning(f"Ignoring unrecognized config section {key!r} in {path}")

    defaults = data.get("defaults") or {}
    sections = data.get("targets") or {}
    if not isinstance(defaults, dict) or not isinstance(sections, dict):
        raise ConfigError(f"Config file {path}: 'defaults' and 'targets' must be mappings")

    per_target: Dict[str, Dict[str, object]] = {}
    for name, section in sections.items():
        try:
            canonical = normalize_target_name(name)
        except ConfigError:
            logger.warning(f"Ignoring config for unknown target {name!r}")
            continue
        if section is not None and not isinstance(section, dict):
            raise ConfigError(f"Config for target {name!r} must be a mapping", target=canonical)
        per_target.setdefault(canonical, {}).update(section or {})

    resolved: Dict[str, Dict[str, object]] = {}
    for target in targets:
        options = dict(defaults)
        options.update(per_target.get(target, {}))
        resolved[target] = options
    return resolved


def load_target_configs(
    path: Optional[Path],
    targets: Iterable[str],
) -> Dict[str, TargetConfig]:
    """Load and validate every requested target's config; raises on the first error."""
    options = load_target_options(path, targets)
    return {target: build_target_config(target, opts) for target, opts in options.items()}


__all__ = [
    "GeneratorConfig",
    "normalize_target_name",
    "normalize_targets",
    "build_target_config",
    "read_config_file",
    "load_target_options",
    "load_target_configs",
]
