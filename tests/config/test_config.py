from __future__ import annotations

from pathlib import Path

import pytest

from contractgen.config import (
    ENV_MAX_WORKERS,
    ENV_TIMEOUT,
    GeneratorConfig,
    build_target_config,
    load_target_configs,
    load_target_options,
    normalize_targets,
)
from contractgen.errors import ConfigError


def test_target_aliases_are_normalized():
    assert normalize_targets("java, ts,typescript-axios,py,golang") == ["java", "typescript", "python", "go"]


def test_unknown_target_raises():
    with pytest.raises(ConfigError, match="Unknown target"):
        normalize_targets("java,cobol")


def test_target_defaults_applied():
    config = build_target_config("python")

    assert config.naming_convention == "snake_case"
    assert config.nullability_policy == "optionalWrapper"
    assert config.version == "0.1.0"
    assert config.package_name == "contract_models"


def test_unrecognized_options_warn_but_do_not_fail(caplog):
    config = build_target_config("java", {"flavour": "spicy", "groupId": "com.example"})

    assert config.option("groupId") == "com.example"
    assert "flavour" not in config.options
    assert any("flavour" in w for w in config.warnings)
    assert "flavour" in caplog.text


@pytest.mark.parametrize("options", [
    {"version": "1.1"},
    {"version": 2},
    {"namingConvention": "kebab"},
    {"dateRepresentation": "unix"},
    {"nullabilityPolicy": "maybe"},
    {"packageName": "  "},
])
def test_invalid_options_raise(options):
    with pytest.raises(ConfigError) as exc:
        build_target_config("typescript", options)
    assert exc.value.target == "typescript"


def test_config_file_defaults_and_overrides(targets_config_path: Path):
    options = load_target_options(targets_config_path, ["java", "typescript"])

    assert options["java"]["version"] == "1.1.0"
    assert options["java"]["artifactId"] == "meals-contract"
    assert options["typescript"]["npmName"] == "@example/meals-client"


def test_load_target_configs(targets_config_path: Path):
    configs = load_target_configs(targets_config_path, ["go", "python"])

    assert configs["go"].option("modulePath") == "github.com/example/meals-go"
    assert configs["python"].package_name == "meals_models"
    assert configs["python"].option("repositoryUrl") == "https://github.com/example/meals"


def test_config_file_must_be_mapping(tmp_path: Path):
    path = tmp_path / "bad.yaml"
    path.write_text("- a\n- b\n")
    with pytest.raises(ConfigError):
        load_target_options(path, ["java"])


def test_generator_config_from_env(tmp_path: Path, monkeypatch):
    monkeypatch.setenv(ENV_TIMEOUT, "5")
    monkeypatch.setenv(ENV_MAX_WORKERS, "2")

    config = GeneratorConfig.from_env(
        tmp_path / "spec.yaml",
        env_file=tmp_path / "missing.env",
        targets="ts,go",
        out_dir=str(tmp_path / "out"),
        timeout_seconds=None,
    )

    assert config.timeout_seconds == 5.0
    assert config.max_workers == 2
    assert config.targets == ["typescript", "go"]
    assert config.out_dir == tmp_path / "out"


def test_generator_config_rejects_bad_timeout(tmp_path: Path):
    with pytest.raises(ConfigError):
        GeneratorConfig(spec_path=tmp_path / "spec.yaml", timeout_seconds=0)
