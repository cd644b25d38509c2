from __future__ import annotations

import json
from pathlib import Path

import pytest

from contractgen.assembly import assemble, load_descriptor, unmanaged_files
from contractgen.cancellation import CancellationToken
from contractgen.constants import DESCRIPTOR_FILENAME, RETIRED_PREFIX, STAGING_PREFIX
from contractgen.emitters import get_emitter
from contractgen.errors import AssemblyError, TargetTimeoutError
from contractgen.schemas.contract import EmissionResult, GeneratedFile


def _emit(ir, config):
    return get_emitter(config.target).emit(ir, config)


def _leftovers(out_dir: Path):
    return [p.name for p in out_dir.iterdir() if p.name.startswith((STAGING_PREFIX, RETIRED_PREFIX))]


def test_java_package_layout(tmp_path, meals_ir, target_config):
    config = target_config("java", groupId="com.example", artifactId="meals-contract", version="1.1.0")
    package = assemble(_emit(meals_ir, config), config, tmp_path)

    root = tmp_path / "java"
    assert package.path == root
    assert package.name == "com.example:meals-contract"
    assert package.version == "1.1.0"
    assert package.auth_env == ("GITHUB_ACTOR", "GITHUB_TOKEN")
    assert (root / "pom.xml").exists()
    assert (root / "src/main/java/com/example/contract/model/Meal.java").exists()
    assert DESCRIPTOR_FILENAME in package.files

    pom = (root / "pom.xml").read_text()
    assert "<artifactId>meals-contract</artifactId>" in pom
    assert "<artifactId>jackson-databind</artifactId>" in pom
    assert "<id>contractgen-publish</id>" in pom


def test_descriptor_lists_managed_files(tmp_path, meal_ir, target_config):
    config = target_config("python")
    package = assemble(_emit(meal_ir, config), config, tmp_path)

    descriptor = load_descriptor(package.path)
    assert descriptor["target"] == "python"
    assert descriptor["name"] == "contract-models"
    assert descriptor["dependencies"] == ["pydantic@>=2.0"]
    assert "pyproject.toml" in descriptor["files"]
    assert DESCRIPTOR_FILENAME not in descriptor["files"]
    assert sorted(descriptor["files"] + [DESCRIPTOR_FILENAME]) == list(package.files)
    assert unmanaged_files(package.path) == []


def test_rerun_is_idempotent(tmp_path, meals_ir, target_config):
    config = target_config("typescript")
    result = _emit(meals_ir, config)

    assemble(result, config, tmp_path)
    first = {p: (tmp_path / "typescript" / p).read_bytes() for p in load_descriptor(tmp_path / "typescript")["files"]}
    assemble(result, config, tmp_path)
    second = {p: (tmp_path / "typescript" / p).read_bytes() for p in load_descriptor(tmp_path / "typescript")["files"]}

    assert first == second
    assert _leftovers(tmp_path) == []


def test_stale_generated_files_are_replaced(tmp_path, meals_ir, meal_ir, target_config):
    config = target_config("go")
    assemble(_emit(meals_ir, config), config, tmp_path)
    assert (tmp_path / "go" / "model_meal_plan.go").exists()

    assemble(_emit(meal_ir, config), config, tmp_path)
    assert not (tmp_path / "go" / "model_meal_plan.go").exists()
    assert (tmp_path / "go" / "model_meal.go").exists()


def test_unmanaged_files_block_assembly(tmp_path, meal_ir, target_config):
    config = target_config("go")
    result = _emit(meal_ir, config)
    assemble(result, config, tmp_path)
    before = (tmp_path / "go" / "model_meal.go").read_text()
    (tmp_path / "go" / "handwritten.go").write_text("package contract\n")

    with pytest.raises(AssemblyError, match="handwritten.go"):
        assemble(result, config, tmp_path)

    assert (tmp_path / "go" / "handwritten.go").read_text() == "package contract\n"
    assert (tmp_path / "go" / "model_meal.go").read_text() == before
    assert _leftovers(tmp_path) == []


def test_directory_without_descriptor_is_unmanaged(tmp_path, meal_ir, target_config):
    config = target_config("python")
    (tmp_path / "python").mkdir()
    (tmp_path / "python" / "notes.txt").write_text("mine")

    with pytest.raises(AssemblyError, match="notes.txt"):
        assemble(_emit(meal_ir, config), config, tmp_path)


def test_failed_emission_is_not_assembled(tmp_path, target_config):
    config = target_config("java")
    with pytest.raises(AssemblyError, match="failed emission"):
        assemble(EmissionResult.failed("java", "boom"), config, tmp_path)
    assert not (tmp_path / "java").exists()


def test_unsafe_paths_are_rejected(tmp_path, target_config):
    config = target_config("go")
    result = EmissionResult(
        target="go",
        success=True,
        files=(GeneratedFile(path="../escape.go", content="package x\n"),),
    )
    with pytest.raises(AssemblyError, match="unsafe"):
        assemble(result, config, tmp_path)
    assert not (tmp_path / "escape.go").exists()


def test_cancelled_token_leaves_previous_tree(tmp_path, meals_ir, meal_ir, target_config):
    config = target_config("go")
    assemble(_emit(meals_ir, config), config, tmp_path)

    token = CancellationToken("go")
    token.cancel()
    with pytest.raises(TargetTimeoutError):
        assemble(_emit(meal_ir, config), config, tmp_path, token)

    assert (tmp_path / "go" / "model_meal_plan.go").exists()
    assert _leftovers(tmp_path) == []


@pytest.mark.parametrize("target,path,placeholder", [
    ("java", "settings.xml", "${env.GITHUB_TOKEN}"),
    ("typescript", ".npmrc", "${NODE_AUTH_TOKEN}"),
    ("python", ".pypirc", "${TWINE_PASSWORD}"),
])
def test_credentials_are_placeholders_only(tmp_path, monkeypatch, meal_ir, target_config, target, path, placeholder):
    for name in ("GITHUB_ACTOR", "GITHUB_TOKEN", "NODE_AUTH_TOKEN", "TWINE_USERNAME", "TWINE_PASSWORD"):
        monkeypatch.setenv(name, "s3cr3t-value")
    config = target_config(target)
    package = assemble(_emit(meal_ir, config), config, tmp_path)

    assert placeholder in (package.path / path).read_text()
    for name in package.files:
        assert "s3cr3t-value" not in (package.path / name).read_text()


def test_typescript_descriptors(tmp_path, meal_ir, target_config):
    config = target_config("ts", npmName="@example/meals-client", registryUrl="https://npm.pkg.github.com")
    package = assemble(_emit(meal_ir, config), config, tmp_path)

    manifest = json.loads((package.path / "package.json").read_text())
    assert manifest["name"] == "@example/meals-client"
    assert manifest["publishConfig"]["registry"] == "https://npm.pkg.github.com"
    assert manifest["dependencies"] == {"axios": "^1.6.0"}
    assert "//npm.pkg.github.com/:_authToken=${NODE_AUTH_TOKEN}" in (package.path / ".npmrc").read_text()


def test_go_module_file(tmp_path, meal_ir, target_config):
    config = target_config("go", modulePath="github.com/example/meals-go")
    package = assemble(_emit(meal_ir, config), config, tmp_path)

    assert package.name == "github.com/example/meals-go"
    assert (package.path / "go.mod").read_text().startswith("module github.com/example/meals-go\n\ngo 1.21\n")


def test_python_package_data_follows_dotted_package(tmp_path, meal_ir, target_config):
    config = target_config("python", packageName="acme.meals")
    package = assemble(_emit(meal_ir, config), config, tmp_path)

    pyproject = (package.path / "pyproject.toml").read_text()
    assert (package.path / "acme" / "meals" / "py.typed").exists()
    assert 'include = ["acme*"]' in pyproject
    assert '"acme.meals" = ["py.typed"]' in pyproject


def test_assembly_commits_the_token(tmp_path, meal_ir, target_config):
    config = target_config("go")
    token = CancellationToken("go", timeout_seconds=60)
    token.start()
    assemble(_emit(meal_ir, config), config, tmp_path, token)

    assert token.committed
    assert not token.cancel()
    assert not token.cancelled
