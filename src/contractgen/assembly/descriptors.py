"""
Ecosystem descriptors for assembled packages.

Each target gets the build/publish files its ecosystem expects next to the
generated sources:

- java: ``pom.xml`` (Maven coordinates, dependencies, distributionManagement)
  and ``settings.xml`` (server credentials as ``${env.*}`` placeholders)
- typescript: ``package.json`` (``publishConfig.registry``, ``repository``),
  ``.npmrc`` (``_authToken=${NODE_AUTH_TOKEN}``) and ``tsconfig.json``
- python: ``pyproject.toml`` and ``.pypirc`` (``${TWINE_*}`` placeholders)
- go: ``go.mod``

The files are rendered from the jinja2 templates under ``templates/<target>/``.

Credentials are only ever referenced by environment variable name; nothing
here reads the environment.
"""

from __future__ import annotations

import json
from typing import Callable, Dict, List, Tuple
from urllib.parse import urlparse

from contractgen.constants import (
    AUTH_ENV_BY_TARGET,
    TARGET_GO,
    TARGET_JAVA,
    TARGET_PYTHON,
    TARGET_TYPESCRIPT,
)
from contractgen.schemas.contract import EmissionResult, GeneratedFile, TargetConfig
from contractgen.utils.naming import to_kebab
from contractgen.utils.templates import render_template

# Repository id shared by pom.xml and settings.xml / .pypirc
PUBLISH_REPOSITORY_ID = "contractgen-publish"

TYPESCRIPT_VERSION = "^5.3.0"
GO_VERSION = "1.21"


# =============================================================================
# COORDINATES
# =============================================================================

def java_coordinates(config: TargetConfig) -> Tuple[str, str]:
    group_id = config.option("groupId", config.package_name)
    artifact_id = config.option("artifactId", to_kebab(config.package_name.rsplit(".", 1)[-1]))
    return group_id, artifact_id


def npm_name(config: TargetConfig) -> str:
    return config.option("npmName", config.package_name)


def python_project_name(config: TargetConfig) -> str:
    return config.option("projectName", config.package_name.replace("_", "-"))


def go_module_path(config: TargetConfig) -> str:
    return config.option("modulePath", f"example.com/{config.package_name}")


def package_name(config: TargetConfig) -> str:
    """Published name of the package in its ecosystem's notation."""
    if config.target == TARGET_JAVA:
        return ":".join(java_coordinates(config))
    if config.target == TARGET_TYPESCRIPT:
        return npm_name(config)
    if config.target == TARGET_PYTHON:
        return python_project_name(config)
    return go_module_path(config)


def _description(config: TargetConfig) -> str:
    return config.option("description", f"Generated {config.target} bindings for {config.package_name}")


# =============================================================================
# JAVA
# =============================================================================

def _java(result: EmissionResult, config: TargetConfig) -> List[GeneratedFile]:
    group_id, artifact_id = java_coordinates(config)
    username_env, password_env = AUTH_ENV_BY_TARGET[TARGET_JAVA]
    dependencies: List[Tuple[str, str, str]] = []
    for coordinate, version in result.dependencies:
        dep_group, dep_artifact = coordinate.split(":", 1)
        dependencies.append((dep_group, dep_artifact, version))
    pom = render_template(
        "java/pom.xml.jinja2",
        group_id=group_id,
        artifact_id=artifact_id,
        version=config.version,
        description=_description(config),
        repository_url=config.option("repositoryUrl"),
        dependencies=dependencies,
        repository_id=PUBLISH_REPOSITORY_ID,
        registry_url=config.registry_url,
    )
    settings = render_template(
        "java/settings.xml.jinja2",
        repository_id=PUBLISH_REPOSITORY_ID,
        username_env=username_env,
        password_env=password_env,
    )
    return [
        GeneratedFile(path="pom.xml", content=pom),
        GeneratedFile(path="settings.xml", content=settings),
    ]


# =============================================================================
# TYPESCRIPT
# =============================================================================

def _typescript(result: EmissionResult, config: TargetConfig) -> List[GeneratedFile]:
    (token_env,) = AUTH_ENV_BY_TARGET[TARGET_TYPESCRIPT]
    manifest: Dict[str, object] = {
        "name": npm_name(config),
        "version": config.version,
        "description": _description(config),
        "main": "dist/index.js",
        "types": "dist/index.d.ts",
        "files": ["dist"],
        "scripts": {"build": "tsc", "prepare": "npm run build"},
        "dependencies": dict(result.dependencies),
        "devDependencies": {"typescript": TYPESCRIPT_VERSION},
        "publishConfig": {"registry": config.registry_url},
    }
    repository_url = config.option("repositoryUrl")
    if repository_url:
        manifest["repository"] = {"type": "git", "url": repository_url}

    registry = urlparse(config.registry_url)
    npmrc = render_template(
        "typescript/npmrc.jinja2",
        registry_url=config.registry_url,
        host_path=f"//{registry.netloc}{registry.path.rstrip('/')}/",
        token_env=token_env,
    )

    tsconfig = {
        "compilerOptions": {
            "target": "ES2019",
            "module": "commonjs",
            "declaration": True,
            "strict": True,
            "outDir": "dist",
            "rootDir": ".",
            "lib": ["ES2019", "DOM"],
        },
        "exclude": ["dist", "node_modules"],
    }
    return [
        GeneratedFile(path="package.json", content=json.dumps(manifest, indent=2) + "\n"),
        GeneratedFile(path=".npmrc", content=npmrc),
        GeneratedFile(path="tsconfig.json", content=json.dumps(tsconfig, indent=2) + "\n"),
    ]


# =============================================================================
# PYTHON
# =============================================================================

def _python(result: EmissionResult, config: TargetConfig) -> List[GeneratedFile]:
    username_env, password_env = AUTH_ENV_BY_TARGET[TARGET_PYTHON]
    # Dotted import path of the generated package; py.typed sits at its root
    package = config.package_name.replace("-", "_")
    pyproject = render_template(
        "python/pyproject.toml.jinja2",
        name=python_project_name(config),
        version=config.version,
        description=_description(config),
        dependencies=[f"{name}{spec}" for name, spec in result.dependencies],
        repository_url=config.option("repositoryUrl"),
        top_level=package.split(".")[0],
        package=package,
    )
    pypirc = render_template(
        "python/pypirc.jinja2",
        repository_id=PUBLISH_REPOSITORY_ID,
        registry_url=config.registry_url,
        username_env=username_env,
        password_env=password_env,
    )
    return [
        GeneratedFile(path="pyproject.toml", content=pyproject),
        GeneratedFile(path=".pypirc", content=pypirc),
    ]


# =============================================================================
# GO
# =============================================================================

def _go(result: EmissionResult, config: TargetConfig) -> List[GeneratedFile]:
    content = render_template(
        "go/go.mod.jinja2",
        module=go_module_path(config),
        go_version=GO_VERSION,
        requires=list(result.dependencies),
    )
    return [GeneratedFile(path="go.mod", content=content)]


RENDERERS: Dict[str, Callable[[EmissionResult, TargetConfig], List[GeneratedFile]]] = {
    TARGET_JAVA: _java,
    TARGET_TYPESCRIPT: _typescript,
    TARGET_PYTHON: _python,
    TARGET_GO: _go,
}


def render_descriptors(result: EmissionResult, config: TargetConfig) -> List[GeneratedFile]:
    """Ecosystem build/publish files for one target."""
    return RENDERERS[config.target](result, config)


__all__ = [
    "PUBLISH_REPOSITORY_ID",
    "package_name",
    "java_coordinates",
    "npm_name",
    "python_project_name",
    "go_module_path",
    "render_descriptors",
]
