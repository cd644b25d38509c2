"""
contractgen: multi-target contract-driven code generation.

One contract document (types + operations) is loaded, normalized into an
immutable IR and handed to independent emitters for Java, TypeScript, Python
and Go. Each emitter's output is assembled into a publishable package
directory with a metadata descriptor.

Modules:
- loader: contract document parsing
- normalize: reference resolution, cycle detection, flattening
- emitters: per-target code generation
- assembly: atomic package directories and descriptors
- orchestrator: the end-to-end run with per-target isolation
"""

__version__ = "0.1.0"

from contractgen.config import GeneratorConfig, build_target_config, load_target_configs
from contractgen.loader import load, loads
from contractgen.normalize import normalize
from contractgen.orchestrator import Orchestrator, generate
from contractgen.report import GenerationReport, TargetOutcome

__all__ = [
    "__version__",
    "GeneratorConfig",
    "build_target_config",
    "load_target_configs",
    "load",
    "loads",
    "normalize",
    "Orchestrator",
    "generate",
    "GenerationReport",
    "TargetOutcome",
]
