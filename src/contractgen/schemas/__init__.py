"""
Schema modules for contractgen.

This package hosts the frozen dataclasses that define the contracts between
the loader, normalizer, emitters, assembler and orchestrator.
"""

__all__ = [
    "contract",
]
