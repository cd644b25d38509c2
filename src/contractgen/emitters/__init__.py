"""
Target emitters.

One Emitter per target language, registered by canonical target name.
Emitters are stateless; :func:`get_emitter` returns a fresh instance per call
so concurrent targets never share state.
"""

from __future__ import annotations

from typing import Dict, Type

from contractgen.config import normalize_target_name
from contractgen.constants import TARGET_GO, TARGET_JAVA, TARGET_PYTHON, TARGET_TYPESCRIPT
from contractgen.emitters.base import EmitContext, Emitter
from contractgen.emitters.go import GoEmitter
from contractgen.emitters.java import JavaEmitter
from contractgen.emitters.python import PythonEmitter
from contractgen.emitters.typescript import TypeScriptEmitter

EMITTERS: Dict[str, Type[Emitter]] = {
    TARGET_JAVA: JavaEmitter,
    TARGET_TYPESCRIPT: TypeScriptEmitter,
    TARGET_PYTHON: PythonEmitter,
    TARGET_GO: GoEmitter,
}


def get_emitter(target: str) -> Emitter:
    """Emitter instance for a target name or alias (``ts``, ``py``, ...)."""
    return EMITTERS[normalize_target_name(target)]()


__all__ = [
    "EMITTERS",
    "EmitContext",
    "Emitter",
    "GoEmitter",
    "JavaEmitter",
    "PythonEmitter",
    "TypeScriptEmitter",
    "get_emitter",
]
