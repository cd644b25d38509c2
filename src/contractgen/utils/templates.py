"""
Jinja2 rendering for the fixed files of a generated package.

Templates live in ``contractgen/templates/<target>/`` and ship as package
data. They cover the files whose shape does not depend on the contract's
types (build descriptors, publish settings, runtime helpers); per-type
sources are assembled line by line by the emitters.

Filters available to every template:
- ``xml``: escape text for an XML element body
- ``toml``: quote a value as a TOML basic string
- ``placeholder``: ``NAME`` -> ``${NAME}``, the form publish tools expand
  from the environment
"""

from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Optional
from xml.sax.saxutils import escape

from jinja2 import Environment, FileSystemLoader, StrictUndefined

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"

_environment: Optional[Environment] = None
_lock = threading.Lock()


def _placeholder(name: str) -> str:
    return "${" + name + "}"


def template_environment() -> Environment:
    """Shared Environment; emitters on worker threads render through it."""
    global _environment
    with _lock:
        if _environment is None:
            env = Environment(
                loader=FileSystemLoader(str(TEMPLATE_DIR)),
                undefined=StrictUndefined,
                keep_trailing_newline=True,
                trim_blocks=True,
                lstrip_blocks=True,
            )
            env.filters["xml"] = escape
            env.filters["toml"] = json.dumps
            env.filters["placeholder"] = _placeholder
            _environment = env
    return _environment


def render_template(name: str, /, **context) -> str:
    """
    Render ``name`` (relative to the template directory) with ``context``.

    Example:
        >>> render_template("go/go.mod.jinja2", module="example.com/x", go_version="1.21", requires=[])
        'module example.com/x\\n\\ngo 1.21\\n'
    """
    return template_environment().get_template(name).render(**context)


__all__ = ["TEMPLATE_DIR", "render_template", "template_environment"]
