"""
Package assembly: staging, descriptors and the managed-file manifest.
"""

from contractgen.assembly.assembler import assemble
from contractgen.assembly.descriptors import package_name, render_descriptors
from contractgen.assembly.manifest import (
    build_descriptor,
    load_descriptor,
    unmanaged_files,
    write_descriptor,
)

__all__ = [
    "assemble",
    "package_name",
    "render_descriptors",
    "build_descriptor",
    "load_descriptor",
    "unmanaged_files",
    "write_descriptor",
]
