"""
Error taxonomy for contractgen.

Loader and normalizer errors are fatal to a run: every target depends on
them. Config, emission, assembly and timeout errors are scoped to a single
target and are collected into the run report by the orchestrator.

Non-fatal problems are not exceptions at all; see
``contractgen.schemas.contract.FeatureWarning``.
"""

from __future__ import annotations

from typing import Optional, Sequence


class ContractGenError(Exception):
    """Base class for every error raised by contractgen."""
    pass


# =============================================================================
# CONTRACT LOADING
# =============================================================================

class ContractError(ContractGenError):
    """Raised when a contract document cannot be turned into a ContractDocument."""

    def __init__(self, location: str, message: str):
        super().__init__(f"{location}: {message}" if location else message)
        self.location = location
        self.message = message


class ParseError(ContractError):
    """Malformed syntax or unreadable contract file."""
    pass


class SchemaError(ContractError):
    """Well-formed document whose structure is not a valid contract."""
    pass


# =============================================================================
# NORMALIZATION
# =============================================================================

class NormalizationError(ContractGenError):
    """Raised when a ContractDocument cannot be normalized into IR."""
    pass


class UnresolvedReferenceError(NormalizationError):
    """One or more type references name nothing in the contract."""

    def __init__(self, references: Sequence[str]):
        self.references = list(references)
        super().__init__(
            "Unresolved type references: " + ", ".join(self.references)
        )


class CyclicReferenceError(NormalizationError):
    """A type reaches itself through its references.

    Attributes:
        cycle_path: Names along the cycle, first and last entries equal.
    """

    def __init__(self, cycle_path: Sequence[str]):
        self.cycle_path = list(cycle_path)
        super().__init__("Cyclic type reference: " + " -> ".join(self.cycle_path))


class DuplicateNameError(NormalizationError):
    """Distinct declarations share one canonical identifier."""

    def __init__(self, canonical: str, names: Sequence[str], scope: str = "types"):
        self.canonical = canonical
        self.names = list(names)
        self.scope = scope
        super().__init__(
            f"Duplicate canonical name {canonical!r} in {scope}: "
            + ", ".join(repr(n) for n in self.names)
        )


# =============================================================================
# PER-TARGET ERRORS
# =============================================================================

class ConfigError(ContractGenError):
    """Invalid generator or target configuration."""

    def __init__(self, message: str, target: Optional[str] = None):
        super().__init__(f"{target}: {message}" if target else message)
        self.target = target


class EmissionError(ContractGenError):
    """An emitter could not render the IR for its target."""

    def __init__(self, target: str, message: str):
        super().__init__(message)
        self.target = target


class AssemblyError(ContractGenError):
    """A publishable package could not be written."""

    def __init__(self, target: str, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.target = target
        self.path = path


class TargetTimeoutError(ContractGenError, TimeoutError):
    """A target task exceeded its deadline or was cancelled."""

    def __init__(self, target: str, timeout_seconds: Optional[float] = None):
        if timeout_seconds is not None:
            message = f"timed out after {timeout_seconds:g}s"
        else:
            message = "cancelled"
        super().__init__(message)
        self.target = target
        self.timeout_seconds = timeout_seconds


__all__ = [
    "ContractGenError",
    "ContractError",
    "ParseError",
    "SchemaError",
    "NormalizationError",
    "UnresolvedReferenceError",
    "CyclicReferenceError",
    "DuplicateNameError",
    "ConfigError",
    "EmissionError",
    "AssemblyError",
    "TargetTimeoutError",
]
