"""
Error types raised while loading and compiling biome profiles.

Every error carries the location it was raised from, as far as it is known:
the profile file, the sampler field being compiled and the formula fragment
that could not be handled. The compiler only knows the fragment; the profile
and registry loaders fill in the field and file on the way up.
"""

from typing import Dict, Optional


class BiomeConfigError(ValueError):
    """Base class for every load-time biome profile error."""

    def __init__(
        self,
        message: str,
        formula: Optional[str] = None,
        field: Optional[str] = None,
        file: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.formula = formula
        self.field = field
        self.file = file

    def with_context(self, file: Optional[str] = None, field: Optional[str] = None):
        """Fill in location details that are not already set and return self."""
        if self.file is None:
            self.file = file
        if self.field is None:
            self.field = field
        return self

    def __str__(self) -> str:
        location = []
        if self.file is not None:
            location.append(f"file={self.file}")
        if self.field is not None:
            location.append(f"field={self.field}")
        if self.formula is not None:
            location.append(f"formula={self.formula!r}")
        if not location:
            return self.message
        return f"{self.message} ({', '.join(location)})"


class MalformedConfigError(BiomeConfigError):
    """The profile document is not valid JSON or lacks a required key."""


class FormulaSyntaxError(MalformedConfigError):
    """A call is not closed, has trailing text or the wrong number of arguments."""


class UnresolvedSymbolError(BiomeConfigError):
    """A bare identifier is neither a context value nor a declared field."""


class UnsupportedInstructionError(BiomeConfigError):
    """A call name is not valid for the result type being built."""


class UnresolvedReferenceError(BiomeConfigError):
    """A voxel type or shape name is not known."""


class BiomeLoadError(RuntimeError):
    """Raised by a strict registry load when one or more profiles failed."""

    def __init__(self, failures: Dict[str, BiomeConfigError]):
        self.failures = dict(failures)
        lines = [f"{len(self.failures)} biome profile(s) failed to load:"]
        lines.extend(f"  {name}: {error}" for name, error in sorted(self.failures.items()))
        super().__init__("\n".join(lines))
