"""Exception hierarchy for lingobundle.

All errors raised by the compiler derive from BundleError. Errors in the
plural-forms grammar additionally derive from ValueError so callers that
only care about "bad input" can catch that.

Hierarchy:
    BundleError
     +-- PluralFormsError (ValueError)
     |    +-- PluralSyntaxError
     |    +-- MalformedHeaderError
     |    +-- UnknownIdentifierError
     +-- CompileError
     +-- DivideByZeroError (ZeroDivisionError)
     +-- CatalogError (ValueError)
     +-- ParentAlreadySetError
     +-- InvalidParentError (ValueError)
     +-- EmitError (ValueError)
     +-- ConfigError
"""

from __future__ import annotations


class BundleError(Exception):
    """Base error for everything raised by lingobundle."""

    pass


# =============================================================================
# Plural-Forms Grammar Errors
# =============================================================================


class PluralFormsError(BundleError, ValueError):
    """Raised when a Plural-Forms header or expression cannot be parsed.

    Attributes:
        header: The text being parsed when the error occurred.
        position: Character offset of the problem, or -1 if unknown.
    """

    def __init__(self, message: str, header: str = "", position: int = -1) -> None:
        self.header = header
        self.position = position
        super().__init__(message)


class PluralSyntaxError(PluralFormsError):
    """Malformed token sequence, unmatched parenthesis or trailing input."""

    pass


class MalformedHeaderError(PluralFormsError):
    """The ``nplurals=...; plural=...;`` shape is missing or invalid."""

    pass


class UnknownIdentifierError(PluralFormsError):
    """An identifier other than ``n`` appeared in a plural expression."""

    def __init__(
        self,
        identifier: str,
        header: str = "",
        position: int = -1,
    ) -> None:
        self.identifier = identifier
        super().__init__(
            f"Unknown identifier in plural expression: {identifier!r}",
            header,
            position,
        )


# =============================================================================
# Compilation Errors
# =============================================================================


class CompileError(BundleError):
    """Raised when a catalog or plural rule cannot be compiled.

    Wraps grammar errors (available as ``__cause__``) and reports
    statically detected division by zero.

    Attributes:
        header: The offending Plural-Forms header, if any.
    """

    def __init__(self, message: str, header: str | None = None) -> None:
        self.header = header
        super().__init__(message)

    def __str__(self) -> str:
        message = super().__str__()
        if self.header is not None:
            return f"{message} (Plural-Forms: {self.header!r})"
        return message


class DivideByZeroError(BundleError, ZeroDivisionError):
    """Division by zero while evaluating a plural expression."""

    pass


# =============================================================================
# Catalog / Bundle / Emission Errors
# =============================================================================


class CatalogError(BundleError, ValueError):
    """Malformed catalog entry or catalog document."""

    pass


class ParentAlreadySetError(BundleError):
    """The write-once parent slot of a bundle was written twice."""

    pass


class InvalidParentError(BundleError, ValueError):
    """A bundle was given itself as its fallback parent."""

    pass


class EmitError(BundleError, ValueError):
    """A bundle cannot be emitted under the requested name."""

    pass


class ConfigError(BundleError):
    """Invalid configuration value or configuration file."""

    pass
