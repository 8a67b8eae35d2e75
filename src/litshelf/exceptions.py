"""Custom exception types for litshelf operations."""


class LitshelfError(Exception):
    """Base exception for all litshelf operations."""


class FileOperationError(LitshelfError):
    """Raised when file I/O operations fail."""


class InvalidDataError(LitshelfError):
    """Raised when stored library data is malformed or inconsistent."""


class ParseError(LitshelfError):
    """Base exception for BibTeX parse failures.

    ``line`` and ``col`` are 1-based and ``None`` when no position is known.
    """

    def __init__(self, message: str, *, line: int | None = None, col: int | None = None) -> None:
        self.message = message
        self.line = line
        self.col = col
        super().__init__(message)

    def __str__(self) -> str:
        if self.line is None:
            return self.message
        return f"line {self.line}, column {self.col}: {self.message}"


class UnexpectedCharacterError(ParseError):
    """Raised when the input holds something other than what the grammar expects."""

    def __init__(self, expected: str, found: str, *, line: int, col: int) -> None:
        self.expected = expected
        self.found = found
        super().__init__(
            f"unexpected character '{found}', expected {expected}", line=line, col=col
        )


class UnexpectedEndOfInputError(ParseError):
    """Raised when the input ends in the middle of an entry or value."""

    def __init__(
        self, *, line: int | None = None, col: int | None = None, detail: str | None = None
    ) -> None:
        self.detail = detail
        message = "unexpected end of input"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message, line=line, col=col)


class EmptyBibliographyError(ParseError):
    """Raised when the input contains no entries at all."""

    def __init__(self) -> None:
        super().__init__("failed to parse BibTeX source, it contains no entries")


class InvalidFieldValueError(ParseError):
    """Raised when a field's text does not match the grammar for its name."""

    def __init__(
        self,
        field: str,
        raw: str,
        reason: str,
        *,
        line: int | None = None,
        col: int | None = None,
    ) -> None:
        self.field = field
        self.raw = raw
        self.reason = reason
        super().__init__(f"invalid value {raw!r} for field '{field}': {reason}", line=line, col=col)

    def at(self, line: int, col: int) -> "InvalidFieldValueError":
        """Return a copy of this error located at ``line``/``col``."""
        return InvalidFieldValueError(self.field, self.raw, self.reason, line=line, col=col)
