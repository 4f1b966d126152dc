from typing import Optional


class DumpParseError(ValueError):
    """Base class for fatal thread dump parse failures.

    Carries the raw offending line (when there is one) and its 1-based
    line number in the dump file.
    """

    def __init__(self, message: str, line: Optional[str] = None, line_number: Optional[int] = None):
        self.line = line
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


class FormatError(DumpParseError):
    """A thread header or state line does not match its expected pattern."""


class UnknownStateError(DumpParseError):
    def __init__(self, state: str, line: Optional[str] = None, line_number: Optional[int] = None):
        self.state = state
        super().__init__(f"Unknown thread state {state!r}: {{{line}}}", line=line, line_number=line_number)


class TruncatedInputError(DumpParseError):
    """Input ended before a thread block was complete."""
