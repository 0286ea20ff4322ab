"""Error types raised by the gas response pipeline."""
from pathlib import Path
from typing import Optional, Union


class GasResponseError(Exception):
    """Base class for errors raised by this package."""


class SelectionError(GasResponseError):
    """Raised when no input file was selected."""

    def __init__(self, message: str = "No file selected"):
        super().__init__(message)


class ProfileParseError(GasResponseError, ValueError):
    """Raised when a concentration profile is not "<gas> <ppm> <ppm> ..."."""

    def __init__(self, text: Optional[str], reason: str):
        self.text = text
        self.reason = reason
        super().__init__(f"Unable to parse gas concentration profile {text!r}: {reason}")


ParseError = ProfileParseError


class FormatError(GasResponseError, ValueError):
    """Raised when a data line is not two tab-separated numbers.

    The whole file is unusable; no partial series is produced.
    """

    def __init__(self, line_number: int, line: str,
                 path: Optional[Union[str, Path]] = None):
        self.line_number = line_number
        self.line = line
        self.path = Path(path) if path is not None else None
        super().__init__(self._message())

    def _message(self) -> str:
        where = f"{self.path}, line {self.line_number}" if self.path else f"line {self.line_number}"
        return f"Invalid record at {where}: {self.line!r} (expected '<time>\\t<resistance>')"

    def with_path(self, path: Union[str, Path]) -> "FormatError":
        return FormatError(self.line_number, self.line, path)


class BaselineError(GasResponseError, ValueError):
    """Raised when the baseline resistance cannot be used for normalization."""


class FileTimeoutError(GasResponseError, TimeoutError):
    """Raised when processing a single file exceeds the configured deadline."""

    def __init__(self, path: Union[str, Path], seconds: float, stage: Optional[str] = None):
        self.path = Path(path)
        self.seconds = seconds
        self.stage = stage or "unknown"
        super().__init__(f"Timed out after {seconds:.1f}s during {self.stage}")
