from __future__ import annotations


class SensorError(Exception):
    """Base class for failures that abort a single poll cycle."""


class ExecutionError(SensorError):
    pass


class ExecutionTimeout(ExecutionError):
    def __init__(self, command: list[str], timeout: float) -> None:
        super().__init__(f"Command timed out after {timeout}s: {' '.join(command)}")
        self.command = command
        self.timeout = timeout


class ExecutionFailure(ExecutionError):
    def __init__(self, message: str, returncode: int | None = None) -> None:
        super().__init__(message)
        self.returncode = returncode


class DecodeFormatError(SensorError):
    pass


class FileReadError(SensorError):
    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Failed to read {path}: {reason}")
        self.path = path


class NumericParseError(SensorError):
    def __init__(self, path: str, text: str) -> None:
        super().__init__(f"Non-numeric value in {path}: {text!r}")
        self.path = path
        self.text = text
