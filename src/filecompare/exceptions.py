"""Error taxonomy for the comparison engine.

Every error carries a short machine-readable ``code`` next to its message so
the CLI and API can report failures without parsing text.

- FileCompareError (base)

  - FormatParseError: malformed JSON/YAML/XML, always recovered locally
  - ParseError

    - ContainerDecodeError: corrupted spreadsheet/document/PDF container

  - WorkerUnavailableError: the background worker could not be created
  - WorkerFaultError: the background worker died with requests in flight
  - CompareExecutionError: the diff pipeline itself failed
  - ComparisonError: request-level validation in the service layer
"""

from __future__ import annotations


class FileCompareError(RuntimeError):
    code = "ERROR"

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        if code is not None:
            self.code = code


class FormatParseError(FileCompareError):
    code = "FORMAT_PARSE"


class ParseError(FileCompareError):
    code = "PARSE_ERROR"


class ContainerDecodeError(ParseError):
    code = "CONTAINER_DECODE"


class WorkerUnavailableError(FileCompareError):
    code = "WORKER_UNAVAILABLE"


class WorkerFaultError(FileCompareError):
    code = "WORKER_FAULT"


class CompareExecutionError(FileCompareError):
    code = "COMPARE_FAILED"


class ComparisonError(FileCompareError):
    """Raised by the service when a comparison request is rejected."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message, code=code)


__all__ = [
    "ComparisonError",
    "CompareExecutionError",
    "ContainerDecodeError",
    "FileCompareError",
    "FormatParseError",
    "ParseError",
    "WorkerFaultError",
    "WorkerUnavailableError",
]
