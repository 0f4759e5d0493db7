from __future__ import annotations

from pathlib import Path
from typing import Any, Optional


class BriefDeskError(Exception):
    """Base class for every failure raised by the brief desk core."""


class ValidationError(BriefDeskError, ValueError):
    """Missing/empty required input or an unconfigured endpoint/key. Raised before any I/O."""


class TransportError(BriefDeskError):
    """
    Network failure or non-2xx HTTP status.

    status_code and body are None when the request never produced a response
    (DNS failure, refused connection, timeout).
    """

    def __init__(self, message: str, *, status_code: Optional[int] = None, body: Optional[str] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ParseError(BriefDeskError):
    """Response body is not valid JSON."""

    def __init__(self, message: str, *, body: str = "") -> None:
        super().__init__(message)
        self.body = body


class ExtractionError(BriefDeskError):
    """Valid JSON, but none of the known text-bearing shapes matched."""

    def __init__(self, message: str, *, payload: Any = None) -> None:
        super().__init__(message)
        self.payload = payload


class StoreError(BriefDeskError):
    """Persistence I/O failure during schema/read/write."""

    def __init__(self, message: str, *, path: Optional[Path] = None) -> None:
        super().__init__(message)
        self.path = path
