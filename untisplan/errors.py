"""
Exceptions raised by untisplan.

- ValidationError: a period was built from a malformed date or time
- HTTPStatusError / RPCError: the remote call failed
"""

from __future__ import annotations


class ValidationError(ValueError):
    """Raised when a date or time string is not in its canonical format."""


class UntisError(Exception):
    """Base class for failures reported by the remote timetable service."""


class HTTPStatusError(UntisError):
    def __init__(self, expected: int, got: int, reason: str = "") -> None:
        self.expected = expected
        self.got = got
        self.reason = reason
        super().__init__(f"HTTP Status Code Error: expected {expected}, got {got} {reason}".rstrip())


class RPCError(UntisError):
    def __init__(self, code: int, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(f"JSON-RPC Error: {code} - {message}")
