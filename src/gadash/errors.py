from __future__ import annotations

from typing import Any


class ChartError(Exception):
    """Terminal failure of a single chart request."""


class NoDataError(ChartError):
    def __init__(self, message: str = "No rows returned for that query") -> None:
        super().__init__(message)


class ApiError(ChartError):
    def __init__(self, code: Any, message: str) -> None:
        self.code = code
        self.message = message
        label = "" if code is None else str(code)
        super().__init__(" ".join(part for part in (label, message) if part))

    @classmethod
    def from_payload(cls, error: Any) -> ApiError:
        if isinstance(error, dict):
            return cls(error.get("code", ""), str(error.get("message", "")))
        return cls("", str(error))


class MalformedResponseError(ChartError):
    pass


class DrawError(ChartError):
    """A sink could not draw an otherwise valid table."""
