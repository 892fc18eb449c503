"""Error taxonomy shared by the client, the views and the HTTP layer."""

from __future__ import annotations

from typing import Any

UNREACHABLE_MESSAGE = (
    "Cannot reach the server. Check that the backend is running, "
    "that the network connection is stable and that CORS is configured."
)


class OpsdashError(Exception):
    """Base class for every error raised by opsdash."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class BackendUnreachable(OpsdashError):
    """No response at all: DNS, connection refused, timeout."""

    def __init__(self, message: str = UNREACHABLE_MESSAGE) -> None:
        super().__init__(message)


class BackendError(OpsdashError):
    """The backend answered with a non-2xx status (or an unusable body)."""

    def __init__(self, status: int, message: str, payload: Any = None) -> None:
        super().__init__(message)
        self.status = status
        self.payload = payload


class Unauthorized(BackendError):
    pass


class Forbidden(BackendError):
    pass


class ValidationFailed(OpsdashError):
    """Client-side required-field check failed before any network call."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class ConfirmationRequired(OpsdashError):
    """A destructive action needs an explicit confirmation step."""

    def __init__(self, prompt: str) -> None:
        super().__init__(prompt)
        self.prompt = prompt


class PermissionRedirect(OpsdashError):
    """The viewer lacks the permission a view requires."""

    def __init__(self, redirect_to: str, required: str | None = None) -> None:
        super().__init__(f"Missing permission {required}" if required else "Unknown route")
        self.redirect_to = redirect_to
        self.required = required


class NoteSaveError(OpsdashError):
    pass


def _first_error(errors: Any) -> str | None:
    if not isinstance(errors, dict) or not errors:
        return None
    first = next(iter(errors.values()))
    if isinstance(first, list):
        first = first[0] if first else None
    return first if isinstance(first, str) and first else None


def extract_error_message(payload: Any, fallback: str) -> str:
    """Pick the message a backend error body carries.

    Order: top-level ``message``, ``data.message``, first entry of
    ``data.errors``, then ``fallback``.
    """
    if not isinstance(payload, dict):
        return fallback

    msg = payload.get("message")
    if isinstance(msg, str) and msg:
        return msg

    inner = payload.get("data")
    if isinstance(inner, dict):
        msg = inner.get("message")
        if isinstance(msg, str) and msg:
            return msg
        msg = _first_error(inner.get("errors"))
        if msg:
            return msg
    return fallback
