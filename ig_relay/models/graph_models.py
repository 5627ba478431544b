"""Graph API result and error models."""

from typing import Any

import httpx
from pydantic import BaseModel


class GraphErrorDetail(BaseModel):
    """Structured error fields from a failed Graph API call."""

    status: int | None = None
    code: int | None = None
    subcode: int | None = None
    message: str | None = None
    type: str | None = None

    @classmethod
    def from_response(cls, response: httpx.Response) -> "GraphErrorDetail":
        """Parse Graph's ``{"error": {...}}`` body, tolerating non-JSON bodies."""
        try:
            body = response.json()
        except ValueError:
            body = {}
        error = body.get("error") if isinstance(body, dict) else None
        if not isinstance(error, dict):
            error = {}
        return cls(
            status=response.status_code,
            code=error.get("code"),
            subcode=error.get("error_subcode"),
            message=error.get("message"),
            type=error.get("type"),
        )


class ReplyResult(BaseModel):
    """Outcome of a reply attempt.

    ``ok`` means the message was accepted for delivery within the platform's
    policy rules. It says nothing about whether the recipient follows the
    business account.
    """

    ok: bool
    data: dict[str, Any] | None = None
    error: GraphErrorDetail | None = None

    @classmethod
    def success(cls, data: dict[str, Any]) -> "ReplyResult":
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, error: GraphErrorDetail) -> "ReplyResult":
        return cls(ok=False, error=error)


class ConversationPage(BaseModel):
    """Response body of the conversation listing endpoint."""

    success: bool = True
    data: list[dict[str, Any]]
    paging: dict[str, Any] | None = None
