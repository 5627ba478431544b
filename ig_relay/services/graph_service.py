"""Instagram Graph API client.

Thin wrappers over httpx for the handful of Graph endpoints the relay uses:
identity lookup, Instagram business account resolution, message send and
a generic GET passthrough for read queries.
"""

import time
from typing import Any

import httpx
import logfire

from ig_relay.config import get_settings
from ig_relay.constants import (
    CONVERSATION_FIELDS,
    DEFAULT_CONVERSATION_LIMIT,
    INSTAGRAM_ACCOUNT_LINK_FIELDS,
    MESSAGING_PRODUCT,
)
from ig_relay.logging_config import mask_pii, redact_tokens
from ig_relay.models.graph_models import ConversationPage, GraphErrorDetail, ReplyResult


class GraphAPIError(Exception):
    """Base exception for Graph API errors."""

    pass


class ResolutionError(GraphAPIError):
    """Raised when the Instagram business account id cannot be resolved."""

    pass


def graph_url(path: str) -> str:
    """Build an absolute, versioned Graph API URL for ``path``."""
    return f"{get_settings().graph_api_url}/{path.lstrip('/')}"


async def graph_get(
    path: str,
    params: dict[str, Any] | None = None,
    *,
    access_token: str | None,
) -> dict[str, Any]:
    """GET a Graph API path, passing the access token as a query parameter.

    Returns the decoded JSON body. Non-2xx responses raise
    ``httpx.HTTPStatusError``.
    """
    query = {**(params or {}), "access_token": access_token}
    url = graph_url(path)
    start_time = time.time()

    async with httpx.AsyncClient() as client:
        response = await client.get(url, params=query)

    elapsed = time.time() - start_time
    if response.is_success:
        logfire.info(
            "Graph API GET succeeded",
            path=path,
            params=redact_tokens(query),
            status_code=response.status_code,
            response_time_ms=elapsed * 1000,
        )
    else:
        logfire.error(
            "Graph API GET failed",
            path=path,
            params=redact_tokens(query),
            status_code=response.status_code,
            response_body=response.text[:500],
            response_time_ms=elapsed * 1000,
        )
    response.raise_for_status()
    return response.json()


async def resolve_instagram_account_id(access_token: str | None) -> str:
    """Resolve the Instagram business account linked to the token's Page.

    Looks up the Page behind the token (``/me``), then asks the Page for its
    linked Instagram account. Setups expose either
    ``connected_instagram_account`` or ``instagram_business_account``, so
    both are requested and whichever is present wins.

    Raises:
        ResolutionError: if no linked account id is found.
    """
    me = await graph_get("me", {"fields": "id"}, access_token=access_token)
    page_id = me.get("id")
    if not page_id:
        raise ResolutionError(
            "Could not resolve the Page for the configured access token."
        )

    page = await graph_get(
        str(page_id),
        {"fields": ",".join(INSTAGRAM_ACCOUNT_LINK_FIELDS)},
        access_token=access_token,
    )
    for field in INSTAGRAM_ACCOUNT_LINK_FIELDS:
        linked = page.get(field)
        if isinstance(linked, dict) and linked.get("id"):
            logfire.info(
                "Resolved Instagram business account",
                page_id=page_id,
                link_field=field,
                ig_user_id=linked["id"],
            )
            return str(linked["id"])

    raise ResolutionError(
        "Could not resolve IG Business User ID. Ensure IG account is connected "
        "to the FB Page and permissions are granted."
    )


async def send_instagram_reply(
    access_token: str | None,
    recipient_id: str,
    text: str,
) -> ReplyResult:
    """Send a text reply to an Instagram user (PSID).

    Never raises for delivery problems: rejected sends and network errors
    come back as a failed ``ReplyResult``. Common rejections are a closed
    24-hour window, missing permissions, an invalid token or rate limits.
    """
    start_time = time.time()
    url = graph_url("me/messages")
    payload = {
        "messaging_product": MESSAGING_PRODUCT,
        "recipient": {"id": recipient_id},
        "message": {"text": text},
    }
    headers = {"Authorization": f"Bearer {access_token}"}

    logfire.info(
        "Sending Instagram reply",
        recipient_id=mask_pii(recipient_id),
        text_length=len(text),
    )

    try:
        async with httpx.AsyncClient() as client:
            response = await client.post(url, json=payload, headers=headers)
    except httpx.RequestError as e:
        elapsed = time.time() - start_time
        logfire.error(
            "Graph API request error",
            recipient_id=mask_pii(recipient_id),
            error=str(e),
            error_type=type(e).__name__,
            response_time_ms=elapsed * 1000,
        )
        return ReplyResult.failure(
            GraphErrorDetail(message=str(e), type=type(e).__name__)
        )

    elapsed = time.time() - start_time

    if not response.is_success:
        error = GraphErrorDetail.from_response(response)
        logfire.error(
            "Instagram reply rejected",
            recipient_id=mask_pii(recipient_id),
            status_code=error.status,
            code=error.code,
            subcode=error.subcode,
            error_message=error.message,
            error_type=error.type,
            response_time_ms=elapsed * 1000,
        )
        return ReplyResult.failure(error)

    try:
        data = response.json()
    except ValueError:
        data = {"raw": response.text}
    if not isinstance(data, dict):
        data = {"raw": data}

    logfire.info(
        "Instagram reply accepted",
        recipient_id=mask_pii(recipient_id),
        status_code=response.status_code,
        message_id=data.get("message_id"),
        response_time_ms=elapsed * 1000,
    )
    return ReplyResult.success(data)


async def list_conversations(
    access_token: str | None,
    limit: int = DEFAULT_CONVERSATION_LIMIT,
    before: str | None = None,
    after: str | None = None,
) -> ConversationPage:
    """List Instagram conversation threads for the business account.

    The account id is resolved on every call, so relinking the Instagram
    account takes effect without a restart.
    """
    ig_user_id = await resolve_instagram_account_id(access_token)

    params: dict[str, Any] = {"limit": limit, "fields": CONVERSATION_FIELDS}
    if before:
        params["before"] = before
    if after:
        params["after"] = after

    data = await graph_get(
        f"{ig_user_id}/conversations", params, access_token=access_token
    )
    return ConversationPage(
        data=data.get("data") or [],
        paging=data.get("paging") or None,
    )


def describe_graph_error(error: Exception) -> str:
    """Stringify an upstream error for API responses.

    Prefers the Graph error message and code when the response carried one.
    """
    if isinstance(error, httpx.HTTPStatusError):
        detail = GraphErrorDetail.from_response(error.response)
        if detail.message:
            parts = [detail.message]
            if detail.code is not None:
                parts.append(f"code={detail.code}")
            if detail.subcode is not None:
                parts.append(f"subcode={detail.subcode}")
            return " ".join(parts)
        return f"Graph API returned HTTP {error.response.status_code}"
    return str(error) or type(error).__name__
