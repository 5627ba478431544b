"""Read-only Instagram conversation listing."""

import logging

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from ig_relay.config import get_settings
from ig_relay.constants import DEFAULT_CONVERSATION_LIMIT
from ig_relay.services.graph_service import describe_graph_error, list_conversations

logger = logging.getLogger(__name__)
router = APIRouter()


def parse_limit(raw: str | None) -> int:
    """Parse the ``limit`` query parameter.

    Raises:
        ValueError: if the value is not a positive integer.
    """
    if raw is None or raw == "":
        return DEFAULT_CONVERSATION_LIMIT
    limit = int(raw)
    if limit < 1:
        raise ValueError(f"limit must be a positive integer, got {raw!r}")
    return limit


def _error_response(message: str) -> JSONResponse:
    return JSONResponse(status_code=400, content={"success": False, "error": message})


@router.get("/conversations")
async def get_conversations(
    limit: str | None = Query(default=None),
    before: str | None = Query(default=None),
    after: str | None = Query(default=None),
):
    """List conversation threads of the linked Instagram business account.

    Query params:
        limit: page size (default 25)
        before / after: Graph pagination cursors
    """
    try:
        page_size = parse_limit(limit)
    except ValueError:
        logger.warning("Rejected conversation listing with limit=%r", limit)
        return _error_response(f"limit must be a positive integer, got {limit!r}")

    settings = get_settings()
    try:
        page = await list_conversations(
            settings.page_access_token,
            limit=page_size,
            before=before,
            after=after,
        )
    except Exception as e:
        logger.warning("Conversation listing failed: %s", e)
        return _error_response(describe_graph_error(e))

    return page.model_dump()
