"""Instagram webhook endpoints.

GET answers the one-time verification handshake. POST receives event
deliveries, checks their signature and sends the auto-replies. Once a
delivery is authenticated it is always acknowledged with 200, because the
platform redelivers anything that is not.
"""

import json
import logging

from fastapi import APIRouter, Request, Response
from fastapi.responses import PlainTextResponse

from ig_relay.config import Settings, get_settings
from ig_relay.constants import SIGNATURE_HEADER, WEBHOOK_SUBSCRIBE_MODE
from ig_relay.services.event_processor import EventProcessor, get_event_processor
from ig_relay.services.messaging_protocol import get_messaging_service
from ig_relay.services.signature import is_signature_enforceable, verify_signature

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("")
async def verify_webhook(request: Request):
    """Webhook verification handshake."""
    settings = get_settings()

    mode = request.query_params.get("hub.mode")
    token = request.query_params.get("hub.verify_token")
    challenge = request.query_params.get("hub.challenge")

    if (
        mode == WEBHOOK_SUBSCRIBE_MODE
        and settings.verify_token
        and token == settings.verify_token
    ):
        logger.info("Webhook verified successfully")
        return PlainTextResponse(challenge or "")

    logger.warning("Webhook verification failed (mode=%s)", mode)
    return Response(status_code=403)


def is_authentic(raw_body: bytes, signature: str | None, settings: Settings) -> bool:
    """Apply signature verification plus the optional strict-mode policy."""
    if settings.require_signature and not is_signature_enforceable(
        signature, settings.app_secret
    ):
        return False
    return verify_signature(raw_body, signature, settings.app_secret)


@router.post("")
async def handle_webhook(request: Request):
    """Handle incoming Instagram messaging webhook events."""
    settings = get_settings()
    raw_body = await request.body()
    signature = request.headers.get(SIGNATURE_HEADER)

    if not is_authentic(raw_body, signature, settings):
        logger.warning("Rejected webhook delivery with invalid signature")
        return Response(status_code=403)

    try:
        payload = json.loads(raw_body)
    except ValueError as e:
        logger.error("Webhook body is not valid JSON: %s", e)
        return {"status": "ok"}

    await process_delivery(payload, settings=settings)
    return {"status": "ok"}


async def process_delivery(
    payload,
    *,
    settings: Settings | None = None,
    processor: EventProcessor | None = None,
) -> None:
    """Run the reply loop for one delivery.

    Args:
        payload: Decoded webhook JSON body
        settings: Settings providing the access token
        processor: Optional injected event processor (for testing)
    """
    try:
        _settings = settings or get_settings()
        _processor = processor or get_event_processor(
            get_messaging_service(_settings.page_access_token)
        )
        results = await _processor.process(payload)
        failed = sum(1 for result in results if not result.ok)
        logger.info(
            "Webhook delivery processed: %d replies, %d failed",
            len(results),
            failed,
        )
    except Exception as e:
        logger.error("Webhook processing error: %s", e, exc_info=True)
