"""Webhook event processing.

Walks a webhook delivery's entries in order and sends the templated
auto-reply for every inbound direct message. Replies are awaited one at a
time, so a delivery never has more than one outbound send in flight.

An event is answered when it names a sender and carries a non-empty message.
Echo events (``message.is_echo``) are deliberately excluded from that rule:
they are the account's own outbound messages mirrored back, and answering
them would make the relay reply to itself.

Entries and events are validated one at a time. A malformed event stops
processing at that event; replies already sent for earlier events stand.
"""

from __future__ import annotations

import logging
from typing import Any, Literal

import logfire
from pydantic import ValidationError

from ig_relay.constants import NO_TEXT_PLACEHOLDER, REPLY_TEMPLATE
from ig_relay.logging_config import mask_pii
from ig_relay.models.graph_models import ReplyResult
from ig_relay.models.messenger import MessagingEvent, WebhookEntry, WebhookPayload
from ig_relay.services.messaging_protocol import MessagingService

logger = logging.getLogger(__name__)

EventKind = Literal["messaging", "standby", "none"]


def build_reply_text(message_text: str | None) -> str:
    """Render the auto-reply for an inbound message."""
    return REPLY_TEMPLATE.format(text=message_text or NO_TEXT_PLACEHOLDER)


def select_events(entry: WebhookEntry) -> tuple[EventKind, list[dict[str, Any]]]:
    """Pick the event list of an entry.

    ``messaging`` wins when present, otherwise ``standby``, otherwise nothing.
    """
    if entry.messaging is not None:
        return "messaging", entry.messaging
    if entry.standby is not None:
        return "standby", entry.standby
    return "none", []


class EventProcessor:
    """Turns inbound webhook deliveries into reply attempts."""

    def __init__(self, messaging: MessagingService):
        self.messaging = messaging

    async def process(self, payload: dict[str, Any] | WebhookPayload) -> list[ReplyResult]:
        """Process a webhook delivery and return the reply attempts made.

        Never raises: malformed payloads and unexpected errors are logged and
        the attempts made so far are returned.
        """
        results: list[ReplyResult] = []
        try:
            if not isinstance(payload, WebhookPayload):
                payload = WebhookPayload.model_validate(payload)

            logfire.info(
                "Processing webhook delivery",
                object_type=payload.object,
                entry_count=len(payload.entry),
            )

            for raw_entry in payload.entry:
                entry = WebhookEntry.model_validate(raw_entry)
                kind, events = select_events(entry)
                if kind == "standby":
                    # Thread is controlled by another app; never auto-reply
                    logfire.info(
                        "Skipping standby events",
                        entry_id=entry.id,
                        event_count=len(events),
                    )
                    continue

                for raw_event in events:
                    event = MessagingEvent.model_validate(raw_event)
                    result = await self.handle_event(event)
                    if result is not None:
                        results.append(result)
        except ValidationError as e:
            logger.error(
                "Malformed webhook payload after %d replies: %s", len(results), e
            )
        except Exception as e:
            logger.error("Webhook processing error: %s", e, exc_info=True)

        return results

    async def handle_event(self, event: MessagingEvent) -> ReplyResult | None:
        """Reply to a single event, or return None when it is not a message."""
        if not event.is_replyable:
            return None

        if event.is_echo:
            logfire.info(
                "Skipping echo of outbound message",
                sender_id=mask_pii(event.sender_id),
            )
            return None

        reply_text = build_reply_text(event.message_text)
        result = await self.messaging.send_reply(event.sender_id, reply_text)

        # A successful send does not imply the sender follows the account
        logfire.info(
            "Reply attempt",
            sender_id=mask_pii(event.sender_id),
            ok=result.ok,
            error=result.error.model_dump() if result.error else None,
        )
        return result


def get_event_processor(messaging: MessagingService) -> EventProcessor:
    """Factory function to get an EventProcessor."""
    return EventProcessor(messaging=messaging)
