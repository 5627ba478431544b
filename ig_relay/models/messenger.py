"""Inbound webhook models for Instagram messaging events."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class MessagingParty(BaseModel):
    """Sender or recipient reference (platform-scoped id)."""

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    id: str | None = None


class MessagingEvent(BaseModel):
    """A single entry.messaging[] (or entry.standby[]) event.

    Only sender and message are inspected. Read receipts, reactions and
    postbacks arrive without a message body and are carried through as
    extra fields.
    """

    model_config = ConfigDict(extra="allow")

    sender: MessagingParty | None = None
    recipient: MessagingParty | None = None
    timestamp: int | None = None
    message: dict[str, Any] | None = None

    @property
    def sender_id(self) -> str | None:
        return self.sender.id if self.sender else None

    @property
    def message_text(self) -> str | None:
        if not self.message:
            return None
        text = self.message.get("text")
        return text if isinstance(text, str) else None

    @property
    def is_echo(self) -> bool:
        return bool(self.message and self.message.get("is_echo"))

    @property
    def is_replyable(self) -> bool:
        """True when the event names a sender and carries a non-empty message."""
        return bool(self.sender_id and self.message)


class WebhookEntry(BaseModel):
    """Webhook entry; carries messaging events or their standby variant.

    Events stay raw here and are validated one at a time while processing,
    so a malformed event only affects itself and the events after it.
    """

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    id: str | None = None
    time: int | None = None
    messaging: list[dict[str, Any]] | None = None
    standby: list[dict[str, Any]] | None = None


class WebhookPayload(BaseModel):
    """Webhook delivery envelope.

    A missing ``entry`` field is valid and means there is nothing to process.
    Entries are validated lazily, in delivery order.
    """

    model_config = ConfigDict(extra="allow")

    object: str | None = None
    entry: list[dict[str, Any]] = Field(default_factory=list)
