"""Messaging abstraction for the reply path.

Event processing talks to a ``MessagingService`` rather than to the Graph
client directly, so tests can swap in ``MockMessagingService`` without HTTP
mocking.
"""

from typing import Protocol

from ig_relay.models.graph_models import GraphErrorDetail, ReplyResult


class MessagingService(Protocol):
    """Protocol for sending replies to messaging users."""

    async def send_reply(self, recipient_id: str, text: str) -> ReplyResult:
        """Send ``text`` to ``recipient_id``.

        Implementations report delivery failures through the returned
        ``ReplyResult`` instead of raising.
        """
        ...


class InstagramMessagingService:
    """Instagram implementation of MessagingService.

    Example:
        >>> service = InstagramMessagingService(access_token="...")
        >>> result = await service.send_reply("1784...", "Hello!")
        >>> result.ok
        True
    """

    def __init__(self, access_token: str | None):
        self._token = access_token

    async def send_reply(self, recipient_id: str, text: str) -> ReplyResult:
        from ig_relay.services.graph_service import send_instagram_reply

        return await send_instagram_reply(
            access_token=self._token,
            recipient_id=recipient_id,
            text=text,
        )


class MockMessagingService:
    """Mock implementation for testing.

    Example:
        >>> service = MockMessagingService()
        >>> await service.send_reply("user123", "Test message")
        >>> service.sent_messages
        [('user123', 'Test message')]
    """

    def __init__(self, should_fail_send: bool = False):
        self._should_fail_send = should_fail_send
        self.sent_messages: list[tuple[str, str]] = []

    async def send_reply(self, recipient_id: str, text: str) -> ReplyResult:
        self.sent_messages.append((recipient_id, text))
        if self._should_fail_send:
            return ReplyResult.failure(
                GraphErrorDetail(status=400, code=10, message="Mock send failure")
            )
        return ReplyResult.success(
            {"recipient_id": recipient_id, "message_id": f"mid.{len(self.sent_messages)}"}
        )


def get_messaging_service(access_token: str | None) -> InstagramMessagingService:
    """Factory function to get a MessagingService implementation."""
    return InstagramMessagingService(access_token=access_token)
