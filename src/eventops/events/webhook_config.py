"""Audit webhook subscribers.

Subscribers come from settings at import time (``EVENTOPS_AUDIT_WEBHOOK_URLS``
sharing ``EVENTOPS_AUDIT_WEBHOOK_SECRET``) and may be added at runtime.
"""

from dataclasses import dataclass, field

from eventops.config import settings


@dataclass
class WebhookSubscription:
    url: str
    secret: str
    # Empty means every event type
    event_types: list[str] = field(default_factory=list)
    active: bool = True

    def wants(self, event_type: str) -> bool:
        return self.active and (not self.event_types or event_type in self.event_types)


class WebhookRegistry:
    def __init__(self, subscriptions: list[WebhookSubscription] | None = None) -> None:
        self._by_url: dict[str, WebhookSubscription] = {s.url: s for s in subscriptions or []}

    @classmethod
    def from_settings(cls) -> "WebhookRegistry":
        if not settings.audit_webhook_secret:
            return cls()
        return cls([
            WebhookSubscription(url=url, secret=settings.audit_webhook_secret)
            for url in settings.audit_webhook_urls
        ])

    def register(self, subscription: WebhookSubscription) -> None:
        """Add a subscriber, replacing any existing one for the same URL."""
        self._by_url[subscription.url] = subscription

    def unregister(self, url: str) -> None:
        self._by_url.pop(url, None)

    def get_subscribers(self, event_type: str) -> list[WebhookSubscription]:
        return [s for s in self._by_url.values() if s.wants(event_type)]

    def list_all(self) -> list[WebhookSubscription]:
        return list(self._by_url.values())


webhook_registry = WebhookRegistry.from_settings()
