"""Signed audit webhook delivery.

The signature is HMAC-SHA256 over the compact JSON of the envelope
without its ``signature`` field; the delivered body carries the
signature too and it is repeated in ``X-EventOps-Signature``.
"""

import asyncio
import hashlib
import hmac
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone

import httpx

from eventops.models.webhook import WebhookEnvelope
from eventops.services.id_generator import WEBHOOK_EVENT, generate_id

from .webhook_config import WebhookRegistry, WebhookSubscription, webhook_registry

logger = logging.getLogger(__name__)

MAX_DELIVERY_ATTEMPTS = 3
RETRY_BACKOFF_SECONDS = 0.5


@dataclass
class DeliveryResult:
    url: str
    status: int | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _sign_payload(body: bytes, secret: str) -> str:
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


def _compact(data: dict) -> bytes:
    return json.dumps(data, separators=(",", ":")).encode("utf-8")


def build_envelope(event_type: str, payload: dict) -> WebhookEnvelope:
    """Unsigned envelope; each subscriber gets its own signature."""
    return WebhookEnvelope(
        schema_version="1.0",
        event_type=event_type,
        event_id=generate_id(WEBHOOK_EVENT),
        occurred_at=datetime.now(timezone.utc),
        source_system="eventops",
        payload=payload,
    )


async def emit_event(
    event_type: str,
    payload: dict,
    registry: WebhookRegistry | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[DeliveryResult]:
    """Deliver one event to every matching subscriber concurrently."""
    subscribers = (registry or webhook_registry).get_subscribers(event_type)
    if not subscribers:
        return []

    envelope = build_envelope(event_type, payload)
    async with httpx.AsyncClient(timeout=10.0, transport=transport) as client:
        return list(await asyncio.gather(*(_deliver(client, envelope, sub) for sub in subscribers)))


async def _deliver(client: httpx.AsyncClient, envelope: WebhookEnvelope, sub: WebhookSubscription) -> DeliveryResult:
    unsigned = envelope.model_dump(mode="json")
    signature = _sign_payload(_compact(unsigned), sub.secret)
    body = _compact({**unsigned, "signature": signature})
    headers = {
        "Content-Type": "application/json",
        "X-EventOps-Signature": signature,
        "X-EventOps-Event": envelope.event_type,
    }

    result = DeliveryResult(url=sub.url)
    for attempt in range(1, MAX_DELIVERY_ATTEMPTS + 1):
        try:
            resp = await client.post(sub.url, content=body, headers=headers)
        except httpx.HTTPError as exc:
            result = DeliveryResult(url=sub.url, error=str(exc) or exc.__class__.__name__)
        else:
            if resp.status_code < 300:
                return DeliveryResult(url=sub.url, status=resp.status_code)
            result = DeliveryResult(url=sub.url, status=resp.status_code, error=f"HTTP {resp.status_code}")
            # Only server errors are worth retrying
            if resp.status_code < 500:
                break
        if attempt < MAX_DELIVERY_ATTEMPTS:
            await asyncio.sleep(RETRY_BACKOFF_SECONDS * attempt)

    logger.warning(
        "Webhook delivery of %s to %s failed: %s", envelope.event_type, sub.url, result.error,
    )
    return result
