"""
AI assistant relay: forwards chat payloads to the external workflow webhook.

The webhook is an opaque JSON-in/JSON-out endpoint. No retries.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx
import structlog

log = structlog.get_logger()


class WebhookNotConfiguredError(Exception):
    """No webhook URL is configured."""


class WebhookUnavailableError(Exception):
    """The webhook could not be reached or did not return JSON."""


class WebhookStatusError(Exception):
    """The webhook answered with a non-2xx status."""

    def __init__(self, status_code: int, body: str):
        super().__init__(f"Webhook returned {status_code}")
        self.status_code = status_code
        self.body = body


class AIWebhookProxy:
    """Relays JSON payloads to the AI workflow webhook over one pooled client."""

    def __init__(
        self,
        webhook_url: str,
        timeout_seconds: Optional[float] = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._webhook_url = webhook_url
        self._timeout = timeout_seconds
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def configured(self) -> bool:
        return bool(self._webhook_url)

    async def open(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout),
                transport=self._transport,
            )

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def forward(self, payload: Any) -> Any:
        """POST ``payload`` to the webhook and return its decoded JSON response."""
        if not self.configured:
            raise WebhookNotConfiguredError("AI webhook URL is not configured")
        await self.open()
        assert self._client

        log.info("ai_proxy.forward", payload_preview=str(payload)[:200])
        try:
            resp = await self._client.post(self._webhook_url, json=payload)
        except httpx.HTTPError as exc:
            log.error("ai_proxy.unreachable", error=str(exc))
            raise WebhookUnavailableError(str(exc)) from exc

        if not resp.is_success:
            log.error("ai_proxy.upstream_error", status=resp.status_code, body=resp.text[:500])
            raise WebhookStatusError(resp.status_code, resp.text)

        try:
            data = resp.json()
        except ValueError as exc:
            log.error("ai_proxy.invalid_response", status=resp.status_code)
            raise WebhookUnavailableError("Webhook returned a non-JSON body") from exc

        log.info("ai_proxy.response", status=resp.status_code)
        return data
