from __future__ import annotations

import logging

import httpx

from slotwise.application.exceptions import DependencyError


class EvolutionWhatsAppClient:
    """Thin client for the Evolution API text endpoint. One instance per business slug."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not base_url:
            raise ValueError("EVOLUTION_API_URL is required for WhatsApp notifications")
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)
        self._logger = logging.getLogger(__name__)

    async def send_text(self, instance: str, number: str, text: str) -> None:
        url = f"{self._base_url}/message/sendText/{instance}"
        headers = {"apikey": self._api_key, "Content-Type": "application/json"}
        payload = {"number": number, "text": text}
        try:
            resp = await self._client.post(url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            self._logger.error(
                "WhatsApp send failed",
                extra={"instance": instance, "error": str(e)},
            )
            raise DependencyError(f"WhatsApp send failed: {e}") from e

        if resp.status_code >= 400:
            self._logger.error(
                "WhatsApp send failed",
                extra={
                    "instance": instance,
                    "status": resp.status_code,
                    "error_message": resp.text,
                    "text_length": len(text),
                },
            )
            raise DependencyError(f"WhatsApp send failed with status {resp.status_code}")

    @property
    def is_closed(self) -> bool:
        return self._client.is_closed

    async def aclose(self) -> None:
        await self._client.aclose()
