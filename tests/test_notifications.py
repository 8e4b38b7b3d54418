"""
Tests for WhatsApp confirmations and the in-process slot lock.
"""

from __future__ import annotations

import asyncio
import json
from datetime import date

import httpx
import pytest

from slotwise.application.exceptions import DependencyError
from slotwise.infrastructure.locking.memory_lock import MemorySlotLock
from slotwise.infrastructure.notifications.whatsapp_client import EvolutionWhatsAppClient
from slotwise.infrastructure.notifications.whatsapp_notifier import WhatsAppNotifier, confirmation_text


def _client(handler) -> EvolutionWhatsAppClient:
    return EvolutionWhatsAppClient(
        base_url="https://evolution.example.com/",
        api_key="secret-key",
        transport=httpx.MockTransport(handler),
    )


def test_confirmation_text(salon, make_table, make_booking):
    booking = make_booking("b1", salon.id, "14:00")
    text = confirmation_text(salon, booking)
    assert text == "Hola Cliente, tu cita en Salón Lucía está confirmada para el 02/06/2025 a las 14:00."

    with_tables = confirmation_text(salon, booking, (make_table("A", salon.id, 4), make_table("B", salon.id, 2)))
    assert with_tables.endswith(" Mesa: A+B.")


@pytest.mark.asyncio
async def test_sends_text_through_evolution_api(salon, make_booking):
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(201, json={"key": {"id": "msg-1"}})

    notifier = WhatsAppNotifier(_client(handler), enabled=True)
    sent = await notifier.send_booking_confirmation(salon, make_booking("b1", salon.id, "14:00"))

    assert sent is True
    assert len(requests) == 1
    assert requests[0].url == "https://evolution.example.com/message/sendText/salon-lucia"
    assert requests[0].headers["apikey"] == "secret-key"
    body = json.loads(requests[0].content)
    assert body["number"] == "34600000000"
    assert "14:00" in body["text"]


@pytest.mark.asyncio
async def test_disabled_notifications_skip_sending(salon, make_booking):
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    notifier = WhatsAppNotifier(_client(handler), enabled=False)
    assert await notifier.send_booking_confirmation(salon, make_booking("b1", salon.id, "14:00")) is False


@pytest.mark.asyncio
async def test_api_error_raises_dependency_error(salon, make_booking):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="instance not connected")

    notifier = WhatsAppNotifier(_client(handler), enabled=True)
    with pytest.raises(DependencyError):
        await notifier.send_booking_confirmation(salon, make_booking("b1", salon.id, "14:00"))


@pytest.mark.asyncio
async def test_transport_error_raises_dependency_error(salon, make_booking):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    notifier = WhatsAppNotifier(_client(handler), enabled=True)
    with pytest.raises(DependencyError):
        await notifier.send_booking_confirmation(salon, make_booking("b1", salon.id, "14:00"))


@pytest.mark.asyncio
async def test_slot_lock_serializes_same_day_only():
    lock = MemorySlotLock()
    order: list[str] = []

    async def worker(name: str, business_id: str, day: date) -> None:
        async with lock.hold(business_id, day):
            order.append(f"{name}:in")
            await asyncio.sleep(0.01)
            order.append(f"{name}:out")

    monday = date(2025, 6, 2)
    await asyncio.gather(worker("a", "salon-1", monday), worker("b", "salon-1", monday))
    assert order == ["a:in", "a:out", "b:in", "b:out"]

    order.clear()
    await asyncio.gather(worker("a", "salon-1", monday), worker("c", "salon-1", date(2025, 6, 3)))
    assert order[:2] == ["a:in", "c:in"]


@pytest.mark.asyncio
async def test_notifier_close_releases_http_client():
    client = _client(lambda request: httpx.Response(201))
    notifier = WhatsAppNotifier(client, enabled=True)

    assert client.is_closed is False
    await notifier.aclose()
    assert client.is_closed is True
