from functools import lru_cache
import logging

from slotwise.core.config import settings
from slotwise.application.ports.notification import NotificationPort
from slotwise.application.ports.record_store import RecordStorePort
from slotwise.application.ports.slot_lock import SlotLockPort
from slotwise.application.use_cases.assign_table import TableAssignmentEngine
from slotwise.application.use_cases.check_availability import CheckAvailabilityUseCase
from slotwise.application.use_cases.create_booking import CreateBookingUseCase
from slotwise.application.use_cases.find_next_slots import NextSlotFinder
from slotwise.infrastructure.locking.memory_lock import MemorySlotLock
from slotwise.infrastructure.notifications.mock_notifier import MockNotifier
from slotwise.infrastructure.notifications.whatsapp_client import EvolutionWhatsAppClient
from slotwise.infrastructure.notifications.whatsapp_notifier import WhatsAppNotifier
from slotwise.infrastructure.store.json_store import JsonRecordStore
from slotwise.infrastructure.store.memory_store import MemoryRecordStore


@lru_cache
def get_record_store() -> RecordStorePort:
    logger = logging.getLogger(__name__)
    provider = settings.STORE_PROVIDER.lower()
    if provider == "json":
        logger.info("Using JsonRecordStore", extra={"path": settings.STORE_PATH})
        return JsonRecordStore(path=settings.STORE_PATH, default_timezone=settings.DEFAULT_TIMEZONE)
    if provider != "memory":
        raise ValueError(f"Unknown STORE_PROVIDER: {settings.STORE_PROVIDER}")
    logger.info("Using MemoryRecordStore")
    return MemoryRecordStore()


@lru_cache
def get_slot_lock() -> SlotLockPort:
    return MemorySlotLock()


@lru_cache
def get_notifier() -> NotificationPort:
    logger = logging.getLogger(__name__)
    if not settings.EVOLUTION_API_URL:
        if settings.NOTIFICATIONS_ENABLED and settings.ENV.lower() not in {"dev", "local", "test"}:
            raise ValueError("EVOLUTION_API_URL is required to send WhatsApp confirmations.")
        logger.info("Using MockNotifier (EVOLUTION_API_URL missing)")
        return MockNotifier()

    logger.info("Using WhatsAppNotifier")
    client = EvolutionWhatsAppClient(
        base_url=settings.EVOLUTION_API_URL,
        api_key=settings.EVOLUTION_API_KEY or "",
    )
    return WhatsAppNotifier(client=client, enabled=settings.NOTIFICATIONS_ENABLED)


def get_table_engine() -> TableAssignmentEngine:
    return TableAssignmentEngine(
        store=get_record_store(),
        increment_minutes=settings.SLOT_INCREMENT_MINUTES,
        max_suggestions=settings.MAX_SUGGESTIONS,
    )


def get_availability_use_case() -> CheckAvailabilityUseCase:
    return CheckAvailabilityUseCase(
        store=get_record_store(),
        table_engine=get_table_engine(),
        increment_minutes=settings.SLOT_INCREMENT_MINUTES,
        max_suggestions=settings.MAX_SUGGESTIONS,
        default_duration_minutes=settings.DEFAULT_DURATION_MINUTES,
        default_table_duration_minutes=settings.DEFAULT_TABLE_DURATION_MINUTES,
    )


def get_next_slot_finder() -> NextSlotFinder:
    return NextSlotFinder(store=get_record_store())


def get_create_booking_use_case() -> CreateBookingUseCase:
    return CreateBookingUseCase(
        store=get_record_store(),
        availability=get_availability_use_case(),
        lock=get_slot_lock(),
        notifier=get_notifier(),
    )
