import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from slotwise.api.availability import router as availability_router
from slotwise.core.config import settings
from slotwise.wiring.dependencies import get_notifier


class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        extras = []
        for key in ("business_id", "booking_id", "resource_id", "combination_id", "party_size", "score", "reason", "error"):
            value = getattr(record, key, None)
            if value not in (None, ""):
                extras.append(f"{key}={value}")
        base = super().format(record)
        if extras:
            return f"{base} | " + " ".join(extras)
        return base


handler = logging.StreamHandler()
handler.setFormatter(ContextFormatter("%(levelname)s:%(name)s:%(message)s"))

root = logging.getLogger()
root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
root.handlers.clear()
root.addHandler(handler)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Close only a notifier that was already built.
    if get_notifier.cache_info().currsize:
        await get_notifier().aclose()
        logging.getLogger(__name__).info("Notifier closed")


app = FastAPI(title="Slotwise Scheduling Core", version="1.0.0", lifespan=lifespan)

app.include_router(availability_router, tags=["availability"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
