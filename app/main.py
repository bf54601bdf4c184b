import json
import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.config import settings, get_credentials


class JSONFormatter(logging.Formatter):
    """JSON log formatter for stdout."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "ts": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info and record.exc_info[0]:
            log["exc"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False)


# --- Logging setup ---
stdout_handler = logging.StreamHandler(sys.stdout)
stdout_handler.setFormatter(JSONFormatter())

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    handlers=[stdout_handler],
)
for noisy in ("httpx", "httpcore", "uvicorn.access"):
    logging.getLogger(noisy).setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    from app.services.fatsecret_auth import ConfigurationError

    try:
        get_credentials().validate()
    except ConfigurationError as e:
        # Searches will fail with 500 until CONSUMER_KEY / CONSUMER_SECRET are set
        logger.warning("FatSecret credentials not configured: %s", e)
    logger.info("App started")
    yield
    logger.info("App stopped")


app = FastAPI(title="Calify API", lifespan=lifespan)


@app.get("/health")
async def health():
    return {"status": "ok"}


from app.routers.food import router as food_router

app.include_router(food_router)
