from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from dicework.config import settings
from dicework.logs import configure_logging
from dicework.routers import rolls

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    configure_logging()
    logger.info("Starting dicework (%s)", settings.environment)
    yield


app = FastAPI(title="Dicework", debug=settings.debug, lifespan=lifespan)

app.include_router(rolls.router)
