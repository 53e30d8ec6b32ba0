# app/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI
import uvicorn

from app.data import models  # noqa: F401  rejestracja wszystkich modeli w Base.metadata
from app.api import api_router
from app.api.routers import health
from app.data.database import Base, engine
from app.services.messaging import MessageBus
from app.utils.logging import get_logger

logger = get_logger(__name__)


def create_app(message_bus: MessageBus | None = None, create_tables: bool = True) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if create_tables:
            logger.info(f"Creating tables: {list(Base.metadata.tables.keys())}")
            Base.metadata.create_all(bind=engine)

        # jedno polaczenie z brokerem na caly proces
        app.state.message_bus = message_bus or MessageBus()
        try:
            yield
        finally:
            app.state.message_bus.close()
            logger.info("Message bus closed")

    app = FastAPI(
        title="Shop Service",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.include_router(health.router)
    app.include_router(api_router)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
