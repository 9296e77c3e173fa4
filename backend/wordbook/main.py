import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.routes_status import router as status_router
from .api.routes_words import router as words_router
from .config import settings
from .core.database import Base, engine
from .core.llm_client import close_provider, init_provider
from . import models  # noqa: F401  registers tables on Base.metadata

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)


app = FastAPI(
    title=settings.app_name,
    version="0.1.0",
)

# The browser client is served from another origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup_event():
    # Create tables
    Base.metadata.create_all(bind=engine)

    init_provider(settings)


@app.on_event("shutdown")
async def shutdown_event():
    await close_provider()


app.include_router(status_router)
app.include_router(words_router)
