import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware

from wedsnap.config import settings
from wedsnap.database import create_tables, run_migrations, async_session
from wedsnap.dependencies import verify_api_key
from wedsnap.seed import seed_data
from wedsnap.routers.auth import router as auth_router
from wedsnap.routers.events import router as events_router
from wedsnap.routers.guests import router as guests_router
from wedsnap.routers.photos import router as photos_router
from wedsnap.routers.realtime import router as realtime_router
from wedsnap.routers.storage import router as storage_router
from wedsnap.utils.exceptions import register_exception_handlers

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_tables()
    await run_migrations()
    if settings.seed_demo_data:
        async with async_session() as session:
            await seed_data(session)
    yield


app = FastAPI(
    title="Wedsnap API",
    description="Wedding photo sharing: couples host an event, guests share a limited number of moments",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

_api_key_dep = [Depends(verify_api_key)]

app.include_router(auth_router, prefix="/api/v1", dependencies=_api_key_dep)
app.include_router(events_router, prefix="/api/v1", dependencies=_api_key_dep)
app.include_router(guests_router, prefix="/api/v1", dependencies=_api_key_dep)
app.include_router(photos_router, prefix="/api/v1", dependencies=_api_key_dep)
# Signed URLs and stream tokens authorize these; browsers cannot add the API key header
app.include_router(storage_router, prefix="/api/v1")
app.include_router(realtime_router, prefix="/api/v1")


@app.get("/health")
async def health_check():
    return {"status": "success", "data": {"service": "wedsnap-api", "version": VERSION}, "message": None}
