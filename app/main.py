from contextlib import asynccontextmanager

from fastapi import FastAPI
from app.core.config import settings
from app.core.logger import logger
from app.core.redis import redis_client
from app.db.session import init_db
from app.middleware.log_middleware import LogMiddleware

@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.CREATE_TABLES_ON_STARTUP:
        await init_db()
        logger.info("Database tables created")
    yield
    await redis_client.close()

app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    lifespan=lifespan
)

from fastapi.middleware.cors import CORSMiddleware

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(LogMiddleware)

@app.get("/")
async def root():
    return {"message": f"{settings.PROJECT_NAME} API is running"}

from app.api.api import api_router
app.include_router(api_router, prefix=settings.API_V1_STR)
