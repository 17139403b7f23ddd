from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from config import settings
from logging_config import setup_logging
from middleware import CaseTransformerMiddleware


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.log_level)
    logger.info(
        "{} started; case transform {} on '{}'",
        settings.app_name,
        "enabled" if settings.case_transform_enabled else "disabled",
        settings.case_transform_path_prefix or "/",
    )
    yield


app = FastAPI(
    title=settings.app_name,
    description="API gateway translating camelCase frontend payloads to snake_case backend services",
    version="0.1.0",
    lifespan=lifespan,
)

# Added first so it runs inside CORS: preflight responses never reach it
app.add_middleware(
    CaseTransformerMiddleware,
    path_prefix=settings.case_transform_path_prefix,
    enabled=settings.case_transform_enabled,
    request_id_header=settings.request_id_header,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health():
    return {"status": "ok"}
