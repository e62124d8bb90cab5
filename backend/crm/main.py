import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from crm.api import consistency, customers, interactions, purchases
from crm.core.config import settings
from crm.core.errors import CRMError, InvalidPayloadError, NotFoundError
from crm.db.base import init_models

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )
    if settings.STORAGE_BACKEND == "sql":
        await init_models()
    logger.info("%s started with %s storage", settings.PROJECT_NAME, settings.STORAGE_BACKEND)
    yield


app = FastAPI(
    title=f"{settings.PROJECT_NAME} API",
    description="Customer relationship records with content-derived ids",
    version="0.1.0",
    lifespan=lifespan,
)


# Errors are returned as {"<Kind>": "<message>"} bodies

@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={exc.kind: str(exc)})


@app.exception_handler(InvalidPayloadError)
async def invalid_payload_handler(request: Request, exc: InvalidPayloadError):
    return JSONResponse(
        status_code=422, content={exc.kind: exc.detail}
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    detail = "; ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
    )
    logger.warning("Invalid payload for %s %s: %s", request.method, request.url.path, detail)
    return JSONResponse(
        status_code=422,
        content={InvalidPayloadError.kind: detail or "Invalid payload"},
    )


@app.exception_handler(CRMError)
async def crm_error_handler(request: Request, exc: CRMError):
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={exc.kind: str(exc)}
    )


# Routers
app.include_router(customers.router, prefix=settings.API_PREFIX)
app.include_router(interactions.router, prefix=settings.API_PREFIX)
app.include_router(purchases.router, prefix=settings.API_PREFIX)
app.include_router(consistency.router, prefix=settings.API_PREFIX)


@app.get("/health")
async def health_check():
    return {"status": "ok", "version": "0.1.0", "storage": settings.STORAGE_BACKEND}
