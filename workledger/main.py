from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from workledger.core.errors import LedgerError
from workledger.core.logging import configure_logging
from workledger.models import bill, contractor, contractor_work_done, job_ops_ledger, operation, series  # noqa: F401
from workledger.routers.auth import router as auth_router
from workledger.routers.bills import router as bills_router
from workledger.routers.contractors import router as contractors_router
from workledger.routers.jobs import router as jobs_router
from workledger.routers.operations import router as operations_router
from workledger.routers.series import router as series_router
from workledger.routers.work import router as work_router
from workledger.services.job_metadata_source import close_job_metadata_source

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    try:
        yield
    finally:
        close_job_metadata_source()


app = FastAPI(
    title="Contractor Work Ledger",
    lifespan=lifespan,
)


@app.exception_handler(LedgerError)
async def handle_ledger_error(request: Request, exc: LedgerError):
    if exc.status_code >= 500:
        logger.error(
            "Request failed",
            extra={"path": request.url.path, "error": exc.message, **exc.context},
        )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
async def handle_request_validation_error(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"detail": "Invalid request body", "errors": jsonable_encoder(exc.errors())},
    )


@app.middleware("http")
async def catch_unhandled_exceptions(request: Request, call_next):
    try:
        return await call_next(request)
    except Exception:
        logger.exception("Unhandled exception", extra={"path": request.url.path, "method": request.method})
        return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


app.include_router(auth_router)
app.include_router(operations_router)
app.include_router(contractors_router)
app.include_router(jobs_router)
app.include_router(work_router)
app.include_router(bills_router)
app.include_router(series_router)


@app.get("/")
def root():
    return {"status": "Contractor Work Ledger running"}


@app.get("/health")
def health():
    return {
        "status": "ok",
        "version": "1.0.0",
    }
