"""
Client for the external relational job-metadata source.

The source is optional: when it is unconfigured or unreachable every call
raises UpstreamUnavailable and nothing else in the service is affected.
"""
from __future__ import annotations

import logging
import os
import threading
import time
from concurrent.futures import Future
from typing import Any, Callable, Dict, List, Mapping, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from workledger.core.errors import NotFoundError, UpstreamUnavailable, ValidationError

logger = logging.getLogger(__name__)

MIN_SEARCH_LENGTH = 4

SEARCH_JOB_NUMBERS_SQL = "EXEC dbo.contractor_search_jobnumbers @JobNumberPart = :part"
GET_JOB_DETAILS_SQL = "EXEC dbo.contractor_get_job_details @JobBookingNo = :job_number"

_JOB_NUMBER_COLUMNS = ("JobNumber", "Job_Number", "jobNumber", "job_number", "JobNo", "Job_NO")


def _first_present(row: Mapping[str, Any], names: tuple, default: Any) -> Any:
    for name in names:
        value = row.get(name)
        if value not in (None, ""):
            return value
    return default


def _default_engine_factory(url: str) -> Engine:
    return create_engine(
        url,
        pool_size=10,
        pool_recycle=1800,
        pool_pre_ping=True,
        connect_args={"login_timeout": 10, "timeout": 30} if url.startswith("mssql+pymssql") else {},
    )


class JobMetadataSource:
    """
    Owned handle on the metadata database.

    The engine is created lazily. At most one connection attempt is in flight:
    callers arriving while an attempt runs wait for that attempt and share its
    outcome. A failed attempt leaves the handle unconnected so the next call retries.
    """

    def __init__(self, url: Optional[str], *, engine_factory: Callable[[str], Any] = _default_engine_factory):
        self._url = url
        self._engine_factory = engine_factory
        self._engine: Optional[Any] = None
        self._attempt: Optional[Future] = None
        self._lock = threading.Lock()

    @property
    def configured(self) -> bool:
        return bool(self._url)

    @property
    def connected(self) -> bool:
        return self._engine is not None

    def _connect(self) -> Any:
        with self._lock:
            if self._engine is not None:
                return self._engine
            attempt = self._attempt
            owner = attempt is None
            if owner:
                attempt = self._attempt = Future()

        if not owner:
            logger.info("Job metadata connection already in progress, waiting")
            return attempt.result()

        try:
            engine = self._open()
        except UpstreamUnavailable as exc:
            with self._lock:
                self._attempt = None
            attempt.set_exception(exc)
            raise

        with self._lock:
            self._engine = engine
            self._attempt = None
        attempt.set_result(engine)
        return engine

    def _open(self) -> Any:
        if not self._url:
            raise UpstreamUnavailable("Job metadata source is not configured")

        logger.info("Connecting to job metadata source")
        started = time.monotonic()
        try:
            engine = self._engine_factory(self._url)
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except Exception as exc:
            logger.exception("Job metadata connection failed")
            raise UpstreamUnavailable("Job metadata source unavailable") from exc

        logger.info(
            "Connected to job metadata source",
            extra={"connect_ms": int((time.monotonic() - started) * 1000)},
        )
        return engine

    def reset(self) -> None:
        with self._lock:
            engine, self._engine = self._engine, None
        if engine is not None:
            try:
                engine.dispose()
            except Exception:
                logger.exception("Error disposing job metadata engine")

    def _call(self, sql: str, params: Dict[str, Any]) -> List[Mapping[str, Any]]:
        engine = self._connect()
        started = time.monotonic()
        try:
            with engine.connect() as conn:
                rows = conn.execute(text(sql), params).mappings().all()
        except SQLAlchemyError as exc:
            logger.exception("Job metadata procedure failed", extra={"sql": sql})
            self.reset()
            raise UpstreamUnavailable("Job metadata source unavailable") from exc

        logger.info(
            "Job metadata procedure executed",
            extra={"sql": sql, "rows": len(rows), "query_ms": int((time.monotonic() - started) * 1000)},
        )
        return rows

    def search_job_numbers(self, part: Any) -> List[str]:
        part = str(part or "").strip()
        if len(part) < MIN_SEARCH_LENGTH:
            raise ValidationError(f"Job number part must be at least {MIN_SEARCH_LENGTH} characters")

        rows = self._call(SEARCH_JOB_NUMBERS_SQL, {"part": part})
        job_numbers = []
        for row in rows:
            fallback = next(iter(row.values()), None) if row else None
            value = _first_present(row, _JOB_NUMBER_COLUMNS, fallback)
            if value not in (None, ""):
                job_numbers.append(str(value))
        return job_numbers

    def get_job_details(self, job_number: Any) -> dict:
        job_number = str(job_number or "").strip()
        if not job_number:
            raise ValidationError("Job number is required")

        rows = self._call(GET_JOB_DETAILS_SQL, {"job_number": job_number})
        if not rows:
            raise NotFoundError("Job not found")

        row = rows[0]
        return {
            "clientName": _first_present(row, ("Client Name", "ClientName", "clientName"), ""),
            "jobTitle": _first_present(row, ("Job Title", "JobTitle", "jobTitle"), ""),
            "qty": _first_present(row, ("OrderQty", "orderQty", "Qty", "qty"), 0),
            "productCat": _first_present(row, ("ProductCategory", "productCategory", "ProductCat", "productCat"), ""),
            "unitPrice": _first_present(row, ("UnitPrice", "unitPrice", "unit_price"), 0),
        }


_source: Optional[JobMetadataSource] = None
_source_lock = threading.Lock()


def get_job_metadata_source() -> JobMetadataSource:
    """Process-wide handle, built from JOB_METADATA_URL on first use."""
    global _source
    with _source_lock:
        if _source is None:
            _source = JobMetadataSource(os.getenv("JOB_METADATA_URL"))
        return _source


def close_job_metadata_source() -> None:
    global _source
    with _source_lock:
        source, _source = _source, None
    if source is not None:
        source.reset()
