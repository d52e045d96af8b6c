import logging
import time
from typing import Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.types import ASGIApp
from sqlalchemy.orm import Session

from app.database import SessionLocal
from app.models.audit import AuditLog

logger = logging.getLogger(__name__)


class AuditMiddleware(BaseHTTPMiddleware):
    """
    Logs every API request with its latency and stores it in the audit table.
    Adds an X-Response-Time-Ms header to the response.
    """

    EXCLUDED_PATHS = {"/docs", "/redoc", "/openapi.json", "/health", "/api/chat/health"}

    def __init__(self, app: ASGIApp, session_factory: Callable[[], Session] = SessionLocal):
        super().__init__(app)
        self.session_factory = session_factory

    async def dispatch(self, request: Request, call_next):
        if request.url.path in self.EXCLUDED_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        status_code = 500
        error_detail = None

        try:
            response = await call_next(request)
            status_code = response.status_code
        except Exception as e:
            error_detail = str(e)
            logger.error(f"Error processing request {request.url.path}: {error_detail}")
            raise
        finally:
            response_time_ms = round((time.perf_counter() - start_time) * 1000, 2)

            logger.info(
                f"{request.method} {request.url.path} - "
                f"Status: {status_code} - "
                f"Time: {response_time_ms:.2f}ms"
            )

            self._save_audit_log(
                AuditLog(
                    method=request.method,
                    path=request.url.path,
                    query_params=str(dict(request.query_params)) if request.query_params else None,
                    status_code=status_code,
                    response_time_ms=response_time_ms,
                    client_ip=request.client.host if request.client else None,
                    user_agent=request.headers.get("user-agent"),
                    error_detail=error_detail,
                )
            )

        response.headers["X-Response-Time-Ms"] = f"{response_time_ms:.2f}"
        return response

    def _save_audit_log(self, audit: AuditLog) -> Optional[int]:
        """
        Persist the audit row in its own session, apart from the request's.
        Failures are logged and swallowed so auditing never breaks a request.
        """
        db = self.session_factory()
        try:
            db.add(audit)
            db.commit()
            return audit.id
        except Exception as e:
            db.rollback()
            logger.error(f"Failed to save audit log: {e}")
            return None
        finally:
            db.close()
