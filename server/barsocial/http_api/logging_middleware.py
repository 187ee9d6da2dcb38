import logging
import time
import traceback
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger(__name__)

class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs one line per request; 4xx/5xx responses at WARNING"""

    async def dispatch(self, request: Request, call_next):
        start_time = time.perf_counter()
        client = request.client.host if request.client else "unknown"

        try:
            response = await call_next(request)
        except Exception as e:
            elapsed_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                f"{client} {request.method} {request.url.path} raised {type(e).__name__}: {e} "
                f"after {elapsed_ms:.2f}ms\n{traceback.format_exc()}"
            )
            # the error responder turns this into a 500
            raise

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        log = logger.warning if response.status_code >= 400 else logger.info
        log(f"{client} {request.method} {request.url.path} -> {response.status_code} in {elapsed_ms:.2f}ms")
        return response
