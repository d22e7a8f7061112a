from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from vision_metadata.observability.metrics import HTTP_REQUESTS_TOTAL
from vision_metadata.utils.request_context import clear_request_id, new_request_id, set_request_id


class RequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        rid = request.headers.get("X-Request-Id") or new_request_id()

        # contextvar for logging, request.state for the error handlers
        set_request_id(rid)
        request.state.request_id = rid

        try:
            response = await call_next(request)
        finally:
            clear_request_id()

        HTTP_REQUESTS_TOTAL.labels(
            path=request.url.path, method=request.method, status=str(response.status_code)
        ).inc()
        response.headers["X-Request-Id"] = rid
        return response
