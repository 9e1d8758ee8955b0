"""
Audit and request logging middleware for FastAPI (Promo OMS)
"""
import json
import socket
import time
from datetime import datetime, timezone

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from app.logging.utils import get_app_logger, init_audit_logger
from app.logging.config import LoggingConfig
from app.middlewares.request_context import create_request_id, request_context, clear_request_context

# settings
from app.config.settings import OMSConfigs
configs = OMSConfigs()

MASKED_HEADERS = {'authorization', 'cookie', 'x-api-key'}


class AuditMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, exclude_paths: list[str] | None = None):
        super().__init__(app)
        self.logger = get_app_logger('app.middlewares.audit')
        self.exclude_audit_paths = exclude_paths or ['/health', '/docs', '/redoc', '/openapi.json']
        self.hostname = socket.gethostname()
        self.app_name = configs.APP_NAME
        self.version = configs.APP_VERSION

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        clear_request_context()
        request_id = create_request_id()
        start_time = time.time()
        timestamp = datetime.now(timezone.utc).isoformat()

        request_context.request_method = request.method
        request_context.request_path = request.url.path

        should_audit = LoggingConfig.AUDIT_LOGGING_ENABLED and not any(
            request.url.path.startswith(p) for p in self.exclude_audit_paths
        )
        body_bytes = await request.body() if should_audit else b''

        try:
            response = await call_next(request)
            response.headers['X-Request-ID'] = request_id
            duration = (time.time() - start_time) * 1000
            if should_audit:
                audit_data = self._build_audit_data(request, response, body_bytes, duration, request_id, timestamp)
                init_audit_logger(request.method).info("Audit log", extra=audit_data)
            return response
        except Exception as exc:
            duration = (time.time() - start_time) * 1000
            self.logger.error(
                f"request_failed | method={request.method} path={request.url.path} exception_type={exc.__class__.__name__} duration_ms={duration:.0f}",
                exc_info=True,
            )
            if should_audit:
                audit_data = self._build_audit_data(request, Response(status_code=500), body_bytes, duration, request_id, timestamp)
                audit_data['exception'] = exc.__class__.__name__
                init_audit_logger(request.method).info("Audit log (exception)", extra=audit_data)
            raise

    def _mask_headers(self, headers) -> dict:
        return {k: ('****' if k.lower() in MASKED_HEADERS else v) for k, v in headers.items()}

    def _parse_body(self, body_bytes: bytes, content_type: str):
        if not body_bytes:
            return {}
        try:
            if 'application/json' in content_type:
                return json.loads(body_bytes.decode('utf-8'))
            return body_bytes.decode('utf-8')[:1000]
        except (UnicodeDecodeError, json.JSONDecodeError):
            return {}

    def _build_audit_data(
        self,
        request: Request,
        response: Response,
        body_bytes: bytes,
        duration: float,
        request_id: str,
        timestamp: str,
    ) -> dict:
        status = getattr(response, 'status_code', 0)

        # response body only for non-2xx and only when enabled; streamed bodies are skipped
        response_data = ''
        body = getattr(response, 'body', None)
        if LoggingConfig.CAPTURE_RESPONSE_BODY and not 200 <= status < 300 and body:
            response_data = self._parse_body(body, response.headers.get('content-type', ''))

        return {
            'duration': round(duration, 2),
            'header_referer': request.headers.get('referer', ''),
            'hostname': self.hostname,
            'app_name': self.app_name,
            'module_name': request_context.module_name,
            'request': {
                "GET": dict(request.query_params),
                "BODY": self._parse_body(body_bytes, request.headers.get('content-type', '')),
                "HEADERS": self._mask_headers(dict(request.headers)),
            },
            'request_id': request_id,
            'request_method': request.method,
            'request_path': request.url.path,
            'response': response_data,
            'size_in_bytes': len(body) if body else 0,
            'status_code': status,
            'timestamp': timestamp,
            'version': self.version,
        }
