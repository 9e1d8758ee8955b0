from fastapi import FastAPI, Request, status
from fastapi.exceptions import HTTPException, RequestValidationError
from fastapi.responses import JSONResponse

from app.config.sentry import capture_exception, add_breadcrumb
from app.core.exceptions import OMSError
from app.logging.utils import get_app_logger
from app.middlewares.request_context import request_context

# Settings
from app.config.settings import OMSConfigs
configs = OMSConfigs()

logger = get_app_logger("app.middlewares.handlers")


async def _oms_exception_handler(request: Request, exc: OMSError):
    """Business errors: the full violation list goes back to the caller."""
    request_context.module_name = 'middleware_handlers'
    if exc.status_code >= 500:
        logger.error(f"oms_error | method={request.method} url={str(request.url)} error_code={exc.error_code} message={exc.message}", exc_info=exc)
        add_breadcrumb(
            message=f"OMS error on {request.method} {request.url}",
            category="exception",
            level="error",
            data={"error_code": exc.error_code},
        )
        capture_exception(exc)
        payload = exc.to_dict() if configs.DEBUG else {"error_code": exc.error_code, "message": "Something went wrong"}
    else:
        logger.warning(f"oms_error | method={request.method} url={str(request.url)} status_code={exc.status_code} error_code={exc.error_code} errors={exc.errors}")
        payload = exc.to_dict()
    return JSONResponse(status_code=exc.status_code, content=payload)


async def _validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle validation errors with production-safe messages."""
    request_context.module_name = 'middleware_handlers'
    logger.warning(f"validation_error | method={request.method} url={str(request.url)} errors={exc.errors()}")

    if not configs.DEBUG:
        payload = {"error_code": "VALIDATION_ERROR", "message": "Invalid request data"}
    else:
        # "field_path: error_message" per violation
        error_messages = []
        for err in exc.errors():
            field_path = " -> ".join(str(loc) for loc in err.get("loc", []))
            error_messages.append(f"{field_path}: {err.get('msg', 'Invalid input')}")
        payload = {"error_code": "VALIDATION_ERROR", "message": "Validation errors", "errors": error_messages}

    return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content=payload)


async def _http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTP exceptions with production-safe messages."""
    request_context.module_name = 'middleware_handlers'
    status_code = exc.status_code
    if status_code >= 500:
        logger.error(f"http_exception | method={request.method} url={str(request.url)} status_code={status_code} detail={exc.detail}", exc_info=True)
        capture_exception(exc)
    else:
        logger.warning(f"http_exception | method={request.method} url={str(request.url)} status_code={status_code} detail={exc.detail}")

    if not configs.DEBUG:
        if status_code == 404:
            message = "Resource not found"
        elif 400 <= status_code < 500:
            message = "Invalid request"
        else:
            message = "Something went wrong"
        payload = {"message": message}
    else:
        payload = {"message": exc.detail}

    return JSONResponse(status_code=status_code, content=payload)


async def _general_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions with production-safe messages."""
    request_context.module_name = 'middleware_handlers'
    logger.error(
        f"unhandled_exception | method={request.method} url={str(request.url)} exception_type={type(exc).__name__} exception_message={str(exc)}",
        exc_info=exc,
    )
    add_breadcrumb(
        message=f"Unhandled exception on {request.method} {request.url}",
        category="exception",
        level="error",
        data={"exception_type": type(exc).__name__, "exception_message": str(exc)}
    )
    capture_exception(exc)

    if not configs.DEBUG:
        payload = {"error_code": "INTERNAL_ERROR", "message": "Something went wrong"}
    else:
        payload = {"error_code": "INTERNAL_ERROR", "message": f"Internal server error: {str(exc)}"}

    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=payload)


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all custom exception handlers to the given FastAPI instance."""
    app.add_exception_handler(OMSError, _oms_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(HTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _general_exception_handler)
