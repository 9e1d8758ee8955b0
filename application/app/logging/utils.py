"""
Logging utilities for Promo OMS (FastAPI)
"""
import logging
import atexit

from app.logging.config import LoggingConfig
from app.logging.handlers import get_app_handler, get_audit_handler, get_local_file_handler, flush_handlers
from app.logging.filters import RequestContextFilter, BusinessContextFilter
from app.logging.slack_handler import slack_handler


def get_app_logger(name: str = 'app'):
    logger = logging.getLogger(name)
    if not logger.handlers:
        # central handler or local file handler per module
        handler = get_app_handler() if LoggingConfig.FIREHOSE_ENABLED else get_local_file_handler(name.replace('.', '_'))
        handler.addFilter(RequestContextFilter())
        handler.addFilter(BusinessContextFilter())
        logger.addHandler(handler)
        logger.addHandler(slack_handler)
        logger.setLevel(logging.INFO)
        logger.propagate = False
    return logger


def init_audit_logger(method: str = ''):
    key = 'get' if method.upper() == 'GET' else 'all'
    logger = logging.getLogger(f"oms.audit.{key}")
    if not logger.handlers:
        handler = get_audit_handler(method.upper())
        handler.addFilter(RequestContextFilter())
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
        logger.propagate = False
    return logger


def initialize_logging():
    is_valid, message = LoggingConfig.is_valid_config()
    if not is_valid:
        print(f"Warning: {message}")
    atexit.register(flush_handlers)
    print("Logging system initialized (Promo OMS)")
