"""
Logging filters that copy request context onto log records
"""
import logging
from app.middlewares.request_context import request_context


class RequestContextFilter(logging.Filter):
    def filter(self, record):
        record.request_id = getattr(request_context, 'request_id', '') or ''
        record.request_method = getattr(request_context, 'request_method', '') or ''
        record.request_path = getattr(request_context, 'request_path', '') or ''
        return True


class BusinessContextFilter(logging.Filter):
    def filter(self, record):
        record.customer_id = getattr(request_context, 'customer_id', '') or ''
        record.order_id = getattr(request_context, 'order_id', '') or ''
        record.promotion_id = getattr(request_context, 'promotion_id', '') or ''
        return True
