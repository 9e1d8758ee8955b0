"""
JSON formatters for Promo OMS logs
"""
import json
import logging
from datetime import datetime, timezone

# Settings
from app.config.settings import OMSConfigs
configs = OMSConfigs()


def _dumps(value) -> str:
    return json.dumps(value, ensure_ascii=False, default=str)


class BaseJSONFormatter(logging.Formatter):
    """One JSON object per record; subclasses list the record attributes they copy."""

    include_message = True
    # attribute name -> default when the record lacks it
    context_fields = {}

    def format(self, record):
        entry = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'module': record.module,
            'function': record.funcName,
            'line_number': record.lineno,
            'environment': configs.APPLICATION_ENVIRONMENT,
            'service': configs.APP_NAME,
        }
        if self.include_message:
            entry['message'] = record.getMessage()
        if record.exc_info and record.exc_info[1] is not None:
            entry['exception'] = f"{type(record.exc_info[1]).__name__}: {record.exc_info[1]}"

        for name, default in self.context_fields.items():
            entry[name] = getattr(record, name, default)
        self.add_extra_fields(entry, record)
        return _dumps(entry)

    def add_extra_fields(self, entry, record):
        pass


class AppLogsJSONFormatter(BaseJSONFormatter):
    context_fields = {
        'request_id': '',
        'request_method': '',
        'request_path': '',
        'customer_id': '',
        'order_id': '',
        'promotion_id': '',
    }


class AuditLogsJSONFormatter(BaseJSONFormatter):
    # the audit payload lives in record extras
    include_message = False
    context_fields = {
        'request_id': '',
        'request_method': '',
        'request_path': '',
        'status_code': 0,
        'duration': 0.0,
        'size_in_bytes': 0,
        'header_referer': '',
        'hostname': '',
        'app_name': '',
        'module_name': '',
        'version': '',
    }

    def add_extra_fields(self, entry, record):
        for name in ('request', 'response'):
            value = getattr(record, name, None)
            entry[name] = _dumps(value) if value else ''
