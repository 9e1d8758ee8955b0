"""
Logging configuration for Promo OMS
Firehose delivery streams when enabled, JSON files under LOG_DIR otherwise.
"""

# Settings
from app.config.settings import OMSConfigs
configs = OMSConfigs()

DEFAULT_STREAMS = {
    'app': 'promo-oms-app-logs',
    'audit_get': 'promo-oms-audit-get-logs',
    'audit_all': 'promo-oms-audit-logs',
}


class LoggingConfig:
    LOG_DIR = configs.LOG_DIR
    FIREHOSE_ENABLED = configs.FIREHOSE_ENABLED
    AUDIT_LOGGING_ENABLED = configs.AUDIT_LOGGING_ENABLED
    CAPTURE_RESPONSE_BODY = configs.CAPTURE_RESPONSE_BODY
    LOG_BUFFER_TIMEOUT = configs.LOG_BUFFER_TIMEOUT

    FIREHOSE_REGION_NAME = configs.FIREHOSE_REGION_NAME
    FIREHOSE_ACCESS_KEY_ID = configs.FIREHOSE_ACCESS_KEY_ID
    FIREHOSE_SECRET_ACCESS_KEY = configs.FIREHOSE_SECRET_ACCESS_KEY
    FIREHOSE_RETRY_COUNT = configs.FIREHOSE_RETRY_COUNT
    FIREHOSE_RETRY_DELAY = configs.FIREHOSE_RETRY_DELAY

    @classmethod
    def stream_name(cls, key: str) -> str:
        configured = {
            'app': configs.APP_LOGS_STREAM_NAME,
            'audit_get': configs.AUDIT_LOGS_GET_STREAM_NAME,
            'audit_all': configs.AUDIT_LOGS_STREAM_NAME,
        }
        return configured.get(key) or DEFAULT_STREAMS[key]

    @classmethod
    def buffer_capacity(cls, key: str) -> int:
        return configs.APP_LOGS_CAPACITY if key == 'app' else configs.AUDIT_LOGS_CAPACITY

    @classmethod
    def is_valid_config(cls):
        """Only Firehose needs credentials"""
        if cls.FIREHOSE_ENABLED and not (cls.FIREHOSE_ACCESS_KEY_ID and cls.FIREHOSE_SECRET_ACCESS_KEY):
            return False, "Firehose credentials not configured"
        return True, "Configuration is valid"
