"""
Log handlers: buffered Kinesis Firehose delivery, or local JSON files.
"""
import logging
import os
import time
from logging.handlers import MemoryHandler

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from app.logging.config import LoggingConfig
from app.logging.formatters import AppLogsJSONFormatter, AuditLogsJSONFormatter

# Settings
from app.config.settings import OMSConfigs
configs = OMSConfigs()


def dbg(msg: str) -> None:
    """stdout tracing for the delivery path, on when LOG_DEBUG_PRINTS=true"""
    if configs.LOG_DEBUG_PRINTS:
        print(msg)


class FireHoseHandler(logging.Handler):
    """Ships formatted records to one delivery stream; resends only the rejected ones"""

    def __init__(self, stream_name: str):
        super().__init__()
        self.stream_name = stream_name
        self.retry_count = max(LoggingConfig.FIREHOSE_RETRY_COUNT, 1)
        self.retry_delay = LoggingConfig.FIREHOSE_RETRY_DELAY
        self.client = boto3.client(
            "firehose",
            region_name=LoggingConfig.FIREHOSE_REGION_NAME,
            aws_access_key_id=LoggingConfig.FIREHOSE_ACCESS_KEY_ID,
            aws_secret_access_key=LoggingConfig.FIREHOSE_SECRET_ACCESS_KEY,
            config=Config(connect_timeout=10, read_timeout=30, retries={"max_attempts": 2}),
        )

    def emit(self, record):
        self.send([self.format(record)])

    def send(self, payloads) -> bool:
        pending = [{"Data": payload} for payload in payloads]
        for attempt in range(self.retry_count):
            if not pending:
                return True
            try:
                response = self.client.put_record_batch(DeliveryStreamName=self.stream_name, Records=pending)
            except (BotoCoreError, ClientError) as e:
                dbg(f"[Firehose:{self.stream_name}] attempt={attempt + 1} error={e}")
            else:
                results = response.get("RequestResponses", [])
                pending = [entry for entry, result in zip(pending, results) if result.get("ErrorCode")]
                dbg(f"[Firehose:{self.stream_name}] attempt={attempt + 1} rejected={len(pending)}")
            if pending and attempt < self.retry_count - 1:
                time.sleep(self.retry_delay * (2 ** attempt))
        return not pending


class BufferedFirehoseHandler(MemoryHandler):
    """Holds records until the buffer fills or LOG_BUFFER_TIMEOUT passes, then ships one batch."""

    def __init__(self, key: str, formatter: logging.Formatter):
        self.stream_name = LoggingConfig.stream_name(key)
        super().__init__(capacity=LoggingConfig.buffer_capacity(key), target=FireHoseHandler(self.stream_name))
        self.setFormatter(formatter)
        self.last_flush = time.monotonic()

    def shouldFlush(self, record) -> bool:
        expired = time.monotonic() - self.last_flush >= LoggingConfig.LOG_BUFFER_TIMEOUT
        return expired or len(self.buffer) >= self.capacity

    def flush(self):
        with self.lock:
            if self.target is None or not self.buffer:
                return
            batch = [self.format(record) for record in self.buffer]
            self.buffer.clear()
            self.last_flush = time.monotonic()
        ok = self.target.send(batch)
        dbg(f"[Buffer:{self.stream_name}] shipped={len(batch)} ok={ok}")


_firehose_handlers = {}


def _firehose_handler(key: str, formatter_class) -> BufferedFirehoseHandler:
    if key not in _firehose_handlers:
        _firehose_handlers[key] = BufferedFirehoseHandler(key, formatter_class())
    return _firehose_handlers[key]


def get_local_file_handler(name: str = 'app'):
    os.makedirs(LoggingConfig.LOG_DIR, exist_ok=True)
    handler = logging.FileHandler(os.path.join(LoggingConfig.LOG_DIR, f'{name}.log'))
    handler.setFormatter(AuditLogsJSONFormatter() if name.startswith('audit') else AppLogsJSONFormatter())
    return handler


def get_app_handler():
    if LoggingConfig.FIREHOSE_ENABLED:
        return _firehose_handler('app', AppLogsJSONFormatter)
    return get_local_file_handler('app')


def get_audit_handler(method: str = ''):
    if LoggingConfig.FIREHOSE_ENABLED:
        key = 'audit_get' if method == 'GET' else 'audit_all'
        return _firehose_handler(key, AuditLogsJSONFormatter)
    return get_local_file_handler('audit_logs')


def flush_handlers():
    for handler in _firehose_handlers.values():
        handler.flush()
