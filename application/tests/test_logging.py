import json
import logging

from app.logging import handlers, slack_handler
from app.logging.filters import BusinessContextFilter, RequestContextFilter
from app.logging.formatters import AppLogsJSONFormatter, AuditLogsJSONFormatter
from app.logging.slack_handler import SlackErrorHandler
from app.middlewares.request_context import clear_request_context, request_context


def make_record(msg="order_created | order_id=o-1", level=logging.INFO, **extra):
    record = logging.LogRecord("app.services.order_service", level, __file__, 10, msg, (), None)
    record.__dict__.update(extra)
    return record


def test_app_formatter_carries_business_context():
    clear_request_context()
    request_context.request_id = "req-1"
    request_context.order_id = "o-1"
    request_context.promotion_id = "promo-9"
    record = make_record()
    RequestContextFilter().filter(record)
    BusinessContextFilter().filter(record)

    entry = json.loads(AppLogsJSONFormatter().format(record))

    assert entry["message"] == "order_created | order_id=o-1"
    assert entry["level"] == "INFO"
    assert entry["request_id"] == "req-1"
    assert entry["order_id"] == "o-1"
    assert entry["promotion_id"] == "promo-9"
    assert entry["customer_id"] == ""
    clear_request_context()


def test_audit_formatter_serializes_payload_and_drops_message():
    record = make_record("Audit log", request={"BODY": {"quantity": 2}}, status_code=201, duration=12.5)

    entry = json.loads(AuditLogsJSONFormatter().format(record))

    assert "message" not in entry
    assert json.loads(entry["request"]) == {"BODY": {"quantity": 2}}
    assert entry["response"] == ""
    assert entry["status_code"] == 201
    assert entry["duration"] == 12.5


def test_slack_handler_only_posts_for_local_with_webhook(monkeypatch):
    calls = []
    monkeypatch.setattr(slack_handler.requests, "post", lambda url, json, timeout: calls.append((url, json)))

    SlackErrorHandler(webhook="https://hooks.example/alerts", environment="uat").emit(make_record(level=logging.ERROR))
    SlackErrorHandler(webhook="", environment="local").emit(make_record(level=logging.ERROR))
    SlackErrorHandler(webhook="https://hooks.example/alerts", environment="local").emit(make_record("boom", level=logging.ERROR))

    assert len(calls) == 1
    assert calls[0][0] == "https://hooks.example/alerts"
    assert "```boom```" in calls[0][1]["text"]


class FakeFirehose:
    def __init__(self, responses):
        self.responses = list(responses)
        self.batches = []

    def put_record_batch(self, DeliveryStreamName, Records):
        self.batches.append([record["Data"] for record in Records])
        return self.responses.pop(0)


def test_firehose_resends_only_rejected_records(monkeypatch):
    fake = FakeFirehose([
        {"FailedPutCount": 1, "RequestResponses": [{"RecordId": "1"}, {"ErrorCode": "ServiceUnavailableException"}]},
        {"FailedPutCount": 0, "RequestResponses": [{"RecordId": "2"}]},
    ])
    monkeypatch.setattr(handlers.boto3, "client", lambda *args, **kwargs: fake)
    monkeypatch.setattr(handlers.time, "sleep", lambda seconds: None)

    ok = handlers.FireHoseHandler("promo-oms-app-logs").send(["first", "second"])

    assert ok is True
    assert fake.batches == [["first", "second"], ["second"]]


def test_buffered_handler_ships_when_full(monkeypatch):
    fake = FakeFirehose([{"FailedPutCount": 0, "RequestResponses": [{}, {}]}])
    monkeypatch.setattr(handlers.boto3, "client", lambda *args, **kwargs: fake)
    monkeypatch.setattr(handlers.LoggingConfig, "buffer_capacity", classmethod(lambda cls, key: 2))

    handler = handlers.BufferedFirehoseHandler("app", AppLogsJSONFormatter())
    handler.handle(make_record("first"))
    assert fake.batches == []
    handler.handle(make_record("second"))

    assert [json.loads(data)["message"] for data in fake.batches[0]] == ["first", "second"]
    assert handler.buffer == []
