import json
import logging
import sys

from library_shop_api.context import request_id_var
from library_shop_api.logging_config import JsonFormatter, configure_logging


def make_record(msg: str = "hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="library_shop_api.main",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_emits_expected_fields() -> None:
    formatter = JsonFormatter(service_name="library-shop-api")

    payload = json.loads(formatter.format(make_record()))

    assert payload["service"] == "library-shop-api"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "library_shop_api.main"
    assert payload["message"] == "hello"
    assert "timestamp" in payload
    assert "request_id" not in payload


def test_json_formatter_emits_request_id_and_extras() -> None:
    formatter = JsonFormatter(service_name="library-shop-api")
    token = request_id_var.set("req-456")

    try:
        payload = json.loads(formatter.format(make_record(book_id="b-1", status_code=201)))
        assert payload["request_id"] == "req-456"
        assert payload["book_id"] == "b-1"
        assert payload["status_code"] == 201
    finally:
        request_id_var.reset(token)


def test_json_formatter_includes_exception() -> None:
    formatter = JsonFormatter(service_name="library-shop-api")
    try:
        raise ValueError("broken")
    except ValueError:
        record = make_record()
        record.exc_info = sys.exc_info()

    payload = json.loads(formatter.format(record))

    assert "ValueError: broken" in payload["exception"]


def test_configure_logging_plain_text_format() -> None:
    configure_logging(level="DEBUG", output_format="plain", service_name="library-shop-api")

    root_logger = logging.getLogger()

    assert root_logger.level == logging.DEBUG
    assert len(root_logger.handlers) == 1
    assert not isinstance(root_logger.handlers[0].formatter, JsonFormatter)


def test_configure_logging_json_format() -> None:
    configure_logging(level="INFO", output_format="json", service_name="library-shop-api")

    root_logger = logging.getLogger()

    assert root_logger.level == logging.INFO
    assert isinstance(root_logger.handlers[0].formatter, JsonFormatter)
