"""Tests for the error hierarchy and logging setup."""

import json
import logging
import sys

import httpx

from portal_client import (
    ApiError,
    ClientMetrics,
    JsonFormatter,
    NetworkError,
    PortalClientError,
    RequestTimeoutError,
    classify_transport_error,
    error_to_dict,
    get_metrics_collector,
    setup_logging,
)


class TestExceptionHierarchy:
    """ApiError shapes."""

    def test_api_error_fields(self):
        error = ApiError(400, "Bad input", errors={"name": "Required", "tags": ["Too many", "Duplicate"]})

        assert isinstance(error, PortalClientError)
        assert str(error) == "Bad input"
        assert error.errors == {"name": ["Required"], "tags": ["Too many", "Duplicate"]}
        assert error.to_dict() == {
            "error_type": "ApiError",
            "status": 400,
            "message": "Bad input",
            "errors": {"name": ["Required"], "tags": ["Too many", "Duplicate"]},
        }

    def test_retryable_statuses(self):
        assert NetworkError().status == 0
        assert NetworkError().is_retryable
        assert RequestTimeoutError().status == 408
        assert RequestTimeoutError().message == "Request timeout"
        assert RequestTimeoutError().is_retryable
        assert not ApiError(500, "boom").is_retryable
        assert ApiError(500, "boom").is_server_error

    def test_non_mapping_errors_are_dropped(self):
        assert ApiError(400, "x", errors=["a"]).errors is None

    def test_classify_transport_error(self):
        assert isinstance(classify_transport_error(httpx.ConnectTimeout("slow")), RequestTimeoutError)
        assert isinstance(classify_transport_error(httpx.ConnectError("refused")), NetworkError)

        other = classify_transport_error(httpx.TooManyRedirects("loop"), request_url="https://x")
        assert type(other) is ApiError
        assert other.status == 500
        assert other.context == {"request_url": "https://x"}

    def test_error_to_dict(self):
        assert error_to_dict(ApiError(404, "Not found"))["status"] == 404
        assert error_to_dict(ValueError()) == {
            "error": True,
            "error_type": "ValueError",
            "message": "An unexpected error occurred",
        }


class TestLogging:
    """Logger configuration."""

    def test_setup_logging_rich_handler(self):
        from rich.logging import RichHandler

        logger = setup_logging("DEBUG")

        assert logger.name == "portal_client"
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0], RichHandler)

    def test_setup_logging_json_and_file(self, tmp_path):
        log_file = tmp_path / "client.log"
        logger = setup_logging("warning", log_file=str(log_file), json_format=True)

        assert all(isinstance(h.formatter, JsonFormatter) for h in logger.handlers)
        assert len(logger.handlers) == 2

        logger.warning("retrying")
        for handler in logger.handlers:
            handler.flush()
        entry = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert entry["message"] == "retrying"
        assert entry["level"] == "WARNING"

        for handler in logger.handlers:
            handler.close()
        logger.handlers = []

    def test_transport_loggers_follow_debug_only(self):
        setup_logging("INFO")
        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("httpcore").level == logging.WARNING

        setup_logging("INFO", transport_level="error")
        assert logging.getLogger("httpx").level == logging.ERROR

        setup_logging("DEBUG", transport_level="error")
        assert logging.getLogger("httpx").level == logging.DEBUG
        assert logging.getLogger("httpcore").level == logging.DEBUG

    def test_json_formatter_expands_api_error(self):
        error = ApiError(422, "Invalid", errors={"email": ["Invalid"]})
        try:
            raise error
        except ApiError:
            record = logging.LogRecord("portal_client", logging.ERROR, __file__, 1, "request failed", None, None)
            record.exc_info = sys.exc_info()

        entry = json.loads(JsonFormatter().format(record))

        assert entry["exception_type"] == "ApiError"
        assert entry["error"]["status"] == 422
        assert entry["error"]["errors"] == {"email": ["Invalid"]}


def test_metrics_collector():
    metrics = ClientMetrics()
    metrics.record_attempt()
    metrics.record_call(success=False, timed_out=True)

    assert metrics.get_summary()["timed_out_calls"] == 1
    assert get_metrics_collector() is get_metrics_collector()
