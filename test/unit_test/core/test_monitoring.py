"""Unit tests for the Logfire monitoring helpers."""

from unittest.mock import MagicMock, patch

from fastapi import FastAPI

from docuvault.core import monitoring


class TestInitializeLogfire:
    def test_disabled_by_default(self):
        with patch.object(monitoring, "LOGFIRE_ENABLED", False), patch.object(
            monitoring.logfire, "configure"
        ) as configure:
            assert monitoring.initialize_logfire() is False
        configure.assert_not_called()

    def test_enabled_without_token_is_skipped(self):
        with patch.object(monitoring, "LOGFIRE_ENABLED", True), patch.object(
            monitoring, "LOGFIRE_TOKEN", ""
        ), patch.object(monitoring.logfire, "configure") as configure:
            assert monitoring.initialize_logfire() is False
        configure.assert_not_called()

    def test_configures_and_instruments(self):
        app = FastAPI()
        fake_logfire = MagicMock()
        with patch.object(monitoring, "LOGFIRE_ENABLED", True), patch.object(
            monitoring, "LOGFIRE_TOKEN", "token"
        ), patch.object(monitoring, "logfire", fake_logfire), patch.object(monitoring, "_logfire_ready", False):
            assert monitoring.initialize_logfire(app) is True
            assert monitoring._logfire_ready is True

        fake_logfire.configure.assert_called_once()
        assert fake_logfire.configure.call_args.kwargs["service_name"] == monitoring.LOGFIRE_SERVICE_NAME
        fake_logfire.instrument_sqlalchemy.assert_called_once()
        fake_logfire.instrument_fastapi.assert_called_once_with(app=app)

    def test_configure_failure_returns_false(self):
        fake_logfire = MagicMock()
        fake_logfire.configure.side_effect = RuntimeError("bad token")
        with patch.object(monitoring, "LOGFIRE_ENABLED", True), patch.object(
            monitoring, "LOGFIRE_TOKEN", "token"
        ), patch.object(monitoring, "logfire", fake_logfire):
            assert monitoring.initialize_logfire() is False
        fake_logfire.instrument_sqlalchemy.assert_not_called()


class TestEventHelpers:
    def test_helpers_are_noops_when_not_ready(self):
        fake_logfire = MagicMock()
        with patch.object(monitoring, "_logfire_ready", False), patch.object(monitoring, "logfire", fake_logfire):
            monitoring.log_api_request("GET", "/api/v1/health", 200, 1.5)
            monitoring.log_event("notification_sent", tenant_id="t1")
        fake_logfire.info.assert_not_called()

    def test_helpers_forward_to_logfire_when_ready(self):
        fake_logfire = MagicMock()
        with patch.object(monitoring, "_logfire_ready", True), patch.object(monitoring, "logfire", fake_logfire):
            monitoring.log_api_request("GET", "/api/v1/health", 200, 1.5)
            monitoring.log_event("notification_sent", tenant_id="t1", type="STAFF_FOLDER_CREATED")

        assert fake_logfire.info.call_count == 2
        event_call = fake_logfire.info.call_args_list[1]
        assert event_call.args == ("notification_sent",)
        assert event_call.kwargs == {"tenant_id": "t1", "type": "STAFF_FOLDER_CREATED"}

    def test_logfire_errors_are_not_raised(self):
        fake_logfire = MagicMock()
        fake_logfire.info.side_effect = RuntimeError("exporter down")
        with patch.object(monitoring, "_logfire_ready", True), patch.object(monitoring, "logfire", fake_logfire):
            monitoring.log_event("notification_sent")
