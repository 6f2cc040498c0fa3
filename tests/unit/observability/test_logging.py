"""Tests for structured logging."""

import json

import pytest
import structlog

from serviceregistry.config.models import LoggingConfig
from serviceregistry.observability.logging import (
    AuthenticatedUserProcessor,
    PIIRedactor,
    bind_authenticated_user,
    configure_logging,
    get_logger,
    setup_logging,
)


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_setup_json_format(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Should render JSON lines to stderr."""
        setup_logging(level="INFO", format="json", redact_pii=False)
        get_logger("test").info("revision_saved", revision_id=3)

        line = capsys.readouterr().err.strip().splitlines()[-1]
        event = json.loads(line)
        assert event["event"] == "revision_saved"
        assert event["revision_id"] == 3
        assert event["level"] == "info"

    def test_setup_console_format(self) -> None:
        """Should configure console format for development."""
        setup_logging(level="DEBUG", format="console", redact_pii=False)
        logger = get_logger("test")
        # Should not raise
        logger.debug("test_message")

    def test_level_filters_events(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Events below the configured level are dropped."""
        setup_logging(level="WARNING", format="json", redact_pii=False)
        get_logger("test").info("quiet_event")
        assert "quiet_event" not in capsys.readouterr().err


class TestAuthenticatedUserProcessor:
    """Tests for adding the logged in user to log events."""

    @pytest.fixture
    def processor(self) -> AuthenticatedUserProcessor:
        return AuthenticatedUserProcessor()

    def test_unbound_leaves_event_untouched(
        self, processor: AuthenticatedUserProcessor
    ) -> None:
        """Events before authentication carry no username."""
        result = processor(None, "info", {"event": "x"})  # type: ignore
        assert result == {"event": "x"}

    def test_bound_user_is_added(self, processor: AuthenticatedUserProcessor) -> None:
        """The bound username is attached to every event."""
        bind_authenticated_user("admin")
        result = processor(None, "info", {"event": "x"})  # type: ignore
        assert result["authenticated_username"] == "admin"

    def test_end_to_end(self, capsys: pytest.CaptureFixture[str]) -> None:
        """The username shows up in rendered output."""
        setup_logging(level="INFO", format="json", redact_pii=False)
        bind_authenticated_user("jdoe")
        get_logger("test").info("revision_created")

        event = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert event["authenticated_username"] == "jdoe"


class TestContextBinding:
    """Tests for context binding via structlog.contextvars."""

    def test_bound_context_appears_in_logs(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Should include bound context in log output."""
        setup_logging(level="INFO", format="json", redact_pii=False)
        structlog.contextvars.bind_contextvars(connection_id=42)

        get_logger("test").info("test_event")

        event = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert event["connection_id"] == 42


class TestPIIRedactor:
    """Tests for PII redaction."""

    @pytest.fixture
    def redactor(self) -> PIIRedactor:
        """Create a PIIRedactor instance."""
        return PIIRedactor()

    def test_redacts_password_by_key(self, redactor: PIIRedactor) -> None:
        """Should redact password values."""
        result = redactor(None, None, {"password": "secret123", "data": "ok"})  # type: ignore
        assert result["password"] == "[REDACTED]"
        assert result["data"] == "ok"

    def test_redacts_manipulation_code_by_key(self, redactor: PIIRedactor) -> None:
        """Manipulation code never reaches the logs."""
        result = redactor(None, None, {"manipulation_code": "$attributes = [];"})  # type: ignore
        assert result["manipulation_code"] == "[REDACTED]"

    def test_redacts_email_pattern_in_string_value(self, redactor: PIIRedactor) -> None:
        """Should redact email patterns found in string values."""
        result = redactor(None, None, {"message": "Contact user@example.com"})  # type: ignore
        assert "user@example.com" not in result["message"]
        assert "[EMAIL]" in result["message"]

    def test_handles_nested_structures(self, redactor: PIIRedactor) -> None:
        """Should handle nested dictionaries and lists."""
        event_dict = {
            "outer": {"token": "abc", "contacts": ["a@example.org", {"secret": "x"}]},
        }
        result = redactor(None, None, event_dict)  # type: ignore
        assert result["outer"]["token"] == "[REDACTED]"
        assert result["outer"]["contacts"][0] == "[EMAIL]"
        assert result["outer"]["contacts"][1]["secret"] == "[REDACTED]"

    def test_redacts_metadata_contact_keys(self, redactor: PIIRedactor) -> None:
        """Contact details in flat metadata keys are redacted by key suffix."""
        event_dict = {
            "metadata": {
                "contacts:0:emailAddress": "ops at example",
                "contacts:0:telephoneNumber": "+31 30 000 0000",
                "name:en": "Example SP",
            }
        }
        result = redactor(None, None, event_dict)  # type: ignore
        assert result["metadata"]["contacts:0:emailAddress"] == "[REDACTED]"
        assert result["metadata"]["contacts:0:telephoneNumber"] == "[REDACTED]"
        assert result["metadata"]["name:en"] == "Example SP"

    def test_leaves_other_values_alone(self, redactor: PIIRedactor) -> None:
        """Non-string scalars pass through."""
        result = redactor(None, None, {"revision_nr": 3, "is_active": True})  # type: ignore
        assert result == {"revision_nr": 3, "is_active": True}


class TestConfigureLogging:
    """Tests for configuring logging from settings."""

    def test_applies_logging_config(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Level, format and redaction come from the config section."""
        configure_logging(LoggingConfig(level="INFO", format="json", redact_pii=True))
        get_logger("test").info("revision_saved", manipulation_code="$x = 1;")

        event = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert event["manipulation_code"] == "[REDACTED]"

    def test_level_from_config(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Events below the configured level are dropped."""
        configure_logging(LoggingConfig(level="ERROR"))
        get_logger("test").warning("cast_warning")
        assert "cast_warning" not in capsys.readouterr().err
