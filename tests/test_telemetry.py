import pytest

from history_stack.runtime import telemetry


def test_configure_rejects_config_and_preset_together() -> None:
    with pytest.raises(ValueError, match="not both"):
        telemetry.configure(config=object(), preset="development")


def test_configure_rejects_unknown_preset() -> None:
    with pytest.raises(ValueError, match="Unknown preset"):
        telemetry.configure(preset="verbose")


def test_get_logger_is_cached_per_name() -> None:
    first = telemetry.get_logger("history_stack.cache")

    assert telemetry.get_logger("history_stack.cache") is first


def test_span_reraises_and_keeps_handle_metadata() -> None:
    with pytest.raises(KeyError):
        with telemetry.span("tests::span", component=True, metadata={"k": 1}) as handle:
            handle.add_metadata("extra", [1, 2])
            raise KeyError("boom")

    assert handle.metadata == {"k": "1", "extra": "[1, 2]"}
    assert handle.component_name == "tests::span"


def test_settings_read_prefixed_environment() -> None:
    settings = telemetry.TelemetrySettings.from_env(
        {
            "HISTORY_STACK_LOG_LEVEL": "debug",
            "HISTORY_STACK_DISABLE_CONSOLE": "yes",
            "HISTORY_STACK_LOG_BUFFERED": "1",
            "HISTORY_STACK_LOG_BUFFER_SIZE": "64",
            "HISTORY_STACK_LOGGER": "editor",
            "LOG_LEVEL": "ERROR",
        }
    )

    assert settings.level == "DEBUG"
    assert settings.console is False
    assert settings.buffered is True
    assert settings.buffer_size == 64
    assert settings.logger_name == "editor"
    assert settings.json is False


def test_settings_defaults_without_environment() -> None:
    settings = telemetry.TelemetrySettings.from_env({})

    assert settings == telemetry.TelemetrySettings()
