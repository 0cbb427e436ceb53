"""Tests for cropline.utils.logging module."""

from __future__ import annotations

import json
import logging

import pytest

from cropline.utils.logging import (
    clear_correlation_context,
    configure_logging,
    correlation_context,
    current_correlation_ids,
    get_logger,
)


def _read_last_json_log_line(capsys: pytest.CaptureFixture[str]) -> dict[str, object]:
    captured = capsys.readouterr()
    lines = [line for line in captured.out.splitlines() if line.strip()]
    assert lines, "Expected at least one log line on stdout"
    return json.loads(lines[-1])


def test_configure_logging_sets_root_level() -> None:
    configure_logging(level="WARNING", log_format="console")
    assert logging.getLogger().level == logging.WARNING


def test_configure_logging_default_settings_do_not_error() -> None:
    configure_logging()


def test_get_logger_returns_logger_proxy() -> None:
    configure_logging(level="DEBUG", log_format="console")
    logger = get_logger("test.module")
    assert hasattr(logger, "info")
    assert hasattr(logger, "debug")
    assert hasattr(logger, "warning")
    assert hasattr(logger, "error")


def test_json_log_is_valid_and_contains_correlation_ids(
    capsys: pytest.CaptureFixture[str],
) -> None:
    configure_logging(level="INFO", log_format="json")

    logger = get_logger("test.json")
    with correlation_context(session_id="crop-123", item_index=4, generation=2):
        logger.info("hello", foo="bar")
    payload = _read_last_json_log_line(capsys)

    assert payload["event"] == "hello"
    assert payload["foo"] == "bar"
    assert payload["session_id"] == "crop-123"
    assert payload["item_index"] == 4
    assert payload["generation"] == 2
    assert payload["level"] == "info"
    assert payload["logger"] == "test.json"
    assert "timestamp" in payload


def test_item_index_zero_is_kept(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging(level="INFO", log_format="json")

    with correlation_context(item_index=0):
        get_logger("test.json").info("first item")
    payload = _read_last_json_log_line(capsys)

    assert payload["item_index"] == 0


def test_json_log_omits_correlation_ids_when_unset(
    capsys: pytest.CaptureFixture[str],
) -> None:
    configure_logging(level="INFO", log_format="json")
    clear_correlation_context()

    logger = get_logger("test.json")
    logger.info("hello")
    payload = _read_last_json_log_line(capsys)

    assert payload["event"] == "hello"
    assert "session_id" not in payload
    assert "item_index" not in payload
    assert "generation" not in payload


class TestCorrelationContext:
    """Tests for scoped correlation ID binding."""

    def test_ids_are_removed_on_exit(self) -> None:
        with correlation_context(session_id="s1", item_index=2):
            assert current_correlation_ids() == {"session_id": "s1", "item_index": 2}
        assert current_correlation_ids() == {}

    def test_nested_blocks_restore_outer_values(self) -> None:
        with correlation_context(session_id="outer", generation=1):
            with correlation_context(item_index=5, generation=2):
                assert current_correlation_ids() == {
                    "session_id": "outer",
                    "item_index": 5,
                    "generation": 2,
                }
            assert current_correlation_ids() == {"session_id": "outer", "generation": 1}

    def test_ids_are_restored_when_block_raises(self) -> None:
        with pytest.raises(RuntimeError), correlation_context(item_index=1):
            raise RuntimeError("boom")
        assert current_correlation_ids() == {}

    def test_later_log_lines_are_untagged(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        configure_logging(level="INFO", log_format="json")
        logger = get_logger("test.json")

        with correlation_context(item_index=7):
            logger.info("inside")
        logger.info("after")

        payload = _read_last_json_log_line(capsys)
        assert payload["event"] == "after"
        assert "item_index" not in payload
