"""
Tests for configuration and logging helpers.

These tests validate that:

- config/analysis.yaml loads and contains the sections every stage reads
- missing files, empty files and missing sections fail with clear errors
- get_logger builds a console logger once and reuses it
"""

from __future__ import annotations

import logging
import os

import pytest

from press_text.utils.run_utils import (
    REQUIRED_SECTIONS,
    get_logger,
    get_section,
    load_analysis_config,
    load_yaml,
)


CONFIG_PATH = os.path.join(os.path.dirname(__file__), "..", "config", "analysis.yaml")


def test_load_analysis_config_has_required_sections():
    """
    Ensure that config/analysis.yaml can be loaded and contains core sections.
    """
    cfg = load_analysis_config(CONFIG_PATH)

    for section in REQUIRED_SECTIONS:
        assert section in cfg, f"Missing section {section!r} in analysis config."

    assert cfg["dataset"]["text_column"] == "text"
    assert "party" in cfg["dataset"]["metadata_columns"]
    assert int(cfg["vocabulary"]["min_count"]) >= 1


def test_missing_config_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_yaml(str(tmp_path / "nope.yaml"))


def test_empty_config_file_raises(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")

    with pytest.raises(ValueError):
        load_yaml(str(path))


def test_missing_section_raises(tmp_path):
    path = tmp_path / "partial.yaml"
    path.write_text("dataset:\n  text_column: text\n", encoding="utf-8")

    with pytest.raises(KeyError, match="preprocessing"):
        load_analysis_config(str(path))


def test_get_section_treats_null_as_empty():
    assert get_section({"paths": None}, "paths") == {}
    assert get_section({}, "logging") == {}


def test_get_logger_is_configured_once():
    cfg = {"logging": {"level": "DEBUG", "to_file": False}}

    logger = get_logger("press_text_test_logger", cfg)
    again = get_logger("press_text_test_logger", cfg)

    assert logger is again
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1


def test_get_logger_writes_log_file(tmp_path):
    cfg = {
        "logging": {"level": "INFO", "to_file": True, "file_prefix": "unit"},
        "paths": {"logs_dir": str(tmp_path / "logs")},
    }

    logger = get_logger("press_text_file_logger", cfg, log_file_suffix="check")
    logger.info("hello")
    for handler in logger.handlers:
        handler.flush()

    assert os.path.exists(tmp_path / "logs" / "unit_check.log")
