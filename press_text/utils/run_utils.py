"""
Configuration and run helpers.

This module centralizes functionality shared by every pipeline stage:

- loading the analysis configuration (config/analysis.yaml)
- ensuring output directories exist before writing files
- constructing loggers that respect the config's logging settings

The core transforms never read configuration themselves; callers load it
once here and pass the relevant values down explicitly.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

import yaml


DEFAULT_CONFIG_PATH = "config/analysis.yaml"

REQUIRED_SECTIONS = ("dataset", "preprocessing", "vocabulary", "analysis")


# ---------------------------------------------------------------------------
# Config loading
# ---------------------------------------------------------------------------


def load_yaml(path: str) -> Dict[str, Any]:
    """
    Load a YAML file and return it as a dictionary.

    Parameters
    ----------
    path : str
        Path to the YAML file.

    Returns
    -------
    Dict[str, Any]
        Parsed YAML content.

    Raises
    ------
    FileNotFoundError
        If the YAML file does not exist.
    ValueError
        If the YAML file is empty or does not contain a mapping.
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f)

    if cfg is None:
        raise ValueError(f"Config file is empty or invalid: {path}")
    if not isinstance(cfg, dict):
        raise ValueError(f"Config file must contain a mapping at top level: {path}")

    return cfg


def load_analysis_config(config_path: str = DEFAULT_CONFIG_PATH) -> Dict[str, Any]:
    """
    Load and return the full analysis configuration dictionary.

    Parameters
    ----------
    config_path : str, optional
        Path to the analysis YAML configuration file.

    Returns
    -------
    Dict[str, Any]
        Dictionary containing at least the "dataset", "preprocessing",
        "vocabulary" and "analysis" sections. The "paths" and "logging"
        sections are optional.

    Raises
    ------
    KeyError
        If a required section is missing.
    """
    cfg = load_yaml(config_path)

    for section in REQUIRED_SECTIONS:
        if section not in cfg:
            raise KeyError(f'Missing "{section}" section in analysis config: {config_path}')

    return cfg


def get_section(config: Dict[str, Any], section: str) -> Dict[str, Any]:
    """Return a config section, treating an explicit null as empty."""
    return config.get(section, {}) or {}


# ---------------------------------------------------------------------------
# Filesystem utilities
# ---------------------------------------------------------------------------


def ensure_dir_exists(path: str) -> None:
    """
    Ensure that a directory exists (create it if necessary).

    Parameters
    ----------
    path : str
        Directory path.
    """
    if path and not os.path.exists(path):
        os.makedirs(path, exist_ok=True)


# ---------------------------------------------------------------------------
# Logging utilities
# ---------------------------------------------------------------------------


def _parse_log_level(level_str: str) -> int:
    """
    Convert a string log level into a logging module constant.

    Unknown names fall back to INFO.
    """
    level_str = (level_str or "INFO").upper()
    return {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }.get(level_str, logging.INFO)


def get_logger(
    name: str,
    config: Optional[Dict[str, Any]] = None,
    log_file_suffix: Optional[str] = None,
) -> logging.Logger:
    """
    Construct and return a logger that respects the logging section of
    the analysis config.

    Parameters
    ----------
    name : str
        Logger name.
    config : Optional[Dict[str, Any]]
        Analysis configuration. If None, a console-only INFO logger is built.
    log_file_suffix : Optional[str]
        Optional suffix appended to the log file name (e.g., "pipeline").

    Returns
    -------
    logging.Logger
        Configured logger instance.
    """
    logger = logging.getLogger(name)

    # If the logger already has handlers, assume it's already configured.
    if logger.handlers:
        return logger

    config = config or {}
    logging_cfg = get_section(config, "logging")
    paths_cfg = get_section(config, "paths")

    level = _parse_log_level(logging_cfg.get("level", "INFO"))
    logger.setLevel(level)

    formatter = logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # Optional file handler
    to_file = bool(logging_cfg.get("to_file", False))
    if to_file:
        logs_dir = paths_cfg.get("logs_dir", "outputs/logs")
        ensure_dir_exists(logs_dir)

        file_prefix = logging_cfg.get("file_prefix", "analysis_log")
        if log_file_suffix:
            filename = f"{file_prefix}_{log_file_suffix}.log"
        else:
            filename = f"{file_prefix}.log"

        file_handler = logging.FileHandler(os.path.join(logs_dir, filename), encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger
