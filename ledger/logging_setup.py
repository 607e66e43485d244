"""Logging utilities."""
from __future__ import annotations

import logging
import logging.config
from pathlib import Path

import yaml


def configure_logging(config_path: str | Path | None = None, level: str = "INFO") -> None:
    """Configure logging from the YAML configuration file if present."""
    path = Path(config_path) if config_path else Path(__file__).resolve().parent / ".." / "configs" / "logging.yaml"
    if path.exists():
        with path.open("r", encoding="utf-8") as config_file:
            logging.config.dictConfig(yaml.safe_load(config_file))
    else:
        logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO))
