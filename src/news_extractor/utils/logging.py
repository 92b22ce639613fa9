from __future__ import annotations
import logging
import logging.config
from pathlib import Path
import yaml

DEFAULT_FORMAT = "%(asctime)s | %(levelname)s | %(threadName)s | %(name)s | %(message)s"


def setup_logging(config_path: str = "configs/logging.yaml", level: str = "INFO") -> None:
    """Setup logging from a dictConfig YAML file, or basicConfig at ``level`` when it is missing."""
    path = Path(config_path)
    if not path.exists():
        logging.basicConfig(level=level.upper(), format=DEFAULT_FORMAT)
        return

    with path.open("r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f)
    logging.config.dictConfig(cfg)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance."""
    return logging.getLogger(name)
