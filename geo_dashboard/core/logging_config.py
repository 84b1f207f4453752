"""
Logging setup — configures the root logger from ``Settings``.

Every module keeps its own ``logger = logging.getLogger(__name__)``
and prefixes messages with the component name in brackets.
"""

import logging
from pathlib import Path
from typing import List, Optional

from geo_dashboard.core.config import Settings, settings as default_settings

_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def setup_logging(cfg: Optional[Settings] = None) -> None:
    """Attach console (and optional file) handlers at ``LOG_LEVEL``."""
    cfg = cfg or default_settings
    level = logging.getLevelName(cfg.LOG_LEVEL.upper())
    if not isinstance(level, int):
        level = logging.INFO

    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if cfg.LOG_FILE:
        log_path = Path(cfg.LOG_FILE)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    logging.basicConfig(level=level, format=_FORMAT, handlers=handlers, force=True)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))
