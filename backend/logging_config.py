import logging
from logging.handlers import RotatingFileHandler

import config


def setup_logging() -> None:
    """Install console and rotating file handlers on the root logger (idempotent)."""
    logger = logging.getLogger()
    if any(getattr(h, "_production_dashboard", False) for h in logger.handlers):
        return

    level = getattr(logging, config.LOG_LEVEL, logging.INFO)
    logger.setLevel(level)

    ch = logging.StreamHandler()
    ch.setLevel(level)
    ch.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    ch._production_dashboard = True
    logger.addHandler(ch)

    try:
        config.LOG_DIR.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.warning("Log directory %s unavailable, file logging disabled: %s", config.LOG_DIR, e)
        return

    fh = RotatingFileHandler(
        config.LOG_DIR / "app.log", maxBytes=1_000_000, backupCount=5, encoding="utf-8"
    )
    fh.setLevel(level)
    fh.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s %(name)s [%(filename)s:%(lineno)d]: %(message)s")
    )
    fh._production_dashboard = True
    logger.addHandler(fh)
