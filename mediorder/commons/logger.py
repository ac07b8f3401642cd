import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from loguru import logger

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} - {message}"


def setup_logging(root: str, level: str = "INFO", filename: Optional[str] = "mediorder.log"):
    """File sink under <root>/YYYY/MM/DD/ (rotated at midnight, 14 days) plus stderr."""
    logger.remove()
    if filename:
        logdir = Path(root) / datetime.now().strftime("%Y/%m/%d")
        logdir.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(logdir / filename),
            rotation="00:00",
            retention="14 days",
            level=level,
            format=LOG_FORMAT,
            enqueue=True,
            backtrace=True,
            diagnose=False,
        )
    logger.add(sys.stderr, level=level, format=LOG_FORMAT)
    return logger
