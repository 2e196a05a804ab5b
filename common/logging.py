"""
日志配置

使用标准库 logging：控制台输出 + 可选的滚动文件。
只提供这一种后端，没有 loguru / logfire 等可切换的实现；
各服务直接使用 logging.getLogger(__name__)。

用法：
    from common.logging import configure_logging, get_logger

    configure_logging(level="DEBUG", log_file="logs/mail-relay.log")
    logger = get_logger(__name__)
"""

import logging
import logging.config
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(threadName)s | %(name)s | %(message)s"


def configure_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    配置根日志记录器

    Args:
        level: 日志级别
        log_file: 日志文件路径，为空时只输出到控制台
    """
    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
        },
    }

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "standard",
            "filename": log_file,
            "maxBytes": 5_000_000,
            "backupCount": 3,
            "encoding": "utf-8",
        }

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "standard": {"format": LOG_FORMAT},
            },
            "handlers": handlers,
            "root": {
                "handlers": list(handlers),
                "level": level.upper(),
            },
        }
    )
    logging.getLogger(__name__).debug(f"Logging configured at {level.upper()}")


def get_logger(name: str) -> logging.Logger:
    """获取日志记录器"""
    return logging.getLogger(name)
