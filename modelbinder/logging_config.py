"""
日志配置模块 (Logging Configuration Module)

功能 (Function):
这个模块配置 Python 标准的 `logging` 模块，为整个 ModelBinder 服务提供统一的日志记录：
1. 定义日志格式 (Formatters)，包括时间戳 (UTC)、日志级别、模块名、行号和消息。
2. 定义日志处理器 (Handlers)：控制台始终启用；指定日志目录时，额外启用滚动的应用日志和错误日志文件。
3. 配置 uvicorn、fastapi 以及应用本身 (`modelbinder`) 的日志记录器。
4. 提供 `setup_logging` 函数，在应用启动时调用。

交互 (Interaction):
- 依赖 (Depends on):
    - `modelbinder.core.config`: `LOG_LEVEL` 和 `LOG_DIR` 由调用方从 settings 传入。
- 被导入 (Imported by):
    - `modelbinder.main`: 在 FastAPI 应用创建前调用 `setup_logging()`。
"""

import datetime
import logging
from logging.config import dictConfig
from pathlib import Path
from typing import Any, Dict, List, Optional, Union


class UTCFormatter(logging.Formatter):
    """日志格式化器，时间戳统一使用 UTC。"""

    def formatTime(
        self, record: logging.LogRecord, datefmt: Optional[str] = None
    ) -> str:
        utc_dt = datetime.datetime.fromtimestamp(record.created, datetime.timezone.utc)
        return utc_dt.strftime(datefmt or "%Y-%m-%d %H:%M:%S")


def build_logging_config(
    level: str = "INFO", log_dir: Optional[Union[str, Path]] = None
) -> Dict[str, Any]:
    """
    构建传递给 `dictConfig` 的配置字典。

    Args:
        level (str): 应用 logger (`modelbinder`) 的日志级别。
        log_dir (Optional[Union[str, Path]]): 日志文件目录；为 None 时不创建文件处理器。

    Returns:
        Dict[str, Any]: `logging.config.dictConfig` 格式的配置。
    """
    handlers: Dict[str, Any] = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "default",
            "level": "DEBUG",
        },
    }
    app_handlers: List[str] = ["console"]

    if log_dir is not None:
        logs_path = Path(log_dir)
        logs_path.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.datetime.now(datetime.timezone.utc).strftime(
            "%Y%m%d-%H%M%S"
        )
        handlers["app_file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": str(logs_path / f"modelbinder_{timestamp}.log"),
            "formatter": "detailed",
            "level": "DEBUG",
            "maxBytes": 10 * 1024 * 1024,  # 10MB
            "backupCount": 5,
            "encoding": "utf-8",
        }
        handlers["error_file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": str(logs_path / f"modelbinder_error_{timestamp}.log"),
            "formatter": "detailed",
            "level": "ERROR",
            "maxBytes": 10 * 1024 * 1024,
            "backupCount": 5,
            "encoding": "utf-8",
        }
        app_handlers = ["console", "app_file", "error_file"]

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "()": UTCFormatter,
                "format": "[%(asctime)s] %(levelname)s %(name)s:%(lineno)d - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "detailed": {
                "()": UTCFormatter,
                "format": "[%(asctime)s] %(levelname)s [%(name)s:%(filename)s:%(lineno)d] [%(process)d:%(thread)d] - %(funcName)s - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": handlers,
        "loggers": {
            "uvicorn": {"handlers": app_handlers, "level": "INFO", "propagate": False},
            "uvicorn.access": {
                "handlers": app_handlers,
                "level": "INFO",
                "propagate": False,
            },
            "fastapi": {"handlers": app_handlers, "level": "INFO", "propagate": False},
            # 应用自身的 logger，不向 root 传递，避免重复输出
            "modelbinder": {
                "handlers": app_handlers,
                "level": level,
                "propagate": False,
            },
            "asyncio": {"handlers": ["console"], "level": "WARNING", "propagate": False},
        },
        "root": {"handlers": app_handlers, "level": "INFO"},
    }


def setup_logging(
    level: str = "INFO", log_dir: Optional[Union[str, Path]] = None
) -> None:
    """
    应用日志配置。

    在应用启动时调用此函数，之后各模块通过 `logging.getLogger(__name__)` 获取 logger。
    """
    dictConfig(build_logging_config(level, log_dir))

    logger_instance = logging.getLogger("modelbinder")
    logger_instance.info(f"Logging system initialized (level={level}).")
    if log_dir is not None:
        logger_instance.info(f"Application logs will be written to: {log_dir}")
