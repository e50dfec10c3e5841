"""structlog 配置

PROJECTCAMP_LOG_FORMAT=json 输出单行 JSON（异常展开为结构化 traceback），
其余取值使用 ConsoleRenderer。标准库 logging 的记录经 ProcessorFormatter 走同一渲染器。
"""

import logging
import os

import structlog

# 只保留 WARNING 以上的第三方 logger
_QUIET_LOGGERS = ("aiosqlite", "httpx", "httpcore")


def _drop_color_message(_, __, event_dict: structlog.types.EventDict) -> structlog.types.EventDict:
    # uvicorn 会在 extra 中附带一份带 ANSI 颜色的重复消息
    event_dict.pop("color_message", None)
    return event_dict


def setup_logging(log_format: str | None = None, log_level: str | None = None) -> None:
    """初始化 structlog 与标准库 logging

    Args:
        log_format: "json" 或 "dev"，缺省读取 PROJECTCAMP_LOG_FORMAT
        log_level: 日志级别名，缺省读取 PROJECTCAMP_LOG_LEVEL（默认 INFO）
    """
    log_format = (log_format or os.environ.get("PROJECTCAMP_LOG_FORMAT", "dev")).lower()
    level_name = (log_level or os.environ.get("PROJECTCAMP_LOG_LEVEL", "INFO")).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.ExtraAdder(),
        _drop_color_message,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]

    renderer: structlog.types.Processor
    if log_format == "json":
        shared_processors.append(structlog.processors.dict_tracebacks)
        renderer = structlog.processors.JSONRenderer(ensure_ascii=False)
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
