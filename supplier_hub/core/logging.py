"""
Loguru 日志配置

每行都带 trace_id：请求内由 trace 中间件 contextualize 注入，巡检等后台任务为 "-"。
"""

import logging
import sys

from loguru import logger

from supplier_hub.core.config import settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<magenta>{extra[trace_id]}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[trace_id]} | {name}:{function}:{line} - {message}"

# 第三方库只保留 WARNING 以上；httpx 每次探测都会以 INFO 打印请求行
QUIET_LOGGERS = ("httpx", "httpcore", "aiosqlite", "watchfiles", "watchfiles.main")


class InterceptHandler(logging.Handler):
    """标准库 logging 转发到 Loguru，保留原调用位置"""

    def emit(self, record):
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging():
    logger.remove()
    logger.configure(extra={"trace_id": "-"})

    logger.add(
        sys.stderr,
        level=settings.LOG_LEVEL,
        format=CONSOLE_FORMAT,
        serialize=settings.LOG_JSON_FORMAT,
        enqueue=settings.LOG_ASYNC,
        backtrace=True,
        diagnose=settings.DEBUG,  # 变量展开会把 auth_token 打进日志
    )

    if settings.LOG_FILE_PATH:
        logger.add(
            settings.LOG_FILE_PATH,
            rotation=settings.LOG_ROTATION,
            retention=settings.LOG_RETENTION,
            level=settings.LOG_LEVEL,
            format=FILE_FORMAT,
            encoding="utf-8",
            enqueue=settings.LOG_ASYNC,
            compression="zip",
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in ("uvicorn.access", "uvicorn.error"):
        logging.getLogger(name).handlers = [InterceptHandler()]
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.getLogger("root").setLevel(settings.LOG_LEVEL)

    return logger
