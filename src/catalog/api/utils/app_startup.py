"""Loguru setup for the catalog service, the CLI and uvicorn."""

import logging
import sys
from pathlib import Path

from loguru import logger

from src.catalog import __version__
from src.catalog.runtime.context import get_config

SERVICE_NAME = "product-catalog"

PLAIN_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<magenta>{extra[service]}</magenta> "
    "[<cyan>{extra[request_id]}</cyan>] | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

# Library loggers that only matter at WARNING and above
QUIET_LOGGERS = ("sqlalchemy.pool", "httpx", "httpcore", "multipart")


class InterceptHandler(logging.Handler):
    """Forward stdlib records to loguru, dropping what the middleware covers."""

    def emit(self, record: logging.LogRecord) -> None:
        if record.name == "uvicorn.access":
            return
        # Unhandled errors are already logged by the request middleware
        if record.name == "uvicorn.error" and record.levelno >= logging.ERROR:
            return

        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        logger.opt(depth=2, exception=record.exc_info).bind(
            logger_name=record.name
        ).log(level, record.getMessage())


def _default_extra(record):
    record["extra"].setdefault("request_id", "-")
    record["extra"].setdefault("service", SERVICE_NAME)


def configure_logging():
    """Install the console sink and, if configured, the rotating file sink.

    Every record carries ``service``, ``version`` and ``request_id``.
    Production consoles emit JSON lines when ``logging.format`` is ``json``
    so that container log collectors can parse them.
    """
    main_config = get_config()
    cfg = main_config.logging
    env = main_config.app.environment
    is_production = env == "production"
    as_json = cfg.format == "json"

    logger.remove()
    logger.configure(
        extra={"request_id": "-", "service": SERVICE_NAME, "version": __version__},
        patcher=_default_extra,
    )

    logger.add(
        sys.stderr,
        level=cfg.level,
        format="{message}" if is_production and as_json else PLAIN_FORMAT,
        colorize=not is_production,
        serialize=is_production and as_json,
        backtrace=not is_production,
        diagnose=not is_production,
    )

    if cfg.file:
        path = Path(cfg.file)
        path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(path),
            level=cfg.level,
            format="{message}" if as_json else PLAIN_FORMAT,
            serialize=as_json,
            rotation=f"{cfg.max_size_mb} MB",
            retention=cfg.backup_count,
            compression="zip",
            enqueue=True,
            backtrace=not is_production,
            diagnose=not is_production,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in list(logging.root.manager.loggerDict.keys()):
        stdlog = logging.getLogger(name)
        stdlog.handlers = []
        stdlog.propagate = True

    # SQL statements are only logged when database.echo is on
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if main_config.database.echo else logging.WARNING
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logging.getLogger("uvicorn.error").setLevel(logging.INFO)
    logging.getLogger("uvicorn.access").setLevel(logging.CRITICAL)

    logger.info(
        "Logging configured",
        log_level=cfg.level,
        log_format=cfg.format,
        log_file=cfg.file or None,
        environment=env,
    )
