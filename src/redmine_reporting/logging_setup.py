from __future__ import annotations

import logging, os, sys, uuid
from logging.handlers import RotatingFileHandler

from pythonjsonlogger.json import JsonFormatter


def _build_formatter(json_mode: bool) -> logging.Formatter:
    if json_mode:
        return JsonFormatter(
            fmt='%(asctime)s %(levelname)s %(name)s %(message)s %(run_id)s',
            datefmt='%Y-%m-%dT%H:%M:%S%z'
        )
    return logging.Formatter(
        fmt='%(asctime)s %(levelname)-8s [%(run_id)s] %(name)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


_BASE_FACTORY = logging.getLogRecordFactory()


def _install_run_id(run_id: str) -> None:
    old_factory = _BASE_FACTORY

    def record_factory(*args, **kwargs):
        record = old_factory(*args, **kwargs)
        if not hasattr(record, "run_id"):
            record.run_id = run_id
        return record

    logging.setLogRecordFactory(record_factory)


def setup_logging_from_env() -> str:
    """Initialize root logging for the CLI and the HTTP server. Every record carries 'run_id'."""
    run_id = os.getenv("RUN_ID", str(uuid.uuid4()))
    _install_run_id(run_id)

    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    log_level = getattr(logging, level_name, logging.INFO)
    json_mode = os.getenv("LOG_JSON", "false").lower() == "true"
    log_file = os.getenv("LOG_FILE")
    max_bytes = int(os.getenv("LOG_MAX_BYTES", "10485760"))
    backup_count = int(os.getenv("LOG_BACKUP_COUNT", "5"))

    root = logging.getLogger()
    root.setLevel(log_level)
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = _build_formatter(json_mode)

    sh = logging.StreamHandler(sys.stdout)
    sh.setFormatter(fmt)
    root.addHandler(sh)

    if log_file:
        try:
            fh = RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")
        except OSError:
            logging.getLogger(__name__).warning("Cannot open log file, logging to stdout only",
                                                extra={"log_file": log_file})
        else:
            fh.setFormatter(fmt)
            root.addHandler(fh)

    if log_level > logging.DEBUG:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)

    logging.getLogger(__name__).info("Logging initialized")
    return run_id
