"""Structured audit logging for keystore operations."""

import inspect
import logging
import os
import sys
import uuid
from contextlib import suppress
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional, Union

import structlog
from structlog.types import EventDict

SENSITIVE_KEYS = {
    "keypair",
    "keypair_bytes",
    "private_key",
    "seed",
    "secret",
    "password",
    "token",
}

_LOGGER_INSTANCE: Optional[structlog.stdlib.BoundLogger] = None


def create_secure_handler(
    log_path: Path, max_bytes: int, backup_count: int
) -> RotatingFileHandler:
    """Create a RotatingFileHandler whose file only the owner can read.

    Args:
        log_path: Path to the log file
        max_bytes: Maximum size of each log file
        backup_count: Number of backup files to keep

    Returns:
        Configured RotatingFileHandler instance
    """
    os.makedirs(log_path.parent, mode=0o700, exist_ok=True)

    if not log_path.exists():
        log_path.touch(mode=0o600)
    if os.name == "posix":
        os.chmod(log_path, 0o600)

    return RotatingFileHandler(
        str(log_path), maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
    )


def add_timestamp(_: Any, __: str, event_dict: EventDict) -> EventDict:
    """Add ISO 8601 timestamp."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def sanitize_keys(event_dict: dict[str, Any], sensitive_keys: set[str]) -> dict[str, Any]:
    """Redact sensitive keys, case-insensitively and through nested structures.

    Args:
        event_dict: Dictionary to sanitize
        sensitive_keys: Set of keys to redact

    Returns:
        Sanitized copy of the dictionary
    """
    lowered = {k.lower() for k in sensitive_keys}

    def _sanitize_value(key: str, value: Any) -> Any:
        if key.lower() in lowered:
            return "***"
        if isinstance(value, dict):
            return sanitize_keys(value, sensitive_keys)
        if isinstance(value, (list, tuple)):
            return [_sanitize_value("", item) for item in value]
        return value

    return {k: _sanitize_value(str(k), v) for k, v in event_dict.items()}


def sanitize_event_dict(_: Any, __: str, event_dict: EventDict) -> EventDict:
    """Mask key material anywhere in a log record."""
    return sanitize_keys(dict(event_dict), SENSITIVE_KEYS)


def configure_logger() -> None:
    """Route structlog through the standard library logging module.

    Until ``setup_logging`` runs, records go to whatever handlers the host
    application installed on the root logger, filtered by its level. An
    existing structlog configuration is left alone.
    """
    if structlog.is_configured():
        return

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            sanitize_event_dict,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


def setup_logging(
    *,
    log_level: str = "INFO",
    base_dir: Union[str, Path, None] = None,
    log_name: str = "keystore",
    correlation_id: Optional[str] = None,
    max_log_size: int = 10 * 1024 * 1024,  # 10 MB
    backup_count: int = 3,
) -> structlog.stdlib.BoundLogger:
    """Setup structured logging.

    Records are rendered as JSON lines into ``<base_dir>/<log_name>.log``.
    Warnings and above are also written to stderr. Without ``base_dir`` only
    the stderr handler is installed.

    Args:
        log_level: Log level (default: INFO)
        base_dir: Optional directory for the log file
        log_name: Log file stem, usually the program identity
        correlation_id: Optional correlation ID bound to every record
        max_log_size: Maximum size of a log file before rotation
        backup_count: Number of backup files to keep

    Returns:
        The configured logger instance
    """
    global _LOGGER_INSTANCE

    reset_logger()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            add_timestamp,
            sanitize_event_dict,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper()))

    if base_dir is not None:
        log_file = Path(base_dir) / f"{log_name}.log"
        file_handler = create_secure_handler(log_file, max_log_size, backup_count)
        file_handler.setFormatter(logging.Formatter("%(message)s"))
        root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    root_logger.addHandler(console_handler)

    _LOGGER_INSTANCE = structlog.get_logger("dclient_keystore.audit").bind(
        correlation_id=correlation_id or str(uuid.uuid4())
    )
    return _LOGGER_INSTANCE


def get_logger() -> Any:
    """Get the audit logger.

    Returns the logger created by ``setup_logging`` so the correlation ID is
    preserved, or a logger routed through the standard library when logging was never
    set up.
    """
    if _LOGGER_INSTANCE is not None:
        return _LOGGER_INSTANCE
    return structlog.get_logger("dclient_keystore.audit")


def reset_logger() -> None:
    """Remove installed handlers and fall back to the default configuration."""
    global _LOGGER_INSTANCE
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        with suppress(Exception):
            handler.close()
        root_logger.removeHandler(handler)

    structlog.reset_defaults()
    configure_logger()
    _LOGGER_INSTANCE = None


def audit_event(
    event_type: str,
    user: str,
    success: bool = True,
    details: Optional[dict[str, Any]] = None,
    error: Optional[Exception] = None,
) -> None:
    """Log an audit event.

    Args:
        event_type: Type of event (e.g., "key.create")
        user: Username or identifier
        success: Whether the operation succeeded
        details: Optional event details, sanitized before logging
        error: Optional exception if operation failed
    """
    logger = get_logger()

    event: dict[str, Any] = {
        "event_type": str(getattr(event_type, "value", event_type)),
        "user": user,
        "success": success,
    }

    frame = inspect.currentframe()
    if frame is not None and frame.f_back is not None:
        caller = frame.f_back
        event["caller"] = {
            "file": caller.f_code.co_filename,
            "line": caller.f_lineno,
            "function": caller.f_code.co_name,
        }
    del frame

    if details:
        event["details"] = sanitize_keys(details, SENSITIVE_KEYS)

    if error is not None:
        event["error"] = {
            "type": type(error).__name__,
            "message": str(error),
        }

    if success:
        logger.info("audit_event", **event)
    else:
        logger.error("audit_event", **event)
