"""
Error Logging Service

Error logging system that:
- Writes to log files with rotation
- Writes a detailed report per error (request, context, traceback)
- Sanitizes sensitive data (API keys, bearer tokens)

Usage:
    from barcode_api.services.error_logging import error_logger

    try:
        # some code
    except Exception as e:
        error_logger.log_error(e, request=request)
"""

import logging
import traceback
import json
import uuid
from datetime import datetime, timezone
from typing import Optional, Any, Dict
from uuid import UUID
from pathlib import Path
from logging.handlers import RotatingFileHandler


logger = logging.getLogger("error_logging")

LOG_FORMAT = '%(asctime)s | %(levelname)s | %(name)s | %(message)s'
DETAILED_LOG_FORMAT = '%(asctime)s | %(levelname)s | %(name)s | %(funcName)s:%(lineno)d | %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Sensitive fields to sanitize
SENSITIVE_FIELDS = {'password', 'token', 'access_token', 'authorization', 'api_key',
                    'apikey', 'secret', 'credential'}


def sanitize_data(data: Any, depth: int = 0) -> Any:
    """
    Sanitize sensitive data from dictionaries and strings.
    Replaces sensitive field values with '[REDACTED]'.
    """
    if depth > 10:  # Prevent infinite recursion
        return "[MAX_DEPTH]"

    if isinstance(data, dict):
        sanitized = {}
        for key, value in data.items():
            key_lower = str(key).lower()
            if any(sensitive in key_lower for sensitive in SENSITIVE_FIELDS):
                sanitized[key] = "[REDACTED]"
            else:
                sanitized[key] = sanitize_data(value, depth + 1)
        return sanitized
    elif isinstance(data, list):
        return [sanitize_data(item, depth + 1) for item in data]
    elif isinstance(data, str):
        if data.lower().startswith("bearer "):
            return "[REDACTED_TOKEN]"
        return data
    else:
        return data


def truncate_string(s: str, max_length: int = 10000) -> str:
    """Truncate string to max length."""
    if len(s) > max_length:
        return s[:max_length] + f"... [TRUNCATED, total {len(s)} chars]"
    return s


class ErrorLogger:
    """
    Error logging service that writes to the log and to a detailed error file.
    """

    def __init__(self):
        self.logs_dir: Optional[Path] = None

    def set_logs_dir(self, logs_dir: Optional[Path]):
        """Enable the detailed error file in logs_dir (None disables it)."""
        self.logs_dir = logs_dir

    def log_error(
        self,
        error: BaseException,
        request: Optional[Any] = None,
        severity: str = "error",
        context: Optional[Dict] = None,
    ) -> UUID:
        """
        Log an error with full context.

        Args:
            error: The exception that occurred
            request: FastAPI Request object (optional)
            severity: debug, info, warning, error, critical
            context: Additional context data (sanitized before writing)

        Returns:
            UUID identifying this error in the logs
        """
        error_id = uuid.uuid4()
        timestamp = datetime.now(timezone.utc)

        error_type = type(error).__name__
        error_message = str(error)
        stack_trace = ''.join(traceback.format_exception(type(error), error, error.__traceback__))

        error_buffer_parts = [
            f"=== ERROR LOG ===",
            f"ID: {error_id}",
            f"Timestamp: {timestamp.isoformat()}",
            f"Type: {error_type}",
            f"Message: {error_message}",
            f"Severity: {severity}",
        ]

        request_path = None
        if request is not None:
            try:
                request_path = str(request.url.path)
                client_ip = request.client.host if request.client else None
                error_buffer_parts.extend([
                    f"\n=== REQUEST ===",
                    f"Method: {request.method}",
                    f"Path: {request_path}",
                    f"Query: {request.url.query or None}",
                    f"Client IP: {client_ip}",
                    f"User Agent: {request.headers.get('user-agent')}",
                ])
            except AttributeError as req_err:
                error_buffer_parts.append(f"\n[Failed to extract request info: {req_err}]")

        if context:
            error_buffer_parts.extend([
                f"\n=== CONTEXT ===",
                json.dumps(sanitize_data(context), indent=2, default=str),
            ])

        error_buffer_parts.extend([
            f"\n=== STACK TRACE ===",
            stack_trace,
        ])
        error_buffer = truncate_string("\n".join(error_buffer_parts), 50000)  # Max 50KB

        log_message = f"[{error_id}] {error_type}: {error_message} | Path: {request_path or 'N/A'}"
        level = logging.getLevelName(severity.upper())
        logger.log(level if isinstance(level, int) else logging.ERROR, log_message)

        if self.logs_dir is not None:
            try:
                with open(self.logs_dir / "errors_detailed.log", "a", encoding="utf-8") as f:
                    f.write(f"\n{'='*80}\n")
                    f.write(error_buffer)
                    f.write(f"\n{'='*80}\n")
            except OSError as file_err:
                logger.error(f"Failed to write to error file: {file_err}")

        return error_id


# Singleton instance
error_logger = ErrorLogger()


def _logs_dir_writable(logs_dir: Path) -> bool:
    try:
        logs_dir.mkdir(parents=True, exist_ok=True)
        test_file = logs_dir / ".write_test"
        test_file.touch()
        test_file.unlink()
        return True
    except OSError as e:
        logger.warning(f"Cannot write to logs directory {logs_dir}: {e}. File logging disabled, using console only.")
        return False


def configure_logging(level: str = "INFO", logs_dir: Optional[str] = None) -> bool:
    """
    Configure application logging.
    Call this during app startup.

    Console logging is always enabled. When logs_dir is writable, rotating
    errors.log and app_detailed.log files are added and the detailed error
    report file is enabled.

    Returns:
        True if file logging is enabled
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level.upper())

    if not any(getattr(h, "_barcode_api", False) for h in root_logger.handlers):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        console_handler._barcode_api = True
        root_logger.addHandler(console_handler)

        if logs_dir and _logs_dir_writable(Path(logs_dir)):
            path = Path(logs_dir)

            file_handler = RotatingFileHandler(
                path / "errors.log",
                maxBytes=10 * 1024 * 1024,  # 10 MB
                backupCount=10,  # Keep 10 backup files
                encoding='utf-8'
            )
            file_handler.setLevel(logging.ERROR)
            file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
            file_handler._barcode_api = True

            detailed_handler = RotatingFileHandler(
                path / "app_detailed.log",
                maxBytes=10 * 1024 * 1024,  # 10 MB
                backupCount=5,
                encoding='utf-8'
            )
            detailed_handler.setLevel(logging.DEBUG)
            detailed_handler.setFormatter(logging.Formatter(DETAILED_LOG_FORMAT, datefmt=DATE_FORMAT))
            detailed_handler._barcode_api = True

            root_logger.addHandler(file_handler)
            root_logger.addHandler(detailed_handler)
            error_logger.set_logs_dir(path)

    logger.info("Error logging system configured")
    return error_logger.logs_dir is not None
