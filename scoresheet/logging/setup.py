import sys
import logging
from typing import Any

from loguru import logger

from scoresheet.config.settings import settings


def sensitive_data_filter(record: dict[str, Any]) -> bool:
    """Filter function to mask sensitive data in log records."""
    sensitive_keys = ["key", "token", "password", "secret", "authorization"]

    def mask(value: str) -> str:
        if len(value) > 8:
            return value[:4] + "****" + value[-4:]
        return "********"

    def mask_value(key: str, value: Any) -> Any:
        if isinstance(value, str):
            if any(sk in key.lower() for sk in sensitive_keys):
                return mask(value)
            return value
        elif isinstance(value, dict):
            return {k: mask_value(str(k), v) for k, v in value.items()}
        elif isinstance(value, list):
            return [mask_value(key, item) for item in value]
        return value

    if "extra" in record and isinstance(record["extra"], dict):
        for extra_key in list(record["extra"]):
            record["extra"][extra_key] = mask_value(
                extra_key, record["extra"][extra_key]
            )

    # The API token may be interpolated into a message (e.g. request headers)
    if settings.api_token and settings.api_token in record["message"]:
        record["message"] = record["message"].replace(settings.api_token, "********")

    return True  # Keep the record after filtering/masking


def setup_logging() -> None:
    """Configures Loguru logger based on application settings."""
    logger.remove()  # Remove default handler

    logger.add(
        sys.stderr,
        level=settings.log_level.upper(),
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
            "<level>{message}</level>"
        ),
        colorize=True,
        backtrace=True,
        diagnose=True,
        filter=sensitive_data_filter,
    )

    if settings.log_file:
        logger.add(
            settings.log_file,
            level="DEBUG",
            rotation="10 MB",
            retention="7 days",
            compression="zip",
            encoding="utf-8",
            filter=sensitive_data_filter,
        )

    logger.info(f"Logging initialized with level: {settings.log_level}")

    # Intercept standard logging messages
    class InterceptHandler(logging.Handler):
        def emit(self, record: logging.LogRecord) -> None:
            # Get corresponding Loguru level if it exists
            try:
                level = logger.level(record.levelname).name
            except ValueError:
                level = record.levelno

            # Find caller from where originated the logged message
            frame, depth = logging.currentframe(), 2
            while frame.f_code.co_filename == logging.__file__:
                frame = frame.f_back
                depth += 1

            logger.opt(depth=depth, exception=record.exc_info).log(
                level, record.getMessage()
            )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    logger.debug("Standard logging intercepted.")
