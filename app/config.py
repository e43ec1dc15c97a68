# app/config.py
"""
Centralized configuration management with startup validation.

Reads settings from the environment once at startup and logs a snapshot
that only ever contains presence flags for secrets.
"""
import logging
import os
import re
from dataclasses import dataclass, field
from typing import Optional

from app.predictor.config import get_gateway_model, get_gateway_url, is_gateway_configured

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

SERVICE_NAME = "valuematrix"
SERVICE_VERSION = "0.1.0"

# Image predictions post base64 data URIs, so allow well above the 5MB image cap
DEFAULT_MAX_REQUEST_SIZE_BYTES = 10 * 1024 * 1024
MIN_REQUEST_SIZE_BYTES = 1024

DEFAULT_SESSION_DURATION_DAYS = 7

# Sensitive substrings that should never appear in logs
SENSITIVE_SUBSTRINGS = ("key", "token", "secret", "password", "credential", "auth")


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""

    pass


@dataclass
class AppConfig:
    """Application configuration loaded from environment."""

    service_name: str = SERVICE_NAME
    service_version: str = SERVICE_VERSION
    environment: str = "development"

    max_request_size_bytes: int = DEFAULT_MAX_REQUEST_SIZE_BYTES
    session_duration_days: int = DEFAULT_SESSION_DURATION_DAYS

    # AI gateway (key presence only, never the value)
    gateway_url: str = ""
    gateway_model: str = ""
    gateway_api_key_present: bool = False

    db_path: str = ""

    warnings: list = field(default_factory=list)


def _parse_int_env(
    name: str, default: int, min_value: Optional[int] = None
) -> tuple[int, Optional[str]]:
    """
    Parse an integer environment variable with validation.

    Returns (value, warning_message). Invalid input yields the default
    and a warning.
    """
    raw = os.environ.get(name)
    if raw is None:
        return default, None

    try:
        value = int(raw)
    except ValueError:
        return default, f"{name}='{raw}' is not a valid integer; using default {default}"

    if min_value is not None and value < min_value:
        return default, f"{name}={value} is below minimum {min_value}; using default {default}"

    return value, None


def load_config(fail_fast: bool = False) -> AppConfig:
    """
    Load and validate application configuration from environment.

    A missing gateway key is only a warning: the service still serves pages
    and history, and prediction requests fail with an error message.

    Args:
        fail_fast: Raise ConfigurationError instead of warning when the
                   gateway key is missing.
    """
    warnings = []

    environment = os.environ.get("RAILWAY_ENVIRONMENT", "development")

    max_request_size, size_warning = _parse_int_env(
        "MAX_REQUEST_SIZE_BYTES",
        DEFAULT_MAX_REQUEST_SIZE_BYTES,
        min_value=MIN_REQUEST_SIZE_BYTES,
    )
    if size_warning:
        warnings.append(size_warning)

    session_days, session_warning = _parse_int_env(
        "SESSION_DURATION_DAYS",
        DEFAULT_SESSION_DURATION_DAYS,
        min_value=1,
    )
    if session_warning:
        warnings.append(session_warning)

    gateway_key_present = is_gateway_configured()
    if not gateway_key_present:
        if fail_fast:
            raise ConfigurationError("AI_GATEWAY_API_KEY is not set")
        warnings.append(
            "AI_GATEWAY_API_KEY is not set; price predictions will return errors at runtime"
        )

    from persistence.db import get_db_path

    for warning in warnings:
        logger.warning(f"[CONFIG] {warning}")

    return AppConfig(
        environment=environment,
        max_request_size_bytes=max_request_size,
        session_duration_days=session_days,
        gateway_url=get_gateway_url(),
        gateway_model=get_gateway_model(),
        gateway_api_key_present=gateway_key_present,
        db_path=str(get_db_path()),
        warnings=warnings,
    )


def log_config_snapshot(config: AppConfig) -> str:
    """
    Log a safe configuration snapshot and return it.

    Never logs secret values - only boolean presence flags.
    """
    snapshot = (
        f"[STARTUP] service={config.service_name} "
        f"version={config.service_version} "
        f"environment={config.environment} "
        f"max_request_size_bytes={config.max_request_size_bytes} "
        f"session_duration_days={config.session_duration_days} "
        f"gateway_model={config.gateway_model} "
        f"gateway_api_key_present={config.gateway_api_key_present}"
    )
    logger.info(snapshot)
    return snapshot


def validate_config_snapshot_safety(snapshot: str) -> bool:
    """
    Check that a config snapshot doesn't contain sensitive values.

    "*_present=true/false" flags are allowed; "key=<value>" is not.
    """
    snapshot_lower = snapshot.lower()

    for sensitive in SENSITIVE_SUBSTRINGS:
        pattern = rf"{sensitive}=(?!true\b|false\b)"
        if re.search(pattern, snapshot_lower):
            return False

    return True
