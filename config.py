"""
Configuration module for environment variable validation and type-safe config.

Deployment settings (function name, runtime, API stage, log retention) are
read from the environment once and shared through ``get_config()``.
"""
import os
from dataclasses import dataclass
from typing import Optional


# Values accepted by CloudWatch Logs for retention_in_days (0 = never expire)
VALID_RETENTION_DAYS = {
    0, 1, 3, 5, 7, 14, 30, 60, 90, 120, 150, 180, 365, 400, 545, 731,
    1096, 1827, 2192, 2557, 2922, 3288, 3653,
}

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _int_from_env(name: str, default: int, minimum: int, maximum: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got: {raw}")
    if not minimum <= value <= maximum:
        raise ValueError(
            f"{name} must be between {minimum} and {maximum}, got: {value}"
        )
    return value


@dataclass
class Config:
    """Type-safe configuration object with validated environment variables."""

    function_name: str
    function_handler: str = "handler.handle"
    function_runtime: str = "python3.12"
    function_memory_mb: int = 128
    function_timeout_seconds: int = 10
    api_name: str = ""
    stage_name: str = "prod"
    log_retention_days: int = 14
    output_dir: str = "build"
    aws_region: str = "us-east-1"
    log_level: str = "INFO"

    def __post_init__(self):
        if not self.api_name:
            self.api_name = f"{self.function_name}-api"

    @property
    def log_group_name(self) -> str:
        """CloudWatch log group Lambda writes to for this function."""
        return f"/aws/lambda/{self.function_name}"

    @classmethod
    def from_env(cls) -> "Config":
        """
        Create Config instance from environment variables.

        Raises:
            ValueError: If required environment variables are missing or invalid.
        """
        function_name = os.environ.get("FUNCTION_NAME")
        if not function_name:
            raise ValueError(
                "FUNCTION_NAME environment variable is required"
            )

        function_handler = os.environ.get("FUNCTION_HANDLER", "handler.handle")
        if "." not in function_handler:
            raise ValueError(
                f"FUNCTION_HANDLER must look like module.function, got: {function_handler}"
            )

        function_runtime = os.environ.get("FUNCTION_RUNTIME", "python3.12")
        function_memory_mb = _int_from_env("FUNCTION_MEMORY_MB", 128, 128, 10240)
        function_timeout_seconds = _int_from_env(
            "FUNCTION_TIMEOUT_SECONDS", 10, 1, 900
        )

        log_retention_days = _int_from_env("LOG_RETENTION_DAYS", 14, 0, 3653)
        if log_retention_days not in VALID_RETENTION_DAYS:
            raise ValueError(
                f"LOG_RETENTION_DAYS must be one of {sorted(VALID_RETENTION_DAYS)}, "
                f"got: {log_retention_days}"
            )

        log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
        if log_level not in VALID_LOG_LEVELS:
            raise ValueError(
                f"LOG_LEVEL must be one of {VALID_LOG_LEVELS}, got: {log_level}"
            )

        return cls(
            function_name=function_name,
            function_handler=function_handler,
            function_runtime=function_runtime,
            function_memory_mb=function_memory_mb,
            function_timeout_seconds=function_timeout_seconds,
            api_name=os.environ.get("API_NAME", ""),
            stage_name=os.environ.get("STAGE_NAME", "prod"),
            log_retention_days=log_retention_days,
            output_dir=os.environ.get("OUTPUT_DIR", "build"),
            aws_region=os.environ.get("AWS_REGION", "us-east-1"),
            log_level=log_level,
        )


# Global config instance, created on first use
_config: Optional[Config] = None


def get_config() -> Config:
    """
    Get the global configuration instance.

    Returns:
        Config: The validated configuration object

    Raises:
        ValueError: If required environment variables are missing or invalid.
    """
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config
