"""Verifier configuration for jwks-verifier.

Defines configuration models for the algorithm allow-list, key selection,
key set refresh and logging. All fields have defaults, so an empty JSON
object is a valid configuration.

Example usage:
    # Load from config file
    config = VerifierConfig.load_from_file(config_path)

    # Save configuration
    config.save_to_file(config_path)
"""

import json
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, ValidationError, field_validator

from jwks_verifier.constants import (
    ALLOWED_ALGORITHMS,
    DEFAULT_REFRESH_TIMEOUT_SECONDS,
    MAX_REFRESH_TIMEOUT_SECONDS,
)


class LoggingConfig(BaseModel):
    """Logging configuration settings.

    Attributes:
        log_level: Level of the system logger.
        system_log_path: JSONL file for system events (stderr if unset).
        audit_log_path: JSONL file for validation audit events (disabled if unset).
    """

    log_level: Literal["DEBUG", "INFO", "WARNING"] = "INFO"
    system_log_path: str | None = None
    audit_log_path: str | None = None


class VerifierConfig(BaseModel):
    """Main configuration for signature validation.

    Attributes:
        allowed_algorithms: Algorithms tokens may be signed with. Must be a
            non-empty subset of the built-in allow-list; it can only be narrowed.
        allow_symmetric_fallback: Let HS* tokens without a kid select a
            shared-secret key by type and use.
        refresh_timeout_seconds: Timeout for the HTTP key set supplier (CLI).
        logging: Logging configuration.
    """

    allowed_algorithms: list[str] = Field(default_factory=lambda: list(ALLOWED_ALGORITHMS))
    allow_symmetric_fallback: bool = False
    refresh_timeout_seconds: float = Field(
        default=DEFAULT_REFRESH_TIMEOUT_SECONDS,
        gt=0,
        le=MAX_REFRESH_TIMEOUT_SECONDS,
    )
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("allowed_algorithms")
    @classmethod
    def _check_allowed_algorithms(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("allowed_algorithms must not be empty")
        unknown = [alg for alg in value if alg not in ALLOWED_ALGORITHMS]
        if unknown:
            raise ValueError(f"Unsupported algorithms: {', '.join(unknown)}")
        return list(dict.fromkeys(value))

    def save_to_file(self, config_path: Path) -> None:
        """Save configuration to JSON file.

        Creates parent directories if they don't exist.

        Args:
            config_path: Path where the config should be saved.
        """
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(self.model_dump(), f, indent=2)

    @classmethod
    def load_from_file(cls, config_path: Path) -> "VerifierConfig":
        """Load configuration from JSON file.

        Args:
            config_path: Path to the config file.

        Returns:
            VerifierConfig instance with loaded configuration.

        Raises:
            FileNotFoundError: If config file doesn't exist.
            ValueError: If config file is invalid or has invalid fields.
        """
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        try:
            with open(config_path, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in config file {config_path}: {e}") from e

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            errors = "; ".join(
                f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise ValueError(f"Invalid config file {config_path}: {errors}") from e
