"""Configuration management for the sitemap verifier."""

import os
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationInfo, field_validator


SUPPORTED_REPORT_FORMATS = ("json", "csv")


class CheckerConfig(BaseModel):
    """Verifier configuration. Every value is passed explicitly into the components."""

    # HTTP configuration
    request_timeout: float = Field(default=30.0, description="Per-request timeout in seconds")
    max_redirects: int = Field(default=5, description="Maximum redirect hops to follow")
    user_agent: str = Field(
        default="SitemapBot/1.0 (+https://example.com/bot)",
        description="User-Agent header sent with every probe"
    )

    # Concurrency configuration
    max_parallel: int = Field(default=10, description="Maximum concurrently checked URLs")

    # Retry configuration
    max_retries: int = Field(default=3, description="Retries after the first attempt")
    retry_delay_ms: int = Field(default=1000, description="Base delay for exponential backoff")
    backoff_multiplier: float = Field(default=2.0, description="Backoff growth factor per attempt")
    max_backoff_delay_ms: int = Field(default=30000, description="Cap on a single backoff delay")
    retryable_status_codes: Optional[List[int]] = Field(
        default=None,
        description="Explicit retryable HTTP statuses; None keeps the built-in policy"
    )

    # Batch constraints
    total_timeout: Optional[float] = Field(default=None, description="Deadline for the whole batch in seconds")

    # Logging configuration
    log_level: str = Field(default="INFO", description="Logging level")

    # Output configuration
    output_directory: str = Field(default="reports", description="Directory for saved reports")
    report_formats: List[str] = Field(default=["json"], description="Report formats to write")

    @field_validator('request_timeout')
    @classmethod
    def validate_request_timeout(cls, v: float) -> float:
        """Validate request timeout is positive."""
        if v <= 0:
            raise ValueError(f"request_timeout must be positive, got: {v}")
        return v

    @field_validator('max_parallel')
    @classmethod
    def validate_max_parallel(cls, v: int) -> int:
        """Validate concurrency ceiling is positive."""
        if v <= 0:
            raise ValueError(f"max_parallel must be positive, got: {v}")
        return v

    @field_validator('max_retries', 'max_redirects', 'retry_delay_ms', 'max_backoff_delay_ms')
    @classmethod
    def validate_non_negative(cls, v: int, info: ValidationInfo) -> int:
        if v < 0:
            raise ValueError(f"{info.field_name} must not be negative, got: {v}")
        return v

    @field_validator('backoff_multiplier')
    @classmethod
    def validate_backoff_multiplier(cls, v: float) -> float:
        """Backoff must not shrink between attempts."""
        if v < 1.0:
            raise ValueError(f"backoff_multiplier must be >= 1.0, got: {v}")
        return v

    @field_validator('total_timeout')
    @classmethod
    def validate_total_timeout(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v <= 0:
            raise ValueError(f"total_timeout must be positive, got: {v}")
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR"):
            raise ValueError(f"Unsupported log_level: {v}")
        return level

    @field_validator('report_formats')
    @classmethod
    def validate_report_formats(cls, v: List[str]) -> List[str]:
        formats = [fmt.lower() for fmt in v]
        unknown = [fmt for fmt in formats if fmt not in SUPPORTED_REPORT_FORMATS]
        if unknown:
            raise ValueError(f"Unsupported report formats: {', '.join(unknown)}")
        return formats

    @property
    def output_path(self) -> Path:
        """Get report output directory."""
        return Path(self.output_directory)

    # Environment variable overrides
    @classmethod
    def from_env(cls) -> "CheckerConfig":
        """Create configuration with environment variable overrides."""
        values = {}

        env_mappings = {
            "VERIFIER_REQUEST_TIMEOUT": "request_timeout",
            "VERIFIER_MAX_PARALLEL": "max_parallel",
            "VERIFIER_MAX_RETRIES": "max_retries",
            "VERIFIER_RETRY_DELAY_MS": "retry_delay_ms",
            "VERIFIER_LOG_LEVEL": "log_level",
            "VERIFIER_OUTPUT_DIR": "output_directory",
            "VERIFIER_TOTAL_TIMEOUT": "total_timeout",
        }

        for env_var, field_name in env_mappings.items():
            if env_var in os.environ:
                # Pydantic coerces the raw strings to the declared field types
                values[field_name] = os.environ[env_var]

        return cls(**values)


class ConfigManager:
    """Loads CheckerConfig from YAML, environment and CLI flags."""

    def __init__(self, config_file: Optional[Path] = None):
        self.config_file = Path(config_file) if config_file else Path("config/config.yaml")
        self._config: Optional[CheckerConfig] = None

    def load_config(self, cli_overrides: Optional[Dict] = None) -> CheckerConfig:
        """
        Load configuration with override precedence: CLI > ENV > YAML > defaults.

        Args:
            cli_overrides: Optional dictionary of CLI flag overrides; None values are ignored

        Returns:
            Fully merged CheckerConfig instance

        Raises:
            ValueError: If the YAML document is not a mapping or validation fails
        """
        values = CheckerConfig(**self._read_yaml()).model_dump()

        # Only variables actually present in the environment take part
        env_config = CheckerConfig.from_env()
        values.update(env_config.model_dump(include=env_config.model_fields_set))

        if cli_overrides:
            values.update({k: v for k, v in cli_overrides.items() if v is not None})

        self._config = CheckerConfig(**values)
        return self._config

    def _read_yaml(self) -> Dict:
        if not self.config_file.exists():
            return {}

        with open(self.config_file, 'r', encoding='utf-8') as f:
            document = yaml.safe_load(f)

        if document is None:
            return {}
        if not isinstance(document, dict):
            raise ValueError(f"Config file must contain a mapping: {self.config_file}")
        return document

    @property
    def config(self) -> CheckerConfig:
        """Loaded configuration, read on first access."""
        if self._config is None:
            self._config = self.load_config()
        return self._config
