"""Configuration management for dpcheck with Pydantic validation.

Two layers:

- ``EnvironmentConfig`` resolves dashboard credentials from an
  environment-selected ``.env.<env>`` file, the process environment and
  built-in defaults.
- ``ScenarioConfig`` describes one scenario run and is loaded from YAML.
"""

import os
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from dotenv import dotenv_values
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from dpcheck.core import constants
from dpcheck.core.exceptions import ConfigException, ValidationException
from dpcheck.core.retry import RetryPolicy
from dpcheck.utils.logging import get_logger

logger = get_logger("config")


class Credentials(BaseModel):
    """Read-only dashboard credentials for one run."""

    model_config = ConfigDict(frozen=True)

    base_url: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None

    def require_complete(self) -> "Credentials":
        missing = [name for name, value in self.model_dump().items() if not value]
        if missing:
            raise ValidationException(
                "Missing required credentials "
                f"({', '.join(missing)}). Please check environment configuration."
            )
        return self


class EnvironmentConfig:
    """Environment-selected key/value settings (BASE_URL, API_URL, USERNAME, PASSWORD)."""

    def __init__(self, environment: Optional[str] = None, root: Optional[Union[str, Path]] = None):
        """Load ``<root>/.env.<environment>``.

        Args:
            environment: Environment name (default: $DPCHECK_ENV or ``qa``)
            root: Directory holding the env files (default: working directory)
        """
        self.environment = (
            environment or os.getenv(constants.ENVIRONMENT_ENV) or constants.DEFAULT_ENVIRONMENT
        )
        self.env_file = Path(root or Path.cwd()) / f".env.{self.environment}"
        self.values = self._load()

    def _load(self) -> Dict[str, str]:
        if not self.env_file.is_file():
            logger.warning(
                f"⚠️ Environment file {self.env_file} not found. Using default configuration."
            )
            return self._defaults()

        return {key: value for key, value in dotenv_values(self.env_file).items() if key and value}

    @staticmethod
    def _defaults() -> Dict[str, str]:
        defaults = {"BASE_URL": constants.DEFAULT_BASE_URL}
        for key in ("API_URL", "USERNAME", "PASSWORD"):
            value = os.getenv(key)
            if value:
                defaults[key] = value
        return defaults

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.values.get(key) or os.getenv(key) or default

    @property
    def base_url(self) -> Optional[str]:
        return self.get("BASE_URL")

    @property
    def api_url(self) -> Optional[str]:
        return self.get("API_URL")

    def credentials(self) -> Credentials:
        return Credentials(
            base_url=self.base_url,
            username=self.get("USERNAME"),
            password=self.get("PASSWORD"),
        )

    @property
    def is_production(self) -> bool:
        return self.environment == "prod"

    @property
    def is_development(self) -> bool:
        return self.environment == "dev"

    @property
    def is_qa(self) -> bool:
        return self.environment == "qa"


class TimeoutConfig(BaseModel):
    """Element and request timeouts in milliseconds."""

    model_config = ConfigDict(extra="forbid")

    default_wait_ms: int = Field(constants.DEFAULT_WAIT_MS, ge=0)
    long_wait_ms: int = Field(constants.LONG_WAIT_MS, ge=0)
    short_wait_ms: int = Field(constants.SHORT_WAIT_MS, ge=0)
    login_error_probe_ms: int = Field(3000, ge=0)
    optional_dialog_ms: int = Field(10000, ge=0)
    api_request_ms: int = Field(constants.API_REQUEST_MS, gt=0)


class ScrapeConfig(BaseModel):
    """Metric scraping settings."""

    model_config = ConfigDict(extra="forbid")

    numeric_selector: str = Field(
        "xpath=//span[number(.) = number(.)]",
        description="Selector for candidate numeric nodes, in document order",
    )
    max_numeric_nodes: int = Field(4, ge=2)
    settle_timeout_ms: int = Field(3000, ge=0)
    poll_interval_ms: int = Field(500, gt=0)
    settle_delay_ms: int = Field(3000, ge=0, description="Fixed pause if polling fails")


class VerificationConfig(BaseModel):
    """Optional thresholds for the scraped event counts."""

    model_config = ConfigDict(extra="forbid")

    min_delivered: Optional[int] = Field(None, ge=0)
    max_failed: Optional[int] = Field(None, ge=0)

    @property
    def enabled(self) -> bool:
        return self.min_delivered is not None or self.max_failed is not None


class BrowserConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    browser: str = Field("chromium", description="Playwright browser type")
    headless: bool = True
    viewport_width: int = 1920
    viewport_height: int = 1080
    page_load_timeout_ms: int = constants.PAGE_LOAD_MS
    ignore_https_errors: bool = False

    @field_validator("browser")
    @classmethod
    def validate_browser(cls, v: str) -> str:
        if v not in ("chromium", "firefox", "webkit"):
            raise ValueError(f"browser must be chromium, firefox or webkit, got: {v}")
        return v


class ScreenshotConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    directory: str = "screenshots"
    on_failure: bool = True


class ScenarioConfig(BaseModel):
    """Main scenario configuration with full validation."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., description="Scenario name")
    description: str = Field("", description="Scenario description")
    environment: Optional[str] = Field(None, description="Overrides $DPCHECK_ENV")
    env_root: Optional[str] = Field(None, description="Directory holding .env.<environment>")
    steps: List[str] = Field(default_factory=lambda: list(constants.SCENARIO_STEPS))
    payload_path: str = Field("data/identify.json", description="Event payload fixture")
    event_type: str = Field("identify", description="Ingestion endpoint type")
    destination_name: str = Field("webhookdev", description="Destination to open for metrics")
    retry: RetryPolicy = Field(default_factory=RetryPolicy)
    timeouts: TimeoutConfig = Field(default_factory=TimeoutConfig)
    scrape: ScrapeConfig = Field(default_factory=ScrapeConfig)
    verification: VerificationConfig = Field(default_factory=VerificationConfig)
    browser: BrowserConfig = Field(default_factory=BrowserConfig)
    screenshots: ScreenshotConfig = Field(default_factory=ScreenshotConfig)

    @field_validator("steps")
    @classmethod
    def validate_steps(cls, v: List[str]) -> List[str]:
        unknown = [step for step in v if step not in constants.SCENARIO_STEPS]
        if unknown:
            raise ValueError(f"Unknown scenario steps: {', '.join(unknown)}")
        if not v:
            raise ValueError("steps must not be empty")
        return v

    @field_validator("event_type")
    @classmethod
    def validate_event_type(cls, v: str) -> str:
        if v not in constants.EVENT_ENDPOINTS:
            raise ValueError(
                f"event_type must be one of {', '.join(constants.EVENT_ENDPOINTS)}, got: {v}"
            )
        return v

    @classmethod
    def from_file(cls, config_path: Union[str, Path]) -> "ScenarioConfig":
        """Load and validate configuration from a YAML file."""
        path = Path(config_path)
        content = path.read_text(encoding="utf-8")

        # Replace ${VAR_NAME} with the environment value, leaving unknown vars untouched
        def substitute_env_vars(match):
            return os.getenv(match.group(1), match.group(0))

        data = yaml.safe_load(re.sub(r"\$\{([^}]+)\}", substitute_env_vars, content)) or {}
        if not isinstance(data, dict):
            raise ConfigException(f"Scenario file {path} must contain a mapping")
        data.setdefault("name", path.stem)

        config = cls.from_dict(data)

        # Fixtures shipped next to the scenario file win over cwd-relative lookup
        bundled = path.parent / config.payload_path
        if not Path(config.payload_path).is_absolute() and bundled.is_file():
            config = config.model_copy(update={"payload_path": str(bundled)})
        return config

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScenarioConfig":
        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigException(f"Invalid scenario configuration: {e}") from e

    def environment_config(self) -> EnvironmentConfig:
        return EnvironmentConfig(self.environment, root=self.env_root)
