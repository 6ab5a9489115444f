"""Configuration system.

YAML configuration files validated by Pydantic models with sane defaults and
clear error messages. Entry point: load_config(). Every section has defaults,
so ``AuditConfig()`` is a complete working configuration.
"""

from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from siteaudit.exceptions import ConfigError

DEFAULT_USER_AGENT = "SiteAuditBot/1.0 (SEO best-practices assessment)"


class CrawlingConfig(BaseModel):
    """Crawl bounds, politeness and retry behaviour."""

    max_pages: int = Field(
        default=25,
        ge=1,
        le=1000,
        description=(
            "Hard cap on fetched pages, homepage included. Similarity checks are "
            "quadratic in bucket size, so keep this small."
        ),
    )
    max_concurrency: int = Field(
        default=4,
        ge=1,
        le=32,
        description="Number of concurrent crawl workers",
    )
    per_request_timeout_ms: int = Field(
        default=10_000,
        ge=100,
        description="Timeout for a single page fetch in milliseconds",
    )
    retry_attempts: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Retries after the first failed attempt (network errors and non-2xx only)",
    )
    retry_backoff_ms: int = Field(
        default=500,
        ge=0,
        description="Base backoff delay; doubles on every retry (base * 2**attempt)",
    )
    request_delay_ms: int = Field(
        default=1000,
        ge=0,
        description="Minimum delay between two requests issued by the same worker",
    )
    deadline_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Overall crawl deadline. On expiry a partial report is produced.",
    )
    user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        description="User-Agent header sent with every request and used for robots.txt rules",
    )
    respect_robots: bool = Field(
        default=True,
        description="Honour robots.txt. Unreachable robots.txt always allows crawling.",
    )
    robots_timeout_ms: int = Field(
        default=5_000,
        ge=100,
        description="Timeout for robots.txt fetches in milliseconds",
    )

    @field_validator("user_agent")
    @classmethod
    def validate_user_agent(cls, v: str) -> str:
        """Reject blank user agents."""
        v = v.strip()
        if not v:
            raise ValueError("user_agent cannot be empty")
        return v

    @property
    def request_timeout(self) -> float:
        """Per-request timeout in seconds."""
        return self.per_request_timeout_ms / 1000

    @property
    def robots_timeout(self) -> float:
        """robots.txt timeout in seconds."""
        return self.robots_timeout_ms / 1000


class SitemapConfig(BaseModel):
    """Sitemap-assisted frontier seeding."""

    enabled: bool = Field(
        default=True,
        description="Try /sitemap.xml then /sitemap_index.xml to seed the frontier",
    )
    timeout_ms: int = Field(
        default=5_000,
        ge=100,
        description="Timeout for each sitemap fetch in milliseconds",
    )

    @property
    def timeout(self) -> float:
        """Sitemap fetch timeout in seconds."""
        return self.timeout_ms / 1000


class AnalysisConfig(BaseModel):
    """Rule engine tuning."""

    similarity_threshold: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description=(
            "Jaccard similarity above which two service-area or location pages "
            "count as near-duplicates"
        ),
    )


class AuditConfig(BaseModel):
    """Root configuration model for one audit run."""

    crawling: CrawlingConfig = Field(default_factory=CrawlingConfig)
    sitemap: SitemapConfig = Field(default_factory=SitemapConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)

    @model_validator(mode="after")
    def validate_concurrency_vs_pages(self) -> "AuditConfig":
        """More workers than pages only spawns idle tasks; clamp instead of failing."""
        if self.crawling.max_concurrency > self.crawling.max_pages:
            self.crawling.max_concurrency = self.crawling.max_pages
        return self


def load_config(path: Path) -> AuditConfig:
    """Load and validate YAML configuration file.

    Args:
        path: Path to YAML configuration file

    Returns:
        Validated AuditConfig instance

    Raises:
        ConfigError: If config file is not found, invalid YAML, or validation fails
    """
    try:
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        if not path.is_file():
            raise ConfigError(f"Configuration path is not a file: {path}")

        with path.open("r", encoding="utf-8") as f:
            config_dict = yaml.safe_load(f)

        if config_dict is None:
            return AuditConfig()

        if not isinstance(config_dict, dict):
            raise ConfigError(
                f"Configuration file must contain a YAML object/dict, "
                f"got {type(config_dict).__name__}"
            )

        return AuditConfig(**config_dict)
    except FileNotFoundError as e:
        raise ConfigError(f"Configuration file not found: {path}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"Configuration validation failed for {path}:\n{e}") from e


def dump_default_config() -> str:
    """Render the default configuration as YAML."""
    return yaml.safe_dump(AuditConfig().model_dump(), sort_keys=False)
