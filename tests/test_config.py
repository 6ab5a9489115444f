"""Tests for configuration models and YAML loading."""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from siteaudit.config import (
    DEFAULT_USER_AGENT,
    AuditConfig,
    CrawlingConfig,
    dump_default_config,
    load_config,
)
from siteaudit.exceptions import ConfigError


class TestDefaults:
    """Tests for default configuration values."""

    def test_defaults_are_complete(self) -> None:
        config = AuditConfig()
        assert config.crawling.max_pages == 25
        assert config.crawling.max_concurrency == 4
        assert config.crawling.retry_attempts == 3
        assert config.crawling.user_agent == DEFAULT_USER_AGENT
        assert config.crawling.respect_robots is True
        assert config.sitemap.enabled is True
        assert config.analysis.similarity_threshold == 0.7

    def test_millisecond_settings_exposed_in_seconds(self) -> None:
        crawling = CrawlingConfig(per_request_timeout_ms=2500, robots_timeout_ms=750)
        assert crawling.request_timeout == 2.5
        assert crawling.robots_timeout == 0.75
        assert AuditConfig().sitemap.timeout == 5.0


class TestValidation:
    """Tests for field bounds and validators."""

    def test_rejects_zero_pages(self) -> None:
        with pytest.raises(ValidationError):
            CrawlingConfig(max_pages=0)

    def test_rejects_threshold_above_one(self) -> None:
        with pytest.raises(ValidationError):
            AuditConfig(analysis={"similarity_threshold": 1.5})

    def test_rejects_blank_user_agent(self) -> None:
        with pytest.raises(ValidationError, match="user_agent cannot be empty"):
            CrawlingConfig(user_agent="   ")

    def test_strips_user_agent(self) -> None:
        assert CrawlingConfig(user_agent="  Bot/2.0 ").user_agent == "Bot/2.0"

    def test_concurrency_clamped_to_page_cap(self) -> None:
        config = AuditConfig(crawling={"max_pages": 3, "max_concurrency": 8})
        assert config.crawling.max_concurrency == 3


class TestLoadConfig:
    """Tests for load_config()."""

    def test_loads_partial_file(self, tmp_path: Path) -> None:
        path = tmp_path / "audit.yaml"
        path.write_text(yaml.safe_dump({"crawling": {"max_pages": 5}}))

        config = load_config(path)

        assert config.crawling.max_pages == 5
        assert config.crawling.max_concurrency == 4
        assert config.sitemap.enabled is True

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(path) == AuditConfig()

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "missing.yaml")

    def test_directory_is_rejected(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not a file"):
            load_config(tmp_path)

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("crawling: [unclosed")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(path)

    def test_non_mapping_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- one\n- two\n")
        with pytest.raises(ConfigError, match="YAML object"):
            load_config(path)

    def test_validation_error_is_wrapped(self, tmp_path: Path) -> None:
        path = tmp_path / "invalid.yaml"
        path.write_text(yaml.safe_dump({"crawling": {"max_pages": -1}}))
        with pytest.raises(ConfigError, match="validation failed"):
            load_config(path)

    def test_default_dump_round_trips(self, tmp_path: Path) -> None:
        path = tmp_path / "defaults.yaml"
        path.write_text(dump_default_config())
        assert load_config(path) == AuditConfig()
