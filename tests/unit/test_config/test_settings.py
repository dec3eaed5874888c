"""Tests for configuration loading and validation."""

from __future__ import annotations

import pydantic
import pytest
import yaml

from flowbuddy.config.settings import (
    CaptureConfig,
    ClassifierConfig,
    MonitoringConfig,
    Settings,
    load_settings,
    save_preferences,
)
from flowbuddy.state.session import SessionState


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Keep host environment and .env files out of the tests."""
    for var in ("BLABLADOR_API_KEY", "BLABLADOR_BASE_URL", "FLOWBUDDY_API_KEY"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)


class TestSettings:
    def test_default_settings(self) -> None:
        """Default Settings should be valid."""
        settings = Settings()
        assert settings.classifier.provider == "http"
        assert settings.capture.max_width == 448
        assert settings.monitoring.interval_seconds == 10
        assert settings.monitoring.enabled is False

    def test_capture_config_defaults(self) -> None:
        config = CaptureConfig()
        assert config.jpeg_quality == 60
        assert config.monitor_index == 1

    def test_classifier_config_defaults(self) -> None:
        config = ClassifierConfig()
        assert config.classifier_model == "alias-fast"
        assert config.research_model == "alias-large"
        assert config.vision_timeout == 120.0

    def test_vision_timeout_ceiling(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            ClassifierConfig(vision_timeout=300)

    @pytest.mark.parametrize("interval", [5, 10, 15, 20, 25, 30, 60])
    def test_allowed_intervals(self, interval: int) -> None:
        assert MonitoringConfig(interval_seconds=interval).interval_seconds == interval

    @pytest.mark.parametrize("interval", [0, 7, 45, 120])
    def test_rejects_other_intervals(self, interval: int) -> None:
        with pytest.raises(pydantic.ValidationError):
            MonitoringConfig(interval_seconds=interval)


class TestLoadSettings:
    def test_missing_file_returns_defaults(self, tmp_path) -> None:
        settings = load_settings(tmp_path / "nonexistent.yaml")
        assert settings.capture.max_width == 448

    def test_yaml_values_are_loaded(self, tmp_path) -> None:
        path = tmp_path / "flowbuddy.yaml"
        path.write_text(yaml.safe_dump({
            "monitoring": {"enabled": True, "interval_seconds": 30},
            "classifier": {"provider": "openai"},
        }))
        settings = load_settings(path)
        assert settings.monitoring.enabled is True
        assert settings.monitoring.interval_seconds == 30
        assert settings.classifier.provider == "openai"

    def test_env_api_key_override(self, tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BLABLADOR_API_KEY", "secret-token")
        monkeypatch.setenv("BLABLADOR_BASE_URL", "https://example.test/v1")
        settings = load_settings(tmp_path / "nonexistent.yaml")
        assert settings.api_key.get_secret_value() == "secret-token"
        assert settings.classifier.base_url == "https://example.test/v1"

    def test_env_wins_over_yaml(self, tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "flowbuddy.yaml"
        path.write_text(yaml.safe_dump({
            "api_key": "yaml-key",
            "classifier": {"base_url": "https://yaml.test/v1"},
        }))
        monkeypatch.setenv("BLABLADOR_API_KEY", "env-key")
        monkeypatch.setenv("BLABLADOR_BASE_URL", "https://env.test/v1")

        settings = load_settings(path)

        assert settings.api_key.get_secret_value() == "env-key"
        assert settings.classifier.base_url == "https://env.test/v1"

    def test_dotenv_file_is_read(self, tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
        # Registered with monkeypatch so the value written by the loader is undone.
        monkeypatch.setenv("BLABLADOR_API_KEY", "")
        (tmp_path / ".env").write_text("# comment\nBLABLADOR_API_KEY=from-dotenv\n")
        settings = load_settings(tmp_path / "nonexistent.yaml")
        assert settings.api_key.get_secret_value() == "from-dotenv"

    def test_dotenv_quotes_are_stripped(self, tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BLABLADOR_API_KEY", "")
        (tmp_path / ".env").write_text('BLABLADOR_API_KEY="quoted-key"\n')
        settings = load_settings(tmp_path / "nonexistent.yaml")
        assert settings.api_key.get_secret_value() == "quoted-key"


class TestSavePreferences:
    def test_writes_monitoring_section_and_keeps_others(self, tmp_path) -> None:
        path = tmp_path / "flowbuddy.yaml"
        path.write_text(yaml.safe_dump({"capture": {"max_width": 320}}))
        state = SessionState(monitoring_enabled=True, monitoring_interval_seconds=25)
        state.background_research_enabled = True

        save_preferences(path, state)

        data = yaml.safe_load(path.read_text())
        assert data["capture"] == {"max_width": 320}
        assert data["monitoring"] == {
            "enabled": True,
            "interval_seconds": 25,
            "background_research": True,
        }
        assert load_settings(path).monitoring.interval_seconds == 25
