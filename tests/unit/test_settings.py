import pytest
from pydantic import ValidationError

from lvtakeoff.config.settings import Settings

_PROVIDER_ENV = (
    "VISION_PROVIDER",
    "GEMINI_API_KEY",
    "OPENAI_API_KEY",
    "HIGH_SEVERITY_PERCENT",
    "MAX_WORKERS",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _PROVIDER_ENV:
        monkeypatch.delenv(name, raising=False)


class TestSettingsDefaults:
    def test_default_provider(self) -> None:
        s = Settings(_env_file=None)
        assert s.vision_provider == "gemini"

    def test_default_model(self) -> None:
        s = Settings(_env_file=None)
        assert s.gemini_model_name == "gemini-2.0-flash"

    def test_default_poll_budget(self) -> None:
        s = Settings(_env_file=None)
        assert s.upload_poll_interval_seconds == 1.0
        assert s.upload_poll_max_attempts == 60

    def test_default_severity_thresholds(self) -> None:
        s = Settings(_env_file=None)
        assert s.high_severity_percent == 20.0
        assert s.medium_severity_percent == 10.0

    def test_default_prefers_overcount(self) -> None:
        s = Settings(_env_file=None)
        assert s.prefer_overcount is True

    def test_default_sequential(self) -> None:
        s = Settings(_env_file=None)
        assert s.max_workers == 1


class TestSettingsFromEnv:
    def test_loads_provider(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("VISION_PROVIDER", "openai")
        s = Settings(_env_file=None)
        assert s.vision_provider == "openai"

    def test_loads_threshold(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HIGH_SEVERITY_PERCENT", "25")
        s = Settings(_env_file=None)
        assert s.high_severity_percent == 25.0

    def test_loads_max_workers(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MAX_WORKERS", "4")
        s = Settings(_env_file=None)
        assert s.max_workers == 4


class TestApiKeyForProvider:
    def test_gemini_key(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GEMINI_API_KEY", "g-key")
        monkeypatch.setenv("OPENAI_API_KEY", "o-key")
        s = Settings(_env_file=None)
        assert s.api_key_for_provider() == "g-key"

    @pytest.mark.parametrize("provider", ["openai", "openai_compatible", "OpenAI"])
    def test_openai_key(self, monkeypatch: pytest.MonkeyPatch, provider: str) -> None:
        monkeypatch.setenv("OPENAI_API_KEY", "o-key")
        s = Settings(_env_file=None, vision_provider=provider)
        assert s.api_key_for_provider() == "o-key"

    def test_example_has_no_key(self) -> None:
        s = Settings(_env_file=None, vision_provider="example")
        assert s.api_key_for_provider() == ""


class TestSettingsValidation:
    def test_invalid_max_workers_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MAX_WORKERS", "abc")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_zero_max_workers_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MAX_WORKERS", "0")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_negative_threshold_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HIGH_SEVERITY_PERCENT", "-5")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_temperature_out_of_range_raises(self) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, analysis_temperature=3.5)
