import pytest
from pydantic import ValidationError

from telemetry_anonymizer.config.settings import Settings


class TestSettingsDefaults:
    def test_default_app_env(self) -> None:
        s = Settings()
        assert s.app_env == "dev"

    def test_default_pseudonyms_enabled(self) -> None:
        s = Settings()
        assert s.enable_pseudonyms is True

    def test_default_preserve_structure(self) -> None:
        s = Settings()
        assert s.preserve_structure is True

    def test_default_hash_salt(self) -> None:
        s = Settings()
        assert s.hash_salt == "proxmox-mpc-default-salt"

    def test_default_max_processing_time(self) -> None:
        s = Settings()
        assert s.max_processing_time_ms == 5000

    def test_default_short_circuit_threshold(self) -> None:
        s = Settings()
        assert s.short_circuit_threshold_ms == 100

    def test_default_max_depth(self) -> None:
        s = Settings()
        assert s.max_depth == 100


class TestSettingsFromEnv:
    def test_loads_app_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("APP_ENV", "production")
        s = Settings()
        assert s.app_env == "production"

    def test_loads_log_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        s = Settings()
        assert s.log_level == "DEBUG"

    def test_loads_hash_salt(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HASH_SALT", "cluster-7")
        s = Settings()
        assert s.hash_salt == "cluster-7"

    def test_loads_enable_pseudonyms(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ENABLE_PSEUDONYMS", "false")
        s = Settings()
        assert s.enable_pseudonyms is False

    def test_loads_max_processing_time(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MAX_PROCESSING_TIME_MS", "250")
        s = Settings()
        assert s.max_processing_time_ms == 250


class TestSettingsValidation:
    def test_invalid_max_processing_time_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MAX_PROCESSING_TIME_MS", "not_a_number")
        with pytest.raises(ValidationError):
            Settings()

    def test_zero_max_processing_time_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MAX_PROCESSING_TIME_MS", "0")
        with pytest.raises(ValidationError):
            Settings()

    def test_zero_max_depth_raises(self) -> None:
        with pytest.raises(ValidationError):
            Settings(max_depth=0)
