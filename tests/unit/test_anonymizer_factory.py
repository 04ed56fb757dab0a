import pytest

from telemetry_anonymizer.anonymization import factory
from telemetry_anonymizer.anonymization.engine import AnonymizationEngine
from telemetry_anonymizer.anonymization.factory import (
    AnonymizationEngineFactory,
    get_default_engine,
)
from telemetry_anonymizer.config.settings import Settings


class TestAnonymizationEngineFactory:
    def test_returns_engine_instance(self) -> None:
        engine = AnonymizationEngineFactory.create(Settings())
        assert isinstance(engine, AnonymizationEngine)

    def test_engines_do_not_share_state(self) -> None:
        first = AnonymizationEngineFactory.create(Settings())
        second = AnonymizationEngineFactory.create(Settings())
        first.anonymize("mail admin@example.com")
        assert first.store.total_mappings == 1
        assert second.store.total_mappings == 0
        assert second.get_stats().total_processed == 0

    def test_default_options_follow_settings(self) -> None:
        engine = AnonymizationEngineFactory.create(Settings(hash_salt="node-7"))
        assert engine.default_options.hash_salt == "node-7"


class TestGetDefaultEngine:
    @pytest.fixture(autouse=True)
    def _fresh_singleton(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(factory, "_default_engine", None)

    def test_returns_same_instance(self) -> None:
        assert get_default_engine() is get_default_engine()

    def test_settings_only_apply_on_first_call(self) -> None:
        first = get_default_engine(Settings(hash_salt="first"))
        second = get_default_engine(Settings(hash_salt="second"))
        assert second is first
        assert second.default_options.hash_salt == "first"
