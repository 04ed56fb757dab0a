import threading

from telemetry_anonymizer.anonymization.engine import AnonymizationEngine
from telemetry_anonymizer.anonymization.pseudonyms import PseudonymStore
from telemetry_anonymizer.anonymization.stats import StatisticsRecorder
from telemetry_anonymizer.config.settings import Settings

_default_engine: AnonymizationEngine | None = None
_default_engine_lock = threading.Lock()


class AnonymizationEngineFactory:
    """Creates anonymization engines with their own state."""

    @classmethod
    def create(cls, settings: Settings) -> AnonymizationEngine:
        """Create an engine with a fresh pseudonym store and statistics."""
        store = PseudonymStore()
        return AnonymizationEngine(
            store=store,
            stats=StatisticsRecorder(store),
            settings=settings,
        )


def get_default_engine(settings: Settings | None = None) -> AnonymizationEngine:
    """Return the per-process engine, creating it on first use.

    *settings* only applies to the first call.
    """
    global _default_engine
    with _default_engine_lock:
        if _default_engine is None:
            _default_engine = AnonymizationEngineFactory.create(settings or Settings())
        return _default_engine
