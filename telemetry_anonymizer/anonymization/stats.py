import threading
from collections.abc import Iterable
from dataclasses import replace

from telemetry_anonymizer.anonymization.models import AnonymizationEngineStats
from telemetry_anonymizer.anonymization.pseudonyms import PseudonymStore


class StatisticsRecorder:
    """Running aggregates updated after every anonymize call."""

    def __init__(self, store: PseudonymStore) -> None:
        self._store = store
        self._lock = threading.Lock()
        self._stats = AnonymizationEngineStats()

    def update(
        self,
        processing_time_ms: float,
        rules_applied: Iterable[str],
        has_error: bool,
    ) -> None:
        """Fold one call into the running aggregates."""
        elapsed = max(processing_time_ms, 1)
        with self._lock:
            stats = self._stats
            stats.total_processed += 1
            n = stats.total_processed
            stats.average_processing_time = (
                stats.average_processing_time * (n - 1) + elapsed
            ) / n
            for rule_type in rules_applied:
                key = str(rule_type)
                stats.rules_usage[key] = stats.rules_usage.get(key, 0) + 1
            stats.error_rate = (stats.error_rate * (n - 1) + (1 if has_error else 0)) / n
            stats.total_pseudonyms = self._store.total_mappings

    def snapshot(self) -> AnonymizationEngineStats:
        """Return a copy that later updates will not touch."""
        with self._lock:
            return replace(self._stats, rules_usage=dict(self._stats.rules_usage))

    def mark_mappings_cleared(self) -> None:
        with self._lock:
            self._stats.total_pseudonyms = 0

    def reset(self) -> None:
        with self._lock:
            self._stats = AnonymizationEngineStats()
