import time
from abc import ABC, abstractmethod
from typing import Any, ClassVar

from telemetry_anonymizer.anonymization.engine import AnonymizationEngine
from telemetry_anonymizer.anonymization.models import (
    AnonymizationMetadata,
    AnonymizationOptions,
    AnonymizedData,
)
from telemetry_anonymizer.logging.logger import Log
from telemetry_anonymizer.processor.models import InputKind


class BaseDataProcessor(ABC):
    """Contract for all input-kind processors.

    Subclasses decide which fields of their input are anonymized; each
    field goes through the shared engine so pseudonyms stay consistent
    across fields, records and calls.
    """

    kind: ClassVar[InputKind]

    def __init__(self, engine: AnonymizationEngine) -> None:
        self._engine = engine

    def process(
        self,
        data: Any,
        options: AnonymizationOptions | None = None,
    ) -> AnonymizedData[Any]:
        """Anonymize *data*. Never raises; failures return the original data."""
        options = options or self._engine.default_options
        started = time.perf_counter()
        mappings_before = self._engine.store.total_mappings
        rules_applied: list[str] = []

        try:
            anonymized = self._process(data, options, rules_applied)
        except Exception as exc:
            Log.error(
                f"{type(self).__name__} failed ({type(exc).__name__}), "
                "returning original data"
            )
            return AnonymizedData(
                data=data,
                metadata=AnonymizationMetadata(
                    processing_time_ms=self._elapsed_ms(started),
                    is_anonymized=False,
                    preserved_structure=options.preserve_structure,
                ),
            )

        pseudonyms_used = max(0, self._engine.store.total_mappings - mappings_before)
        Log.info(
            f"{type(self).__name__}: {len(rules_applied)} rule types applied, "
            f"{pseudonyms_used} new pseudonyms"
        )
        return AnonymizedData(
            data=anonymized,
            metadata=AnonymizationMetadata(
                rules_applied=rules_applied,
                pseudonyms_used=pseudonyms_used,
                processing_time_ms=self._elapsed_ms(started),
                is_anonymized=bool(rules_applied),
                preserved_structure=options.preserve_structure,
            ),
        )

    @abstractmethod
    def _process(
        self,
        data: Any,
        options: AnonymizationOptions,
        rules_applied: list[str],
    ) -> Any:
        """Return the anonymized form of *data*, recording rule types used."""

    def _anonymize(
        self,
        value: Any,
        options: AnonymizationOptions,
        rules_applied: list[str],
    ) -> Any:
        """Run *value* through the engine and merge the rules it applied."""
        result = self._engine.anonymize(value, options)
        self._merge_rules(rules_applied, result.metadata.rules_applied)
        return result.data

    @staticmethod
    def _merge_rules(rules_applied: list[str], new_rules: list[str]) -> None:
        for rule_type in new_rules:
            if rule_type not in rules_applied:
                rules_applied.append(rule_type)

    @staticmethod
    def _elapsed_ms(started: float) -> int:
        return max(1, int((time.perf_counter() - started) * 1000))
