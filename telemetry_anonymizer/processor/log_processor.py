from collections.abc import Mapping
from typing import Any, ClassVar

from telemetry_anonymizer.anonymization.models import AnonymizationOptions
from telemetry_anonymizer.processor.base import BaseDataProcessor
from telemetry_anonymizer.processor.models import InputKind


class LogRecordProcessor(BaseDataProcessor):
    """Anonymizes operation log records.

    Record shape::

        {timestamp, correlationId, operation, phase, level, message,
         context: {...}, error?: {type, message, stack, ...}, metadata?: {...}}

    ``message``, the whole ``context`` and ``metadata`` subtrees and the
    error's ``message``/``stack`` are anonymized; the remaining fields are
    copied as-is.
    """

    kind: ClassVar[InputKind] = InputKind.LOG

    _ERROR_TEXT_FIELDS: ClassVar[tuple[str, ...]] = ("message", "stack")

    def _process(
        self,
        data: Any,
        options: AnonymizationOptions,
        rules_applied: list[str],
    ) -> Any:
        if isinstance(data, Mapping):
            return self.process_record(data, options, rules_applied)
        if isinstance(data, list):
            return self.process_records(data, options, rules_applied)
        return self._anonymize(data, options, rules_applied)

    def process_records(
        self,
        records: list[Any],
        options: AnonymizationOptions,
        rules_applied: list[str],
    ) -> list[Any]:
        """Anonymize a batch; entries that are not records go through the engine."""
        return [
            self.process_record(record, options, rules_applied)
            if isinstance(record, Mapping)
            else self._anonymize(record, options, rules_applied)
            for record in records
        ]

    def process_record(
        self,
        record: Mapping[str, Any],
        options: AnonymizationOptions,
        rules_applied: list[str],
    ) -> dict[str, Any]:
        """Anonymize a single record, merging rule types into *rules_applied*."""
        anonymized = dict(record)

        if isinstance(record.get("message"), str):
            anonymized["message"] = self._anonymize(
                record["message"], options, rules_applied
            )
        if record.get("context") is not None:
            anonymized["context"] = self._anonymize(
                record["context"], options, rules_applied
            )
        if isinstance(record.get("error"), Mapping):
            anonymized["error"] = self._process_error(
                record["error"], options, rules_applied
            )
        if record.get("metadata") is not None:
            anonymized["metadata"] = self._anonymize(
                record["metadata"], options, rules_applied
            )
        return anonymized

    def _process_error(
        self,
        error: Mapping[str, Any],
        options: AnonymizationOptions,
        rules_applied: list[str],
    ) -> dict[str, Any]:
        anonymized = dict(error)
        for field in self._ERROR_TEXT_FIELDS:
            if isinstance(error.get(field), str):
                anonymized[field] = self._anonymize(error[field], options, rules_applied)
        return anonymized
