from collections.abc import Mapping
from typing import Any, ClassVar

from telemetry_anonymizer.anonymization.models import AnonymizationOptions
from telemetry_anonymizer.processor.base import BaseDataProcessor
from telemetry_anonymizer.processor.models import InputKind


class DatabaseRecordProcessor(BaseDataProcessor):
    """Anonymizes query results: ``{table: [rows] | row}`` or a list of rows.

    Only identifying columns are rewritten. Numeric columns are
    anonymized as text and turned back into numbers when the result is
    still numeric, so an untouched ``vmid`` stays an ``int``.
    """

    kind: ClassVar[InputKind] = InputKind.DATABASE

    IDENTIFYING_FIELD_PARTS: ClassVar[tuple[str, ...]] = (
        "hostname",
        "name",
        "node",
        "server",
        "host",
        "ip",
        "email",
        "user",
        "owner",
        "description",
        "notes",
        "comment",
        "path",
        "location",
        "directory",
        "mac",
        "uuid",
        "id",
    )

    def _process(
        self,
        data: Any,
        options: AnonymizationOptions,
        rules_applied: list[str],
    ) -> Any:
        if isinstance(data, list):
            return self._process_rows(data, options, rules_applied)
        if not isinstance(data, Mapping):
            return data

        result: dict[Any, Any] = {}
        for table, records in data.items():
            if isinstance(records, list):
                result[table] = self._process_rows(records, options, rules_applied)
            elif isinstance(records, Mapping):
                result[table] = self.process_record(records, options, rules_applied)
            else:
                result[table] = records
        return result

    @classmethod
    def is_identifying_field(cls, field: str) -> bool:
        lowered = field.lower()
        return any(part in lowered for part in cls.IDENTIFYING_FIELD_PARTS)

    def process_record(
        self,
        record: Mapping[str, Any],
        options: AnonymizationOptions,
        rules_applied: list[str],
    ) -> dict[str, Any]:
        anonymized: dict[str, Any] = {}
        for field, value in record.items():
            if not isinstance(field, str) or not self.is_identifying_field(field):
                anonymized[field] = value
            elif value is None or isinstance(value, bool):
                anonymized[field] = value
            elif isinstance(value, (int, float)):
                anonymized[field] = self._anonymize_number(value, options, rules_applied)
            else:
                anonymized[field] = self._anonymize(value, options, rules_applied)
        return anonymized

    def _process_rows(
        self,
        rows: list[Any],
        options: AnonymizationOptions,
        rules_applied: list[str],
    ) -> list[Any]:
        return [
            self.process_record(row, options, rules_applied)
            if isinstance(row, Mapping)
            else row
            for row in rows
        ]

    def _anonymize_number(
        self,
        value: int | float,
        options: AnonymizationOptions,
        rules_applied: list[str],
    ) -> int | float | str:
        anonymized = self._anonymize(str(value), options, rules_applied)
        try:
            return type(value)(anonymized)
        except ValueError:
            return anonymized
