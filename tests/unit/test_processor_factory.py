import pytest

from telemetry_anonymizer.anonymization import factory
from telemetry_anonymizer.anonymization.engine import AnonymizationEngine
from telemetry_anonymizer.anonymization.models import AnonymizationOptions
from telemetry_anonymizer.processor.config_processor import ConfigProcessor
from telemetry_anonymizer.processor.database_processor import DatabaseRecordProcessor
from telemetry_anonymizer.processor.diagnostic_processor import (
    DiagnosticSnapshotProcessor,
    ErrorProcessor,
)
from telemetry_anonymizer.processor.exceptions import ProcessorError, UnknownInputKindError
from telemetry_anonymizer.processor.factory import ProcessorFactory
from telemetry_anonymizer.processor.log_processor import LogRecordProcessor
from telemetry_anonymizer.processor.models import InputKind, TelemetryPayload
from telemetry_anonymizer.processor.processor import anonymize_payload


class TestProcessorFactory:
    @pytest.mark.parametrize(
        "kind, expected",
        [
            (InputKind.LOG, LogRecordProcessor),
            (InputKind.CONFIG, ConfigProcessor),
            (InputKind.DATABASE, DatabaseRecordProcessor),
            (InputKind.ERROR, ErrorProcessor),
            (InputKind.DIAGNOSTIC, DiagnosticSnapshotProcessor),
        ],
    )
    def test_creates_processor_for_kind(
        self, engine: AnonymizationEngine, kind: InputKind, expected: type
    ) -> None:
        processor = ProcessorFactory.create(kind, engine)
        assert isinstance(processor, expected)
        assert processor.kind is kind

    def test_accepts_kind_value(self, engine: AnonymizationEngine) -> None:
        assert isinstance(ProcessorFactory.create("config", engine), ConfigProcessor)

    def test_unknown_kind_raises(self, engine: AnonymizationEngine) -> None:
        with pytest.raises(UnknownInputKindError, match="Choose from"):
            ProcessorFactory.create("syslog", engine)

    def test_unknown_kind_error_hierarchy(self) -> None:
        assert issubclass(UnknownInputKindError, ProcessorError)
        assert issubclass(UnknownInputKindError, ValueError)

    def test_defaults_to_shared_engine(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(factory, "_default_engine", None)
        processor = ProcessorFactory.create(InputKind.LOG)
        assert processor._engine is factory.get_default_engine()


class TestAnonymizePayload:
    def test_dispatches_on_kind(
        self, engine: AnonymizationEngine, options: AnonymizationOptions
    ) -> None:
        payload = TelemetryPayload(kind=InputKind.CONFIG, data={"password": "hunter2"})
        result = anonymize_payload(payload, engine=engine, options=options)
        assert result.data == {"password": "[REDACTED]"}

    def test_same_text_differs_by_kind(
        self, engine: AnonymizationEngine, options: AnonymizationOptions
    ) -> None:
        data = {"name": "web-server-01"}
        as_config = anonymize_payload(TelemetryPayload(InputKind.CONFIG, data), engine, options)
        as_database = anonymize_payload(TelemetryPayload(InputKind.DATABASE, data), engine, options)
        assert as_config.data["name"] == as_database.data["name"] != "web-server-01"
