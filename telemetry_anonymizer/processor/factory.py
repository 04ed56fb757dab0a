from typing import ClassVar

from telemetry_anonymizer.anonymization.engine import AnonymizationEngine
from telemetry_anonymizer.anonymization.factory import get_default_engine
from telemetry_anonymizer.processor.base import BaseDataProcessor
from telemetry_anonymizer.processor.config_processor import ConfigProcessor
from telemetry_anonymizer.processor.database_processor import DatabaseRecordProcessor
from telemetry_anonymizer.processor.diagnostic_processor import (
    DiagnosticSnapshotProcessor,
    ErrorProcessor,
)
from telemetry_anonymizer.processor.exceptions import UnknownInputKindError
from telemetry_anonymizer.processor.log_processor import LogRecordProcessor
from telemetry_anonymizer.processor.models import InputKind


class ProcessorFactory:
    """Creates the processor registered for an input kind."""

    PROCESSORS: ClassVar[dict[InputKind, type[BaseDataProcessor]]] = {
        InputKind.LOG: LogRecordProcessor,
        InputKind.CONFIG: ConfigProcessor,
        InputKind.DATABASE: DatabaseRecordProcessor,
        InputKind.ERROR: ErrorProcessor,
        InputKind.DIAGNOSTIC: DiagnosticSnapshotProcessor,
    }

    @classmethod
    def create(
        cls,
        kind: InputKind | str,
        engine: AnonymizationEngine | None = None,
    ) -> BaseDataProcessor:
        """Create a processor for *kind* bound to *engine* (default: shared engine)."""
        try:
            input_kind = InputKind(kind)
        except ValueError:
            supported = sorted(str(k) for k in cls.PROCESSORS)
            raise UnknownInputKindError(
                f"Unknown input kind '{kind}'. Choose from: {supported}"
            ) from None
        return cls.PROCESSORS[input_kind](engine or get_default_engine())
