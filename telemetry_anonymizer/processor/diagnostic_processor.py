import traceback
from collections.abc import Mapping
from typing import Any, ClassVar

from telemetry_anonymizer.anonymization.engine import AnonymizationEngine
from telemetry_anonymizer.anonymization.models import AnonymizationOptions
from telemetry_anonymizer.processor.base import BaseDataProcessor
from telemetry_anonymizer.processor.log_processor import LogRecordProcessor
from telemetry_anonymizer.processor.models import InputKind


class ErrorProcessor(BaseDataProcessor):
    """Anonymizes exceptions and error-like mappings.

    An exception becomes ``{name, message, stack}`` with the message and
    formatted traceback anonymized. A mapping has every string leaf
    anonymized.
    """

    kind: ClassVar[InputKind] = InputKind.ERROR

    def _process(
        self,
        data: Any,
        options: AnonymizationOptions,
        rules_applied: list[str],
    ) -> Any:
        return self.process_error(data, options, rules_applied)

    def process_error(
        self,
        error: Any,
        options: AnonymizationOptions,
        rules_applied: list[str],
    ) -> Any:
        """Anonymize one exception or error mapping, merging into *rules_applied*."""
        if isinstance(error, BaseException):
            return self._process_exception(error, options, rules_applied)
        return self._anonymize(error, options, rules_applied)

    def _process_exception(
        self,
        exc: BaseException,
        options: AnonymizationOptions,
        rules_applied: list[str],
    ) -> dict[str, Any]:
        stack = None
        if exc.__traceback__ is not None:
            stack = self._anonymize(
                "".join(traceback.format_exception(exc)), options, rules_applied
            )
        return {
            "name": type(exc).__name__,
            "message": self._anonymize(str(exc), options, rules_applied),
            "stack": stack,
        }


class DiagnosticSnapshotProcessor(BaseDataProcessor):
    """Anonymizes diagnostic snapshots bundling logs, metrics and system info.

    Snapshot shape::

        {id, timestamp, workspace?, operation?, error?, logs: [...],
         metrics: [...], healthStatus: [...], systemInfo: {...},
         workspaceInfo?: {path, config?, ...}}

    ``metrics``, ``healthStatus`` and ``systemInfo`` carry no identifying
    values and pass through.
    """

    kind: ClassVar[InputKind] = InputKind.DIAGNOSTIC

    def __init__(self, engine: AnonymizationEngine) -> None:
        super().__init__(engine)
        self._logs = LogRecordProcessor(engine)
        self._errors = ErrorProcessor(engine)

    def _process(
        self,
        data: Any,
        options: AnonymizationOptions,
        rules_applied: list[str],
    ) -> Any:
        if not isinstance(data, Mapping):
            return self._errors.process_error(data, options, rules_applied)

        snapshot = dict(data)
        if isinstance(data.get("workspace"), str):
            snapshot["workspace"] = self._anonymize(data["workspace"], options, rules_applied)
        if data.get("error") is not None:
            snapshot["error"] = self._errors.process_error(
                data["error"], options, rules_applied
            )
        if isinstance(data.get("logs"), list):
            snapshot["logs"] = self._logs.process_records(data["logs"], options, rules_applied)
        if isinstance(data.get("workspaceInfo"), Mapping):
            snapshot["workspaceInfo"] = self._process_workspace_info(
                data["workspaceInfo"], options, rules_applied
            )
        return snapshot

    def _process_workspace_info(
        self,
        info: Mapping[str, Any],
        options: AnonymizationOptions,
        rules_applied: list[str],
    ) -> dict[str, Any]:
        anonymized = dict(info)
        for field in ("path", "error"):
            if isinstance(info.get(field), str):
                anonymized[field] = self._anonymize(info[field], options, rules_applied)
        if info.get("config") is not None:
            anonymized["config"] = self._anonymize(info["config"], options, rules_applied)
        return anonymized
