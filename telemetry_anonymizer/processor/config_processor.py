from collections.abc import Mapping
from typing import Any, ClassVar

from telemetry_anonymizer.anonymization.detector import CIRCULAR_MARKER
from telemetry_anonymizer.anonymization.engine import REDACTED
from telemetry_anonymizer.anonymization.models import AnonymizationOptions, RuleType
from telemetry_anonymizer.processor.base import BaseDataProcessor
from telemetry_anonymizer.processor.models import InputKind


class ConfigProcessor(BaseDataProcessor):
    """Anonymizes nested configuration objects.

    String values under credential-like keys are always redacted, whether
    or not they match any pattern; every other string goes through the
    engine. Keys themselves are kept.
    """

    kind: ClassVar[InputKind] = InputKind.CONFIG

    CREDENTIAL_KEY_PARTS: ClassVar[tuple[str, ...]] = (
        "password",
        "pwd",
        "pass",
        "secret",
        "token",
        "key",
        "apikey",
        "api_key",
        "tokensecret",
        "tokenid",
        "privatekey",
        "publickey",
        "cert",
        "certificate",
    )

    def _process(
        self,
        data: Any,
        options: AnonymizationOptions,
        rules_applied: list[str],
    ) -> Any:
        return self._walk(data, options, rules_applied, set())

    @classmethod
    def is_credential_key(cls, key: str) -> bool:
        lowered = key.lower()
        return any(part in lowered for part in cls.CREDENTIAL_KEY_PARTS)

    def _walk(
        self,
        value: Any,
        options: AnonymizationOptions,
        rules_applied: list[str],
        ancestors: set[int],
    ) -> Any:
        if isinstance(value, str):
            return self._anonymize(value, options, rules_applied)
        if not isinstance(value, (Mapping, list)):
            return value
        if id(value) in ancestors:
            return CIRCULAR_MARKER

        ancestors.add(id(value))
        try:
            if isinstance(value, list):
                return [self._walk(item, options, rules_applied, ancestors) for item in value]
            result: dict[Any, Any] = {}
            for key, item in value.items():
                if isinstance(item, str) and isinstance(key, str) and self.is_credential_key(key):
                    result[key] = REDACTED
                    self._merge_rules(
                        rules_applied, [str(RuleType.PASSWORD), str(RuleType.TOKEN)]
                    )
                else:
                    result[key] = self._walk(item, options, rules_applied, ancestors)
            return result
        finally:
            ancestors.discard(id(value))
