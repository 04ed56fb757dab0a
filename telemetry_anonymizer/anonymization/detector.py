"""Read-only PII presence scan over serialized input."""

import json
from collections.abc import Mapping, Sequence
from typing import Any

from telemetry_anonymizer.anonymization.models import (
    AnonymizationRule,
    PIIDetectionResult,
    PIILocation,
    RuleType,
)

CIRCULAR_MARKER = "[Circular Reference]"
MAX_DEPTH_MARKER = "[Max Depth Exceeded]"
DEFAULT_MAX_DEPTH = 100

_CONFIDENCE_PER_MATCH = 0.5


class PIIDetector:
    """Reports which rules match serialized input and where.

    Never allocates pseudonyms; the result does not depend on any
    anonymization option.
    """

    def __init__(
        self,
        rules: Sequence[AnonymizationRule],
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        self._rules = tuple(rules)
        self._max_depth = max_depth

    def detect(self, data: Any) -> PIIDetectionResult:
        text = data if isinstance(data, str) else serialize(data, self._max_depth)
        detected_types: list[RuleType] = []
        locations: list[PIILocation] = []

        for rule in self._rules:
            for match in rule.pattern.finditer(text):
                if rule.type not in detected_types:
                    detected_types.append(rule.type)
                locations.append(
                    PIILocation(
                        type=rule.type,
                        path="root",
                        value=match.group(0),
                        start_index=match.start(),
                        end_index=match.end(),
                    )
                )

        return PIIDetectionResult(
            has_pii=bool(detected_types),
            detected_types=detected_types,
            confidence=min(1.0, len(locations) * _CONFIDENCE_PER_MATCH),
            locations=locations,
        )


def serialize(data: Any, max_depth: int = DEFAULT_MAX_DEPTH) -> str:
    """Canonical JSON text for arbitrary plain data.

    Cycles and containers nested *max_depth* levels deep are replaced by
    markers, so any plain input serializes without recursion errors.
    """
    return json.dumps(
        _canonical(data, set(), 0, max_depth),
        sort_keys=True,
        ensure_ascii=False,
        default=str,
    )


def _canonical(value: Any, ancestors: set[int], depth: int, max_depth: int) -> Any:
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if not isinstance(value, (Mapping, list, tuple, set, frozenset)):
        return str(value)
    if id(value) in ancestors:
        return CIRCULAR_MARKER
    if depth >= max_depth:
        return MAX_DEPTH_MARKER
    ancestors.add(id(value))
    try:
        if isinstance(value, Mapping):
            return {
                str(k): _canonical(v, ancestors, depth + 1, max_depth)
                for k, v in value.items()
            }
        items = [_canonical(item, ancestors, depth + 1, max_depth) for item in value]
        if isinstance(value, (set, frozenset)):
            items.sort(key=str)
        return items
    finally:
        ancestors.discard(id(value))
