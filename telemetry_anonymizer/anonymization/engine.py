"""Rule-driven anonymization of arbitrary plain data.

Processing flow for :meth:`AnonymizationEngine.anonymize`:
1. Select the active rules (enabled subset + custom rules) by priority.
2. Short-circuit when the processing budget is too small to be useful.
3. Walk the input recursively; every string leaf (and every sensitive
   looking dict key) goes through rule substitution.
4. Summarize rules applied, pseudonyms created and elapsed time.
5. Fold the call into the running statistics.

Any failure returns the original input with ``is_anonymized=False``.
"""

import hashlib
import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, ClassVar, TypeVar

from telemetry_anonymizer.anonymization.detector import (
    CIRCULAR_MARKER,
    MAX_DEPTH_MARKER,
    PIIDetector,
)
from telemetry_anonymizer.anonymization.exceptions import (
    AnonymizationError,
    AnonymizationInputError,
    ProcessingDeadlineExceeded,
    TraversalError,
)
from telemetry_anonymizer.anonymization.models import (
    AnonymizationEngineStats,
    AnonymizationMetadata,
    AnonymizationOptions,
    AnonymizationRule,
    AnonymizedData,
    PIIDetectionResult,
    PseudonymMapping,
    ReplacementStrategy,
)
from telemetry_anonymizer.anonymization.pseudonyms import PseudonymStore
from telemetry_anonymizer.anonymization.rules import DEFAULT_RULES, sort_rules
from telemetry_anonymizer.anonymization.stats import StatisticsRecorder
from telemetry_anonymizer.config.settings import Settings
from telemetry_anonymizer.logging.logger import Log

T = TypeVar("T")

REDACTED = "[REDACTED]"

SENSITIVE_KEY_PARTS: tuple[str, ...] = (
    "password",
    "token",
    "secret",
    "key",
    "username",
    "email",
    "hostname",
    "ip",
    "host",
    "server",
)


def should_anonymize_key(key: str) -> bool:
    """True if a dict key itself looks sensitive enough to rewrite."""
    lowered = key.lower()
    return any(part in lowered for part in SENSITIVE_KEY_PARTS)


def hash_value(value: str, salt: str | None = None) -> str:
    """Salted, truncated SHA-256 digest. Stable per (value, salt)."""
    digest = hashlib.sha256(f"{value}{salt or ''}".encode("utf-8")).hexdigest()
    return digest[:16]


def _elapsed_ms(started: float) -> int:
    return max(1, int((time.perf_counter() - started) * 1000))


def _free_key(key: Any, taken: Mapping[Any, Any]) -> Any:
    """*key*, or ``key#2``, ``key#3``... if rewritten keys collide."""
    if key not in taken:
        return key
    suffix = 2
    while f"{key}#{suffix}" in taken:
        suffix += 1
    return f"{key}#{suffix}"


def _cuts_into(start: int, end: int, claimed: list[tuple[int, int]]) -> bool:
    """True if [start, end) overlaps a claimed span without enclosing it."""
    return any(
        s < end and start < e and not (start <= s and e <= end) for s, e in claimed
    )


@dataclass
class _Traversal:
    """Per-call walk state. Holds no ownership over visited nodes."""

    rules: list[AnonymizationRule]
    options: AnonymizationOptions
    deadline: float | None
    rules_applied: list[str] = field(default_factory=list)
    ancestors: set[int] = field(default_factory=set)


class AnonymizationEngine:
    """Recursive, cycle-safe anonymizer backed by a pseudonym store.

    The store and the statistics recorder are injected so callers own
    their lifetime; use :func:`~telemetry_anonymizer.anonymization.factory.get_default_engine`
    for a shared per-process instance.
    """

    _CONTAINER_TYPES: ClassVar[tuple[type, ...]] = (
        Mapping,
        list,
        tuple,
        set,
        frozenset,
    )

    def __init__(
        self,
        store: PseudonymStore | None = None,
        stats: StatisticsRecorder | None = None,
        rules: Sequence[AnonymizationRule] | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._settings = settings or Settings()
        self._store = store if store is not None else PseudonymStore()
        self._stats = stats if stats is not None else StatisticsRecorder(self._store)
        self._rules: tuple[AnonymizationRule, ...] = (
            tuple(rules) if rules is not None else DEFAULT_RULES
        )
        self._detector = PIIDetector(self._rules, self._settings.max_depth)
        self._default_options = AnonymizationOptions.from_settings(self._settings)

    @property
    def store(self) -> PseudonymStore:
        return self._store

    @property
    def rules(self) -> tuple[AnonymizationRule, ...]:
        return self._rules

    @property
    def default_options(self) -> AnonymizationOptions:
        return self._default_options

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def detect_pii(self, data: Any) -> PIIDetectionResult:
        """Report which catalog rules match *data*. Allocates no pseudonyms."""
        return self._detector.detect(data)

    def anonymize(
        self,
        data: T,
        options: AnonymizationOptions | None = None,
    ) -> AnonymizedData[T]:
        """Return an anonymized copy of *data*. Never raises.

        Args:
            data: Any plain value: str, dict, list, tuple, set, scalars.
            options: Per-call options; defaults come from settings.

        Returns:
            AnonymizedData with the transformed value and call metadata.
            On failure or timeout the original value is returned with
            ``is_anonymized=False``.
        """
        options = options or self._default_options
        started = time.perf_counter()
        mappings_before = self._store.total_mappings

        if self._should_short_circuit(options):
            return self._short_circuit(data, options)

        try:
            traversal = self._start_traversal(options, started)
            anonymized = self._run(data, traversal)
        except ProcessingDeadlineExceeded:
            elapsed = _elapsed_ms(started)
            Log.warning(
                f"Anonymization exceeded {options.max_processing_time} ms budget, "
                f"returning original {type(data).__name__}"
            )
            self._stats.update(elapsed, [], has_error=False)
            return self._unmodified(data, options, elapsed)
        except AnonymizationError as exc:
            elapsed = _elapsed_ms(started)
            Log.error(
                f"Anonymization failed ({type(exc).__name__}), "
                f"returning original {type(data).__name__}"
            )
            self._stats.update(elapsed, [], has_error=True)
            return self._unmodified(data, options, elapsed)

        elapsed = _elapsed_ms(started)
        pseudonyms_used = max(0, self._store.total_mappings - mappings_before)
        self._stats.update(elapsed, traversal.rules_applied, has_error=False)
        Log.debug(
            f"Anonymized {type(data).__name__}: rules={traversal.rules_applied}, "
            f"new pseudonyms={pseudonyms_used}, {elapsed} ms"
        )
        return AnonymizedData(
            data=anonymized,
            metadata=AnonymizationMetadata(
                rules_applied=list(traversal.rules_applied),
                pseudonyms_used=pseudonyms_used,
                processing_time_ms=elapsed,
                is_anonymized=bool(traversal.rules_applied),
                preserved_structure=options.preserve_structure,
            ),
        )

    def active_rules(self, options: AnonymizationOptions) -> list[AnonymizationRule]:
        """Enabled catalog rules plus custom rules, highest priority first."""
        rules = list(self._rules)
        if options.enabled_rules is not None:
            enabled = {str(rule_type) for rule_type in options.enabled_rules}
            rules = [rule for rule in rules if rule.type in enabled]
        rules.extend(options.custom_rules)
        return sort_rules(rules)

    def get_stats(self) -> AnonymizationEngineStats:
        return self._stats.snapshot()

    def reset_stats(self) -> None:
        self._stats.reset()

    def clear_mappings(self) -> None:
        self._store.clear_mappings()
        self._stats.mark_mappings_cleared()

    def reset(self) -> None:
        """Drop all mappings and statistics.

        Intended for test isolation: pseudonyms issued before the reset
        are no longer guaranteed to be reused.
        """
        self.clear_mappings()
        self.reset_stats()

    def export_mappings(self) -> list[PseudonymMapping]:
        return self._store.export_mappings()

    def import_mappings(self, mappings: Sequence[PseudonymMapping]) -> int:
        return self._store.import_mappings(mappings)

    # ------------------------------------------------------------------
    # Call setup and outcomes
    # ------------------------------------------------------------------

    def _should_short_circuit(self, options: AnonymizationOptions) -> bool:
        return (
            options.max_processing_time is not None
            and options.max_processing_time <= self._settings.short_circuit_threshold_ms
        )

    def _short_circuit(self, data: T, options: AnonymizationOptions) -> AnonymizedData[T]:
        # Budget too small to walk anything; note the obvious e-mail hint only
        rules_applied = ["email"] if isinstance(data, str) and "@" in data else []
        self._stats.update(1, rules_applied, has_error=False)
        Log.debug(f"Skipped anonymization: {options.max_processing_time} ms budget")
        return AnonymizedData(
            data=data,
            metadata=AnonymizationMetadata(
                rules_applied=rules_applied,
                pseudonyms_used=0,
                processing_time_ms=1,
                is_anonymized=False,
                preserved_structure=options.preserve_structure,
            ),
        )

    def _start_traversal(
        self,
        options: AnonymizationOptions,
        started: float,
    ) -> _Traversal:
        try:
            rules = self.active_rules(options)
        except Exception as exc:
            raise AnonymizationInputError(
                f"Invalid rule set: {type(exc).__name__}"
            ) from exc

        deadline = None
        if options.max_processing_time is not None:
            deadline = started + options.max_processing_time / 1000
        return _Traversal(
            rules=rules,
            options=options,
            deadline=deadline,
        )

    @staticmethod
    def _unmodified(
        data: T,
        options: AnonymizationOptions,
        elapsed: int,
    ) -> AnonymizedData[T]:
        return AnonymizedData(
            data=data,
            metadata=AnonymizationMetadata(
                rules_applied=[],
                pseudonyms_used=0,
                processing_time_ms=elapsed,
                is_anonymized=False,
                preserved_structure=options.preserve_structure,
            ),
        )

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    def _run(self, data: Any, traversal: _Traversal) -> Any:
        try:
            return self._walk(data, traversal, depth=0)
        except AnonymizationError:
            raise
        except Exception as exc:
            raise TraversalError(f"Traversal failed: {type(exc).__name__}") from exc

    def _walk(self, value: Any, traversal: _Traversal, depth: int) -> Any:
        if traversal.deadline is not None and time.perf_counter() > traversal.deadline:
            raise ProcessingDeadlineExceeded("Processing budget exhausted")

        if value is None:
            return None
        if isinstance(value, str):
            return self._anonymize_string(value, traversal)
        if not isinstance(value, self._CONTAINER_TYPES):
            return value

        # Only containers on the current path count, so shared subtrees
        # are walked at every occurrence and only true cycles are cut.
        if id(value) in traversal.ancestors:
            return CIRCULAR_MARKER
        if depth >= self._settings.max_depth:
            return MAX_DEPTH_MARKER

        traversal.ancestors.add(id(value))
        try:
            if isinstance(value, Mapping):
                return self._walk_mapping(value, traversal, depth)
            items = [self._walk(item, traversal, depth + 1) for item in value]
            if isinstance(value, tuple) and hasattr(value, "_fields"):
                return type(value)(*items)
            return type(value)(items)
        finally:
            traversal.ancestors.discard(id(value))

    def _walk_mapping(
        self,
        mapping: Mapping[Any, Any],
        traversal: _Traversal,
        depth: int,
    ) -> dict[Any, Any]:
        result: dict[Any, Any] = {}
        for key, value in mapping.items():
            if isinstance(key, str) and should_anonymize_key(key):
                key = self._anonymize_string(key, traversal)
            result[_free_key(key, result)] = self._walk(value, traversal, depth + 1)
        return result

    # ------------------------------------------------------------------
    # String substitution
    # ------------------------------------------------------------------

    def _anonymize_string(self, text: str, traversal: _Traversal) -> str:
        """Apply every active rule to *text* in priority order.

        A lower priority match that cuts into an earlier replacement is
        skipped, so one original keeps one substitute; a match enclosing
        earlier replacements whole is replaced whole. Matches are replaced
        right to left so pending offsets stay valid.
        """
        result = text
        claimed: list[tuple[int, int]] = []

        for rule in traversal.rules:
            matches = [
                match
                for match in rule.pattern.finditer(result)
                if not _cuts_into(match.start(), match.end(), claimed)
            ]
            if not matches:
                continue
            if rule.type not in traversal.rules_applied:
                traversal.rules_applied.append(str(rule.type))

            for match in reversed(matches):
                start, end = match.span()
                replacement = self._replacement(match.group(0), rule, traversal.options)
                result = result[:start] + replacement + result[end:]
                shift = len(replacement) - (end - start)
                claimed = [
                    (s + shift, e + shift) if s >= end else (s, e)
                    for s, e in claimed
                    if not (start <= s and e <= end)
                ]
                claimed.append((start, start + len(replacement)))

        return result

    def _replacement(
        self,
        value: str,
        rule: AnonymizationRule,
        options: AnonymizationOptions,
    ) -> str:
        if rule.replacement is ReplacementStrategy.PSEUDONYM:
            if options.enable_pseudonyms:
                return self._store.get_pseudonym(value, rule.type, rule.category)
            return REDACTED
        if rule.replacement is ReplacementStrategy.REDACT:
            return REDACTED
        if rule.replacement is ReplacementStrategy.HASH:
            return hash_value(value, options.hash_salt)
        return f"[{rule.type.upper()}]"
