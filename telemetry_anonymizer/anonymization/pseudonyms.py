"""Deterministic, format-plausible pseudonym generation and storage.

A pseudonym is derived only from the SHA-256 digest of the original value,
so the same value yields the same substitute regardless of call order or
per-call salt. The store remembers every mapping in both directions.
"""

import hashlib
import threading
from collections.abc import Iterable
from typing import ClassVar

from telemetry_anonymizer.anonymization.exceptions import EmptyValueError
from telemetry_anonymizer.anonymization.models import (
    PseudonymMapping,
    PseudonymStoreStats,
    RuleType,
)


def _sha256_hex(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def _byte(digest: str, offset: int) -> int:
    """Integer value of the hex byte starting at *offset*."""
    return int(digest[offset : offset + 2], 16)


class PseudonymStore:
    """Bidirectional original <-> pseudonym store.

    Safe to share between threads: the lookup-or-create sequence in
    :meth:`get_pseudonym` runs under a lock so one original never ends up
    with two pseudonyms.
    """

    EMAIL_DOMAINS: ClassVar[tuple[str, ...]] = (
        "company.local",
        "example.org",
        "test.com",
        "internal.net",
    )
    HOSTNAME_PREFIXES: ClassVar[tuple[str, ...]] = (
        "srv",
        "host",
        "node",
        "server",
        "vm",
        "app",
    )
    USERNAME_PREFIXES: ClassVar[tuple[str, ...]] = (
        "user",
        "admin",
        "operator",
        "service",
    )

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._by_original: dict[str, PseudonymMapping] = {}
        self._by_pseudonym: dict[str, PseudonymMapping] = {}

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def get_pseudonym(self, original: str, rule_type: str, category: str) -> str:
        """Return the stable pseudonym for *original*, creating it if needed.

        Raises:
            EmptyValueError: if *original* is empty or whitespace only.
        """
        if not original or not original.strip():
            raise EmptyValueError("Original value cannot be empty")

        with self._lock:
            existing = self._by_original.get(original)
            if existing is not None:
                return existing.pseudonym

            pseudonym = self._generate(original, rule_type)
            mapping = PseudonymMapping(
                original_value=original,
                pseudonym=pseudonym,
                type=str(rule_type),
                category=category,
            )
            self._by_original[original] = mapping
            self._by_pseudonym[pseudonym] = mapping
            return pseudonym

    def get_mapping(self, original: str) -> PseudonymMapping | None:
        with self._lock:
            return self._by_original.get(original)

    def get_mapping_by_pseudonym(self, pseudonym: str) -> PseudonymMapping | None:
        with self._lock:
            return self._by_pseudonym.get(pseudonym)

    def get_all_mappings(self) -> list[PseudonymMapping]:
        with self._lock:
            return list(self._by_original.values())

    def export_mappings(self) -> list[PseudonymMapping]:
        return self.get_all_mappings()

    def import_mappings(self, mappings: Iterable[PseudonymMapping]) -> int:
        """Merge *mappings* into the store; existing originals win.

        Returns:
            Number of mappings actually added.
        """
        added = 0
        with self._lock:
            for mapping in mappings:
                if mapping.original_value in self._by_original:
                    continue
                self._by_original[mapping.original_value] = mapping
                self._by_pseudonym[mapping.pseudonym] = mapping
                added += 1
        return added

    def clear_mappings(self) -> None:
        with self._lock:
            self._by_original.clear()
            self._by_pseudonym.clear()

    def get_stats(self) -> PseudonymStoreStats:
        by_type: dict[str, int] = {}
        by_category: dict[str, int] = {}
        with self._lock:
            mappings = list(self._by_original.values())
        for mapping in mappings:
            by_type[mapping.type] = by_type.get(mapping.type, 0) + 1
            by_category[mapping.category] = by_category.get(mapping.category, 0) + 1
        return PseudonymStoreStats(
            total_mappings=len(mappings),
            mappings_by_type=by_type,
            mappings_by_category=by_category,
        )

    @property
    def total_mappings(self) -> int:
        with self._lock:
            return len(self._by_original)

    def __len__(self) -> int:
        return self.total_mappings

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def _generate(self, original: str, rule_type: str) -> str:
        digest = _sha256_hex(original)
        if rule_type == RuleType.EMAIL:
            pseudonym = self._email(digest)
        elif rule_type == RuleType.IP_ADDRESS:
            pseudonym = self._ip_address(digest)
        elif rule_type == RuleType.HOSTNAME:
            pseudonym = self._prefixed(digest, self.HOSTNAME_PREFIXES, separator="-")
        elif rule_type == RuleType.USERNAME:
            pseudonym = self._prefixed(digest, self.USERNAME_PREFIXES, separator="")
        elif rule_type == RuleType.UUID:
            pseudonym = self._uuid(digest)
        elif rule_type == RuleType.PATH:
            pseudonym = self._path(original)
        else:
            pseudonym = self._generic(digest)

        if pseudonym == original:
            return self._generic(digest)
        return pseudonym

    def _email(self, digest: str) -> str:
        domain = self.EMAIL_DOMAINS[_byte(digest, 8) % len(self.EMAIL_DOMAINS)]
        return f"user{digest[:8]}@{domain}"

    @staticmethod
    def _ip_address(digest: str) -> str:
        # Private ranges only: 10/8, 192.168/16, 172.16/12
        choice = _byte(digest, 0) % 3
        if choice == 0:
            return (
                f"10.{_byte(digest, 2)}.{_byte(digest, 4)}."
                f"{_byte(digest, 6) % 254 + 1}"
            )
        if choice == 1:
            return (
                f"192.168.{_byte(digest, 2) % 254 + 1}."
                f"{_byte(digest, 4) % 254 + 1}"
            )
        return (
            f"172.{16 + _byte(digest, 2) % 16}.{_byte(digest, 4)}."
            f"{_byte(digest, 6) % 254 + 1}"
        )

    @staticmethod
    def _prefixed(digest: str, prefixes: tuple[str, ...], separator: str) -> str:
        prefix = prefixes[_byte(digest, 0) % len(prefixes)]
        return f"{prefix}{separator}{digest[2:8]}"

    @staticmethod
    def _uuid(digest: str) -> str:
        variant = format((int(digest[16], 16) & 0x3) | 0x8, "x")
        return "-".join(
            (
                digest[0:8],
                digest[8:12],
                "4" + digest[13:16],
                variant + digest[17:20],
                digest[20:32],
            )
        )

    @staticmethod
    def _path(original: str) -> str:
        segments = []
        for index, segment in enumerate(original.split("/")):
            if segment in ("", ".", ".."):
                segments.append(segment)
                continue
            # Position-seeded, so equal names at different depths may differ
            segment_digest = _sha256_hex(f"{segment}{index}")
            if "." in segment:
                extension = segment.split(".", 1)[1]
                segments.append(f"file{segment_digest[:8]}.{extension}")
            else:
                segments.append(f"dir{segment_digest[:8]}")
        return "/".join(segments)

    @staticmethod
    def _generic(digest: str) -> str:
        return f"anon-{digest[:12]}"
