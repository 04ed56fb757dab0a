"""Default rule catalog for infrastructure telemetry.

Rules are listed in catalog order; the engine applies them by descending
priority, so a specific rule (e-mail) claims its text before a broader one
(hostname, token) can.
"""

import re
from collections.abc import Iterable

from telemetry_anonymizer.anonymization.models import (
    AnonymizationRule,
    ReplacementStrategy,
    RuleType,
)

_OCTET = r"(?:25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)"

DEFAULT_RULES: tuple[AnonymizationRule, ...] = (
    AnonymizationRule(
        type=RuleType.EMAIL,
        pattern=re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b"),
        replacement=ReplacementStrategy.PSEUDONYM,
        category="personal_data",
        priority=100,
        preserve_format=True,
    ),
    AnonymizationRule(
        type=RuleType.IP_ADDRESS,
        pattern=re.compile(rf"\b(?:{_OCTET}\.){{3}}{_OCTET}\b"),
        replacement=ReplacementStrategy.PSEUDONYM,
        category="network_data",
        priority=90,
        preserve_format=True,
    ),
    # Fully qualified host and domain names
    AnonymizationRule(
        type=RuleType.HOSTNAME,
        pattern=re.compile(
            r"\b(?:[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?\.)+[a-zA-Z]{2,}\b"
        ),
        replacement=ReplacementStrategy.PSEUDONYM,
        category="network_data",
        priority=85,
        preserve_format=True,
    ),
    # Bare server/VM names such as "pve-node-01"
    AnonymizationRule(
        type=RuleType.HOSTNAME,
        pattern=re.compile(
            r"\b[a-zA-Z0-9][a-zA-Z0-9-]*(?:server|node|vm|host|proxmox|pve)[a-zA-Z0-9-]*\b",
            re.IGNORECASE,
        ),
        replacement=ReplacementStrategy.PSEUDONYM,
        category="infrastructure_data",
        priority=80,
        preserve_format=True,
    ),
    AnonymizationRule(
        type=RuleType.UUID,
        pattern=re.compile(
            r"\b[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}\b",
            re.IGNORECASE,
        ),
        replacement=ReplacementStrategy.PSEUDONYM,
        category="system_data",
        priority=75,
        preserve_format=True,
    ),
    AnonymizationRule(
        type=RuleType.PASSWORD,
        pattern=re.compile(
            r"(?:password|pwd|pass|secret|token|key)\s*[:=]\s*[^\s,;}]+",
            re.IGNORECASE,
        ),
        replacement=ReplacementStrategy.REDACT,
        category="credentials",
        priority=95,
    ),
    AnonymizationRule(
        type=RuleType.TOKEN,
        pattern=re.compile(r"\b[A-Za-z0-9]{20,}\b"),
        replacement=ReplacementStrategy.REDACT,
        category="credentials",
        priority=70,
    ),
    AnonymizationRule(
        type=RuleType.USERNAME,
        pattern=re.compile(
            r"\b(?:user|username|login|admin|root|operator)[@:=\s]+[a-zA-Z0-9._-]+",
            re.IGNORECASE,
        ),
        replacement=ReplacementStrategy.PSEUDONYM,
        category="personal_data",
        priority=65,
        preserve_format=True,
    ),
    # Home directories leak the account name
    AnonymizationRule(
        type=RuleType.PATH,
        pattern=re.compile(r"/(?:home|[Uu]sers|usr)/[a-zA-Z0-9._-]+(?:/\S*)?"),
        replacement=ReplacementStrategy.PSEUDONYM,
        category="filesystem_data",
        priority=60,
        preserve_format=True,
    ),
    # MAC addresses
    AnonymizationRule(
        type=RuleType.CUSTOM_PATTERN,
        pattern=re.compile(r"\b[0-9a-fA-F]{2}(?::[0-9a-fA-F]{2}){5}\b"),
        replacement=ReplacementStrategy.PSEUDONYM,
        category="network_data",
        priority=55,
        preserve_format=True,
    ),
)


def get_rules_by_category(category: str) -> list[AnonymizationRule]:
    return [rule for rule in DEFAULT_RULES if rule.category == category]


def get_rules_by_type(rule_type: str) -> list[AnonymizationRule]:
    return [rule for rule in DEFAULT_RULES if rule.type == rule_type]


def get_high_priority_rules(min_priority: int = 80) -> list[AnonymizationRule]:
    return [rule for rule in DEFAULT_RULES if rule.priority >= min_priority]


def sort_rules(rules: Iterable[AnonymizationRule]) -> list[AnonymizationRule]:
    """Order rules by descending priority; ties keep their given order."""
    return sorted(rules, key=lambda rule: -rule.priority)
