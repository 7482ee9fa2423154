"""Record models for InspectCode reports and their SonarQube-shaped counterparts."""

from __future__ import annotations

import re
from dataclasses import dataclass
from urllib.parse import urlparse

from inspectsonar.core.enums import (
    InspectCodeSeverity,
    RuleDescriptionSyntax,
    RuleStatus,
    SonarRuleType,
    SonarSeverity,
)

UNSET = -1

_OFFSET_RANGE = re.compile(r"(\d+)-(\d+)", re.ASCII)


def _require_key(value: str, field_name: str) -> str:
    key = (value or "").strip()
    if not key:
        raise ValueError(f"{field_name} must not be empty")
    return key


@dataclass(slots=True, eq=False)
class IssueTypeDefinition:
    """Metadata of one InspectCode issue type (``IssueType`` element).

    Identity is the trimmed issue type id only.
    """

    key: str
    category: str | None = None
    category_id: str | None = None
    sub_category: str | None = None
    description: str | None = None
    severity: InspectCodeSeverity = InspectCodeSeverity.WARNING
    is_global: bool = False
    wiki_url: str | None = None

    def __post_init__(self) -> None:
        self.key = _require_key(self.key, "key")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, IssueTypeDefinition):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def set_severity(self, value: str | None) -> None:
        self.severity = InspectCodeSeverity.parse(value)

    def set_global(self, value: str | None) -> None:
        self.is_global = (value or "").strip().lower() == "true"

    def set_wiki_url(self, value: str | None) -> None:
        """Store ``value`` if it is an absolute URL; blank resets, invalid is ignored."""
        candidate = (value or "").strip()
        if not candidate:
            self.wiki_url = None
            return
        try:
            parsed = urlparse(candidate)
        except ValueError:
            return
        if parsed.scheme and (parsed.netloc or parsed.path):
            self.wiki_url = candidate


@dataclass(slots=True)
class IssueOccurrence:
    """One finding of an issue type located in a source file (``Issue`` element).

    Equality covers every attribute, since many occurrences share one type id.
    """

    type_id: str | None = None
    file: str | None = None
    message: str | None = None
    line: int = UNSET
    offset_start: int = UNSET
    offset_end: int = UNSET

    def set_type_id(self, value: str | None) -> None:
        self.type_id = (value or "").replace(",", "_").strip()

    def set_line(self, value: str | None) -> None:
        """Parse a base-10 line number. Raises ``ValueError`` and keeps the old value on failure."""
        self.line = int((value or "").strip(), 10)

    def set_offset(self, value: str | None) -> None:
        """Parse a ``"<start>-<end>"`` range into both offsets at once.

        Raises ``ValueError`` on malformed input without touching either offset.
        """
        token = (value or "").strip()
        if not token:
            raise ValueError("offset range must not be empty")
        match = _OFFSET_RANGE.fullmatch(token)
        if match is None:
            raise ValueError(f"offset range {token!r} is not of the form '<start>-<end>'")
        self.offset_start = int(match.group(1), 10)
        self.offset_end = int(match.group(2), 10)


@dataclass(slots=True, eq=False)
class RuleDefinition:
    """SonarQube rule derived from an issue type definition.

    Only the merge engine changes ``rule_type`` and ``severity`` after conversion.
    """

    key: str
    name: str = ""
    rule_type: SonarRuleType = SonarRuleType.CODE_SMELL
    severity: SonarSeverity = SonarSeverity.MAJOR
    status: RuleStatus = RuleStatus.READY
    activated_by_default: bool = False
    category_id: str | None = None
    description: str = ""
    description_syntax: RuleDescriptionSyntax = RuleDescriptionSyntax.HTML

    def __post_init__(self) -> None:
        self.key = _require_key(self.key, "key")
        self.name = (self.name or "").strip()

    def __setattr__(self, name: str, value: object) -> None:
        if name == "status" and value == RuleStatus.REMOVED:
            raise ValueError(f"rule status {RuleStatus.REMOVED} is not supported")
        object.__setattr__(self, name, value)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RuleDefinition):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def set_description(self, text: str | None, syntax: RuleDescriptionSyntax) -> None:
        self.description = (text or "").strip()
        self.description_syntax = syntax


@dataclass(slots=True, kw_only=True, eq=False)
class _OverrideBase:
    key: str
    rule_type: SonarRuleType = SonarRuleType.CODE_SMELL
    severity: SonarSeverity = SonarSeverity.MAJOR

    def __post_init__(self) -> None:
        self.key = _require_key(self.key, "key")

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.key))

    def set_rule_type(self, value: str | None) -> None:
        self.rule_type = SonarRuleType.parse(value)

    def set_severity(self, value: str | None) -> None:
        self.severity = SonarSeverity.parse(value)

    def apply_to(self, rule: RuleDefinition) -> None:
        rule.rule_type = self.rule_type
        rule.severity = self.severity


@dataclass(slots=True, kw_only=True, eq=False)
class RuleOverride(_OverrideBase):
    """Severity/type patch for one rule, keyed by rule key."""


@dataclass(slots=True, kw_only=True, eq=False)
class CategoryOverride(_OverrideBase):
    """Severity/type patch for every rule of one InspectCode category, keyed by category id."""


@dataclass(frozen=True, slots=True)
class TextRange:
    """Location of an issue: line plus character offsets."""

    line: int
    start_offset: int
    end_offset: int


@dataclass(frozen=True, slots=True, kw_only=True)
class SonarIssue:
    """Host-neutral issue ready to be reported against a rule."""

    rule_key: str
    file_path: str
    message: str
    text_range: TextRange
