"""Enumerations shared by InspectCode records and SonarQube-shaped models."""

from __future__ import annotations

from enum import Enum, StrEnum


class _ParsableEnum(StrEnum):
    """String enum with lenient, case-insensitive parsing and a default member."""

    @classmethod
    def default(cls):
        raise NotImplementedError

    @classmethod
    def parse(cls, value: str | None):
        """Parse ``value`` ignoring case and surrounding whitespace.

        ``None``, blank and unknown values map to :meth:`default`.
        """
        if value is None:
            return cls.default()
        candidate = value.strip()
        if not candidate:
            return cls.default()
        lowered = candidate.lower()
        for member in cls:
            if member.value.lower() == lowered:
                return member
        return cls.default()


class InspectCodeSeverity(_ParsableEnum):
    """Severity attached to an InspectCode issue type."""

    DO_NOT_SHOW = "DO_NOT_SHOW"
    INVALID_SEVERITY = "INVALID_SEVERITY"
    HINT = "HINT"
    SUGGESTION = "SUGGESTION"
    WARNING = "WARNING"
    ERROR = "ERROR"

    @classmethod
    def default(cls) -> InspectCodeSeverity:
        return cls.WARNING


class SonarSeverity(_ParsableEnum):
    """Severity of a SonarQube rule."""

    INFO = "INFO"
    MINOR = "MINOR"
    MAJOR = "MAJOR"
    CRITICAL = "CRITICAL"
    BLOCKER = "BLOCKER"

    @classmethod
    def default(cls) -> SonarSeverity:
        return cls.MAJOR


class SonarRuleType(_ParsableEnum):
    """Type of a SonarQube rule."""

    CODE_SMELL = "CODE_SMELL"
    BUG = "BUG"
    VULNERABILITY = "VULNERABILITY"

    @classmethod
    def default(cls) -> SonarRuleType:
        return cls.CODE_SMELL


class RuleStatus(_ParsableEnum):
    """Lifecycle status of a SonarQube rule."""

    BETA = "BETA"
    DEPRECATED = "DEPRECATED"
    READY = "READY"
    REMOVED = "REMOVED"

    @classmethod
    def default(cls) -> RuleStatus:
        return cls.READY


class RuleDescriptionSyntax(_ParsableEnum):
    """Markup used by a rule description."""

    HTML = "HTML"
    MARKDOWN = "MARKDOWN"

    @classmethod
    def default(cls) -> RuleDescriptionSyntax:
        return cls.HTML


class ParseErrorSeverity(Enum):
    """Impact of a problem reported by the XML parser."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    FATAL = "fatal"
