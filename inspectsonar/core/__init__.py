"""Typed records and enumerations shared across inspectsonar."""

from inspectsonar.core.enums import (
    InspectCodeSeverity,
    ParseErrorSeverity,
    RuleDescriptionSyntax,
    RuleStatus,
    SonarRuleType,
    SonarSeverity,
)
from inspectsonar.core.models import (
    UNSET,
    CategoryOverride,
    IssueOccurrence,
    IssueTypeDefinition,
    RuleDefinition,
    RuleOverride,
    SonarIssue,
    TextRange,
)

__all__ = [
    "UNSET",
    "CategoryOverride",
    "InspectCodeSeverity",
    "IssueOccurrence",
    "IssueTypeDefinition",
    "ParseErrorSeverity",
    "RuleDefinition",
    "RuleDescriptionSyntax",
    "RuleOverride",
    "RuleStatus",
    "SonarIssue",
    "SonarRuleType",
    "SonarSeverity",
    "TextRange",
]
