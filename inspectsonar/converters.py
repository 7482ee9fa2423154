"""Conversion of parsed InspectCode records to SonarQube-shaped models."""

from __future__ import annotations

import html
from collections.abc import Iterable
from concurrent.futures import Executor
from typing import Protocol

from inspectsonar.core.enums import (
    InspectCodeSeverity,
    RuleDescriptionSyntax,
    RuleStatus,
    SonarRuleType,
    SonarSeverity,
)
from inspectsonar.core.models import (
    IssueOccurrence,
    IssueTypeDefinition,
    RuleDefinition,
    SonarIssue,
    TextRange,
)

MISSING_DESCRIPTION = "(this rule does not provide a description)"

SEVERITY_MAP: dict[InspectCodeSeverity, SonarSeverity] = {
    InspectCodeSeverity.DO_NOT_SHOW: SonarSeverity.INFO,
    InspectCodeSeverity.INVALID_SEVERITY: SonarSeverity.INFO,
    InspectCodeSeverity.HINT: SonarSeverity.INFO,
    InspectCodeSeverity.SUGGESTION: SonarSeverity.MINOR,
    InspectCodeSeverity.WARNING: SonarSeverity.MAJOR,
    InspectCodeSeverity.ERROR: SonarSeverity.CRITICAL,
}

RULE_TYPE_MAP: dict[InspectCodeSeverity, SonarRuleType] = {
    InspectCodeSeverity.DO_NOT_SHOW: SonarRuleType.CODE_SMELL,
    InspectCodeSeverity.INVALID_SEVERITY: SonarRuleType.CODE_SMELL,
    InspectCodeSeverity.HINT: SonarRuleType.CODE_SMELL,
    InspectCodeSeverity.SUGGESTION: SonarRuleType.CODE_SMELL,
    InspectCodeSeverity.WARNING: SonarRuleType.BUG,
    InspectCodeSeverity.ERROR: SonarRuleType.BUG,
}


class Converter[I, O](Protocol):
    """Maps exactly one input record to one output record."""

    def convert(self, item: I | None) -> O | None:
        """Convert one record; ``None`` maps to ``None``."""

    def convert_all(self, items: Iterable[I] | None, executor: Executor | None = None) -> list[O]:
        """Convert a batch, dropping absent outputs. Never returns ``None``."""


class BaseConverter[I, O]:
    """Batch conversion on top of a pure :meth:`convert`.

    Output order is not guaranteed when an executor is supplied.
    """

    def convert(self, item: I | None) -> O | None:
        raise NotImplementedError

    def convert_all(self, items: Iterable[I] | None, executor: Executor | None = None) -> list[O]:
        if not items:
            return []
        if executor is None:
            converted = map(self.convert, items)
        else:
            converted = executor.map(self.convert, items)
        return [result for result in converted if result is not None]


def combine_rule_description(description: str | None, wiki_url: str | None) -> str:
    """HTML rule description with an optional link to the issue type wiki page."""
    text = (description or "").strip()
    body = html.escape(text, quote=False) if text else MISSING_DESCRIPTION
    if not wiki_url:
        return body
    return f'{body}<br /><a href="{wiki_url}">{wiki_url}</a>'


class DefinitionToRuleConverter(BaseConverter[IssueTypeDefinition, RuleDefinition]):
    """Derives SonarQube rules from InspectCode issue type definitions."""

    def convert(self, item: IssueTypeDefinition | None) -> RuleDefinition | None:
        if item is None:
            return None
        rule = RuleDefinition(
            key=item.key,
            name=item.key,
            rule_type=RULE_TYPE_MAP.get(item.severity, SonarRuleType.default()),
            severity=SEVERITY_MAP.get(item.severity, SonarSeverity.default()),
            status=RuleStatus.READY,
            activated_by_default=False,
            category_id=item.category_id,
        )
        rule.set_description(combine_rule_description(item.description, item.wiki_url), RuleDescriptionSyntax.HTML)
        return rule


class OccurrenceToIssueConverter(BaseConverter[IssueOccurrence, SonarIssue]):
    """Turns InspectCode issue occurrences into host-neutral issues."""

    def convert(self, item: IssueOccurrence | None) -> SonarIssue | None:
        if item is None:
            return None
        return SonarIssue(
            rule_key=(item.type_id or "").strip(),
            file_path=(item.file or "").strip(),
            message=(item.message or "").strip(),
            text_range=TextRange(line=item.line, start_offset=item.offset_start, end_offset=item.offset_end),
        )
