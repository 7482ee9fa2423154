"""Element state machines driven by the streaming XML parser.

A machine never keeps the record under construction on itself. Each event
handler receives the current :class:`ParseContext` and returns the next one;
only completed, accepted records are written to the machine's results.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Protocol

from loguru import logger

from inspectsonar.core.models import (
    CategoryOverride,
    IssueOccurrence,
    IssueTypeDefinition,
    RuleOverride,
)
from inspectsonar.predicates import Predicate

if TYPE_CHECKING:
    from loguru import Logger

# Report elements
ELEMENT_ISSUE_TYPE = "IssueType"
ELEMENT_ISSUES = "Issues"
ELEMENT_PROJECT = "Project"
ELEMENT_ISSUE = "Issue"
KNOWN_REPORT_ELEMENTS = frozenset(
    {"Report", "Information", "Solution", "InspectionScope", "Element", "IssueTypes", ELEMENT_ISSUES}
)

ATTRIBUTE_ID = "Id"
ATTRIBUTE_NAME = "Name"

# Override elements
ELEMENT_RULE_OVERRIDE = "SonarRuleOverride"
ELEMENT_CATEGORY_OVERRIDE = "CategoryOverride"
ATTRIBUTE_RULE_KEY = "SonarRuleKey"
ATTRIBUTE_CATEGORY_ID = "CategoryId"
ATTRIBUTE_RULE_TYPE = "SonarRuleType"
ATTRIBUTE_SEVERITY = "SonarSeverity"

type Attributes = Mapping[str, str]
type Record = IssueTypeDefinition | IssueOccurrence | RuleOverride | CategoryOverride


class ParserState(Enum):
    IDLE = "idle"
    IN_DEFINITION = "in_definition"
    IN_PROJECT = "in_project"
    IN_ISSUE = "in_issue"
    SKIPPING_PROJECT = "skipping_project"
    IN_OVERRIDE = "in_override"


@dataclass(frozen=True, slots=True)
class ParseContext:
    """Parser position: state, record under construction and enclosing project."""

    state: ParserState = ParserState.IDLE
    record: Record | None = None
    project: str | None = None


INITIAL_CONTEXT = ParseContext()


class ElementMachine(Protocol):
    """Transition functions for one document kind."""

    def reset(self) -> ParseContext:
        """Clear accumulated results and return the initial context."""

    def on_start(self, ctx: ParseContext, name: str, attributes: Attributes) -> ParseContext:
        """Handle an element start."""

    def on_end(self, ctx: ParseContext, name: str) -> ParseContext:
        """Handle an element end."""


def _set(field_name: str) -> Callable[[object, str], None]:
    def setter(record: object, value: str) -> None:
        setattr(record, field_name, value)

    return setter


DEFINITION_SETTERS: dict[str, Callable[[IssueTypeDefinition, str], None]] = {
    "Category": _set("category"),
    "CategoryId": _set("category_id"),
    "SubCategory": _set("sub_category"),
    "Description": _set("description"),
    "Severity": IssueTypeDefinition.set_severity,
    "WikiUrl": IssueTypeDefinition.set_wiki_url,
    "Global": IssueTypeDefinition.set_global,
}

OCCURRENCE_SETTERS: dict[str, Callable[[IssueOccurrence, str], None]] = {
    "TypeId": IssueOccurrence.set_type_id,
    "File": _set("file"),
    "Offset": IssueOccurrence.set_offset,
    "Line": IssueOccurrence.set_line,
    "Message": _set("message"),
}

OVERRIDE_SETTERS: dict[str, Callable[[RuleOverride | CategoryOverride, str], None]] = {
    ATTRIBUTE_RULE_TYPE: RuleOverride.set_rule_type,
    ATTRIBUTE_SEVERITY: RuleOverride.set_severity,
}


def _apply_attributes(
    record: object,
    element: str,
    attributes: Attributes,
    setters: Mapping[str, Callable],
    log: "Logger",
    *,
    consumed: frozenset[str] = frozenset(),
) -> None:
    for raw_name, value in attributes.items():
        name = raw_name.strip()
        if name in consumed:
            continue
        setter = setters.get(name)
        if setter is None:
            log.debug("xml_attribute_unhandled element={} attribute={}", element, raw_name)
            continue
        try:
            setter(record, value)
        except ValueError as e:
            log.warning("xml_attribute_invalid element={} attribute={} value={!r} error={}", element, name, value, e)


@dataclass(slots=True)
class ReportResults:
    """Accepted records of one report pass."""

    definitions: dict[str, IssueTypeDefinition] = field(default_factory=dict)
    issues_by_project: dict[str, list[IssueOccurrence]] = field(default_factory=dict)

    def clear(self) -> None:
        self.definitions.clear()
        self.issues_by_project.clear()

    def occurrences(self) -> list[IssueOccurrence]:
        return [issue for issues in self.issues_by_project.values() for issue in issues]


class ReportMachine:
    """Builds issue type definitions and per-project issue occurrences."""

    def __init__(
        self,
        definition_filter: Predicate[IssueTypeDefinition],
        issue_filter: Predicate[IssueOccurrence],
        project_filter: Predicate[str],
        *,
        log: "Logger | None" = None,
    ):
        self._definition_filter = definition_filter
        self._issue_filter = issue_filter
        self._project_filter = project_filter
        self._log = log or logger.bind(component="report_machine")
        self.results = ReportResults()

    def reset(self) -> ParseContext:
        self.results.clear()
        return INITIAL_CONTEXT

    def on_start(self, ctx: ParseContext, name: str, attributes: Attributes) -> ParseContext:
        if ctx.state is ParserState.SKIPPING_PROJECT:
            return ctx

        if name == ELEMENT_ISSUE_TYPE:
            definition = self._build_definition(attributes)
            return ParseContext(ParserState.IN_DEFINITION, definition, ctx.project)

        if name == ELEMENT_PROJECT:
            project = (attributes.get(ATTRIBUTE_NAME) or "").strip()
            if not self._project_filter(project):
                self._log.debug("project_skipped name={}", project)
                return ParseContext(ParserState.SKIPPING_PROJECT, None, project)
            self.results.issues_by_project.setdefault(project, [])
            return ParseContext(ParserState.IN_PROJECT, None, project)

        if name == ELEMENT_ISSUE:
            if ctx.state is not ParserState.IN_PROJECT:
                self._log.warning("issue_outside_project state={}", ctx.state.value)
                return ctx
            occurrence = self._build_occurrence(attributes)
            return ParseContext(ParserState.IN_ISSUE, occurrence, ctx.project)

        self._log_unhandled("started", name)
        return ctx

    def on_end(self, ctx: ParseContext, name: str) -> ParseContext:
        if ctx.state is ParserState.SKIPPING_PROJECT:
            if name == ELEMENT_PROJECT:
                return INITIAL_CONTEXT
            return ctx

        if name == ELEMENT_ISSUE_TYPE:
            if ctx.state is ParserState.IN_DEFINITION and isinstance(ctx.record, IssueTypeDefinition):
                self._accept_definition(ctx.record)
            return self._after_record(ctx)

        if name == ELEMENT_PROJECT:
            return INITIAL_CONTEXT

        if name == ELEMENT_ISSUE:
            if ctx.state is not ParserState.IN_ISSUE:
                return ctx
            if isinstance(ctx.record, IssueOccurrence) and self._issue_filter(ctx.record):
                self.results.issues_by_project[ctx.project or ""].append(ctx.record)
            return ParseContext(ParserState.IN_PROJECT, None, ctx.project)

        self._log_unhandled("ended", name)
        return ctx

    def _accept_definition(self, definition: IssueTypeDefinition) -> None:
        if not self._definition_filter(definition):
            return
        if definition.key in self.results.definitions:
            self._log.debug("issue_type_duplicate id={}", definition.key)
            return
        self.results.definitions[definition.key] = definition

    @staticmethod
    def _after_record(ctx: ParseContext) -> ParseContext:
        if ctx.project is not None:
            return ParseContext(ParserState.IN_PROJECT, None, ctx.project)
        return INITIAL_CONTEXT

    def _build_definition(self, attributes: Attributes) -> IssueTypeDefinition | None:
        key = (attributes.get(ATTRIBUTE_ID) or "").strip()
        if not key:
            return None
        definition = IssueTypeDefinition(key)
        _apply_attributes(
            definition,
            ELEMENT_ISSUE_TYPE,
            attributes,
            DEFINITION_SETTERS,
            self._log,
            consumed=frozenset({ATTRIBUTE_ID}),
        )
        return definition

    def _build_occurrence(self, attributes: Attributes) -> IssueOccurrence | None:
        occurrence = IssueOccurrence()
        _apply_attributes(occurrence, ELEMENT_ISSUE, attributes, OCCURRENCE_SETTERS, self._log)
        if not occurrence.type_id:
            return None
        return occurrence

    def _log_unhandled(self, event: str, name: str) -> None:
        if name in KNOWN_REPORT_ELEMENTS:
            return
        self._log.debug("xml_element_unhandled event={} element={}", event, name)


@dataclass(slots=True)
class OverrideResults:
    """Override entries in document order, duplicates included."""

    rule_overrides: list[RuleOverride] = field(default_factory=list)
    category_overrides: list[CategoryOverride] = field(default_factory=list)

    def clear(self) -> None:
        self.rule_overrides.clear()
        self.category_overrides.clear()


class OverrideMachine:
    """Builds rule and category overrides from an override document."""

    def __init__(self, *, log: "Logger | None" = None):
        self._log = log or logger.bind(component="override_machine")
        self.results = OverrideResults()

    def reset(self) -> ParseContext:
        self.results.clear()
        return INITIAL_CONTEXT

    def on_start(self, ctx: ParseContext, name: str, attributes: Attributes) -> ParseContext:
        if name == ELEMENT_RULE_OVERRIDE:
            return ParseContext(ParserState.IN_OVERRIDE, self._build(RuleOverride, name, ATTRIBUTE_RULE_KEY, attributes))
        if name == ELEMENT_CATEGORY_OVERRIDE:
            return ParseContext(
                ParserState.IN_OVERRIDE,
                self._build(CategoryOverride, name, ATTRIBUTE_CATEGORY_ID, attributes),
            )
        self._log.debug("xml_element_unhandled event=started element={}", name)
        return ctx

    def on_end(self, ctx: ParseContext, name: str) -> ParseContext:
        if name not in (ELEMENT_RULE_OVERRIDE, ELEMENT_CATEGORY_OVERRIDE):
            self._log.debug("xml_element_unhandled event=ended element={}", name)
            return ctx
        if isinstance(ctx.record, RuleOverride):
            self.results.rule_overrides.append(ctx.record)
        elif isinstance(ctx.record, CategoryOverride):
            self.results.category_overrides.append(ctx.record)
        return INITIAL_CONTEXT

    def _build[O: (RuleOverride, CategoryOverride)](
        self,
        kind: type[O],
        element: str,
        key_attribute: str,
        attributes: Attributes,
    ) -> O | None:
        key = (attributes.get(key_attribute) or "").strip()
        if not key:
            return None
        override = kind(key=key)
        _apply_attributes(
            override,
            element,
            attributes,
            OVERRIDE_SETTERS,
            self._log,
            consumed=frozenset({key_attribute}),
        )
        return override
