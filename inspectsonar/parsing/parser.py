"""Streaming SAX parsers for InspectCode reports and rule override documents.

Both parsers share one SAX driver that forwards element events to an
:class:`~inspectsonar.parsing.machines.ElementMachine`, so a document is read
in a single forward pass and only accepted records are kept in memory.
"""

from __future__ import annotations

import xml.sax
from collections.abc import Iterable
from concurrent.futures import Executor
from typing import IO, TYPE_CHECKING

from loguru import logger
from xml.sax.handler import ContentHandler, ErrorHandler, feature_external_ges, feature_namespaces

from inspectsonar.config.schema import FilterConfig
from inspectsonar.converters import Converter, DefinitionToRuleConverter, OccurrenceToIssueConverter
from inspectsonar.core.enums import ParseErrorSeverity
from inspectsonar.core.models import (
    CategoryOverride,
    IssueOccurrence,
    IssueTypeDefinition,
    RuleDefinition,
    RuleOverride,
    SonarIssue,
)
from inspectsonar.parsing.machines import (
    INITIAL_CONTEXT,
    ElementMachine,
    OverrideMachine,
    ReportMachine,
)
from inspectsonar.predicates import Predicate, all_of

if TYPE_CHECKING:
    from loguru import Logger


class ReportParseError(Exception):
    """Fatal markup error that aborted a parse pass."""

    def __init__(self, message: str, *, system_id: str, line: int, column: int):
        super().__init__(message)
        self.system_id = system_id
        self.line = line
        self.column = column


def describe_parse_exception(severity: ParseErrorSeverity, exc: xml.sax.SAXParseException) -> str:
    system_id = exc.getSystemId()
    if system_id is None:
        system_id = "null"
    else:
        system_id = str(system_id).strip() or "(empty)"
    return (
        f"{severity.value.upper()}: URI={system_id}, Line={exc.getLineNumber()}, "
        f"Column={exc.getColumnNumber()}: {exc.getMessage()}"
    )


class _MachineHandler(ContentHandler, ErrorHandler):
    """Adapts SAX callbacks to machine transitions."""

    def __init__(self, machine: ElementMachine, log: "Logger"):
        super().__init__()
        self._machine = machine
        self._log = log
        self._ctx = INITIAL_CONTEXT
        self.problems: list[tuple[ParseErrorSeverity, str]] = []

    def startDocument(self) -> None:
        self.problems.clear()
        self._ctx = self._machine.reset()

    def startElement(self, name, attrs) -> None:
        if name is None:
            return
        self._ctx = self._machine.on_start(self._ctx, name.strip(), attrs)

    def endElement(self, name) -> None:
        if name is None:
            return
        self._ctx = self._machine.on_end(self._ctx, name.strip())

    def warning(self, exception) -> None:
        self._report(ParseErrorSeverity.WARNING, exception)

    def error(self, exception) -> None:
        self._report(ParseErrorSeverity.ERROR, exception)

    def fatalError(self, exception) -> None:
        message = self._report(ParseErrorSeverity.FATAL, exception)
        raise ReportParseError(
            message,
            system_id=str(exception.getSystemId()),
            line=exception.getLineNumber(),
            column=exception.getColumnNumber(),
        ) from exception

    def _report(self, severity: ParseErrorSeverity, exception: xml.sax.SAXParseException) -> str:
        message = describe_parse_exception(severity, exception)
        self.problems.append((severity, message))
        if severity is ParseErrorSeverity.WARNING:
            self._log.warning(message)
        else:
            self._log.error(message)
        return message


def run_machine(stream: IO, machine: ElementMachine, *, log: "Logger") -> list[tuple[ParseErrorSeverity, str]]:
    """Parse ``stream`` once, feeding every element event to ``machine``.

    Returns the non-fatal problems reported by the XML reader. Raises
    :class:`ReportParseError` on fatal markup errors.
    """
    handler = _MachineHandler(machine, log)
    reader = xml.sax.make_parser()
    reader.setFeature(feature_namespaces, False)
    reader.setFeature(feature_external_ges, False)
    reader.setContentHandler(handler)
    reader.setErrorHandler(handler)
    reader.parse(stream)
    return list(handler.problems)


class InspectCodeReportParser:
    """Parses an InspectCode XML report into filtered definitions and issues.

    Each filter collection is AND-combined. ``None`` accepts every record; an
    empty collection follows the matching policy of ``filter_config``.
    """

    def __init__(
        self,
        definition_converter: Converter[IssueTypeDefinition, RuleDefinition] | None = None,
        issue_converter: Converter[IssueOccurrence, SonarIssue] | None = None,
        definition_filters: Iterable[Predicate[IssueTypeDefinition]] | None = None,
        issue_filters: Iterable[Predicate[IssueOccurrence]] | None = None,
        project_filters: Iterable[Predicate[str]] | None = None,
        *,
        filter_config: FilterConfig | None = None,
        log: "Logger | None" = None,
    ):
        policies = filter_config or FilterConfig()
        self._log = log or logger.bind(component="report_parser")
        self._definition_converter = definition_converter or DefinitionToRuleConverter()
        self._issue_converter = issue_converter or OccurrenceToIssueConverter()
        self._machine = ReportMachine(
            all_of(definition_filters, empty=policies.empty_definition_filters),
            all_of(issue_filters, empty=policies.empty_issue_filters),
            all_of(project_filters, empty=policies.empty_project_filters),
            log=self._log,
        )
        self.problems: list[tuple[ParseErrorSeverity, str]] = []

    def parse(self, stream: IO) -> None:
        self.problems = run_machine(stream, self._machine, log=self._log)
        self._log.debug(
            "report_parsed definitions={} projects={} issues={}",
            len(self._machine.results.definitions),
            len(self._machine.results.issues_by_project),
            len(self.occurrences),
        )

    @property
    def definitions(self) -> list[IssueTypeDefinition]:
        return list(self._machine.results.definitions.values())

    @property
    def occurrences(self) -> list[IssueOccurrence]:
        return self._machine.results.occurrences()

    @property
    def issues_by_project(self) -> dict[str, list[IssueOccurrence]]:
        return {name: list(issues) for name, issues in self._machine.results.issues_by_project.items()}

    def rule_definitions(self, executor: Executor | None = None) -> list[RuleDefinition]:
        return self._definition_converter.convert_all(self.definitions, executor)

    def issues(self, executor: Executor | None = None) -> list[SonarIssue]:
        return self._issue_converter.convert_all(self.occurrences, executor)

    def __repr__(self) -> str:
        results = self._machine.results
        return (
            f"InspectCodeReportParser(definitions={len(results.definitions)}, "
            f"projects={len(results.issues_by_project)})"
        )


class RuleOverrideParser:
    """Parses a rule override document (``SonarRuleOverride``/``CategoryOverride``)."""

    def __init__(self, *, log: "Logger | None" = None):
        self._log = log or logger.bind(component="override_parser")
        self._machine = OverrideMachine(log=self._log)
        self.problems: list[tuple[ParseErrorSeverity, str]] = []

    def parse(self, stream: IO) -> None:
        self.problems = run_machine(stream, self._machine, log=self._log)
        self._log.debug(
            "overrides_parsed rule_overrides={} category_overrides={}",
            len(self._machine.results.rule_overrides),
            len(self._machine.results.category_overrides),
        )

    @property
    def rule_overrides(self) -> list[RuleOverride]:
        return list(self._machine.results.rule_overrides)

    @property
    def category_overrides(self) -> list[CategoryOverride]:
        return list(self._machine.results.category_overrides)
