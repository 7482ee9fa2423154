import io
import xml.sax

import pytest

from inspectsonar.config.schema import FilterConfig
from inspectsonar.core.enums import InspectCodeSeverity, ParseErrorSeverity, RuleStatus, SonarRuleType, SonarSeverity
from inspectsonar.core.models import UNSET, IssueTypeDefinition
from inspectsonar.parsing import parser as parser_module
from inspectsonar.parsing.machines import (
    INITIAL_CONTEXT,
    ParserState,
    ReportMachine,
)
from inspectsonar.parsing.parser import InspectCodeReportParser, ReportParseError
from inspectsonar.predicates import has_non_empty_description, project_name_equals


def _accept(_: object) -> bool:
    return True


def _parse(xml: bytes, **kwargs) -> InspectCodeReportParser:
    kwargs.setdefault("definition_filters", None)
    kwargs.setdefault("issue_filters", None)
    kwargs.setdefault("project_filters", None)
    parser = InspectCodeReportParser(**kwargs)
    parser.parse(io.BytesIO(xml))
    return parser


def test_machine_transitions_through_project_and_issue() -> None:
    machine = ReportMachine(_accept, _accept, _accept)
    ctx = machine.reset()
    assert ctx is INITIAL_CONTEXT

    ctx = machine.on_start(ctx, "Project", {"Name": " P "})
    assert ctx.state is ParserState.IN_PROJECT
    assert ctx.project == "P"

    ctx = machine.on_start(ctx, "Issue", {"TypeId": "CS001", "Line": "3"})
    assert ctx.state is ParserState.IN_ISSUE
    ctx = machine.on_end(ctx, "Issue")
    assert ctx.state is ParserState.IN_PROJECT
    assert ctx.record is None

    ctx = machine.on_end(ctx, "Project")
    assert ctx is INITIAL_CONTEXT
    assert [issue.type_id for issue in machine.results.issues_by_project["P"]] == ["CS001"]


def test_machine_skips_rejected_project_subtree() -> None:
    machine = ReportMachine(_accept, _accept, project_name_equals("Wanted"))
    ctx = machine.reset()
    ctx = machine.on_start(ctx, "Project", {"Name": "Other"})
    assert ctx.state is ParserState.SKIPPING_PROJECT
    ctx = machine.on_start(ctx, "Issue", {"TypeId": "CS001"})
    assert ctx.state is ParserState.SKIPPING_PROJECT
    ctx = machine.on_end(ctx, "Issue")
    ctx = machine.on_end(ctx, "Project")
    assert ctx is INITIAL_CONTEXT
    assert machine.results.issues_by_project == {}


def test_machine_ignores_issue_outside_project(log_messages: list[str]) -> None:
    machine = ReportMachine(_accept, _accept, _accept)
    ctx = machine.reset()
    ctx = machine.on_start(ctx, "Issue", {"TypeId": "CS001"})
    ctx = machine.on_end(ctx, "Issue")
    assert ctx is INITIAL_CONTEXT
    assert machine.results.occurrences() == []
    assert any("issue_outside_project" in message for message in log_messages)


def test_issue_type_becomes_rule_definition() -> None:
    xml = b'<Report><IssueTypes><IssueType Id="CS001" Severity="ERROR" Description="x"/></IssueTypes></Report>'
    parser = _parse(xml)

    [rule] = parser.rule_definitions()
    assert rule.key == "CS001"
    assert rule.severity is SonarSeverity.CRITICAL
    assert rule.rule_type is SonarRuleType.BUG
    assert rule.status is RuleStatus.READY
    assert rule.activated_by_default is False


def test_issue_in_accepted_project_becomes_occurrence() -> None:
    xml = (
        b'<Report><Issues><Project Name="P">'
        b'<Issue TypeId="CS001" File="a.cs" Line="10" Offset="5-9" Message="m"/>'
        b"</Project></Issues></Report>"
    )
    parser = _parse(xml)

    [occurrence] = parser.occurrences
    assert occurrence.type_id == "CS001"
    assert occurrence.file == "a.cs"
    assert occurrence.line == 10
    assert (occurrence.offset_start, occurrence.offset_end) == (5, 9)
    assert occurrence.message == "m"
    assert list(parser.issues_by_project) == ["P"]


def test_every_issue_type_with_id_is_a_candidate() -> None:
    seen: list[str] = []

    def record(definition: IssueTypeDefinition) -> bool:
        seen.append(definition.key)
        return definition.key != "B"

    xml = (
        b'<Report><IssueTypes><IssueType Id="A"/><IssueType Id=" "/><IssueType/>'
        b'<IssueType Id="B"/><IssueType Id="C"/></IssueTypes></Report>'
    )
    parser = _parse(xml, definition_filters=[record])
    assert seen == ["A", "B", "C"]
    assert [definition.key for definition in parser.definitions] == ["A", "C"]


def test_duplicate_issue_type_keeps_first() -> None:
    xml = (
        b'<Report><IssueTypes><IssueType Id="CS001" Description="first"/>'
        b'<IssueType Id="CS001" Description="second"/></IssueTypes></Report>'
    )
    [definition] = _parse(xml).definitions
    assert definition.description == "first"


def test_malformed_offset_keeps_issue(log_messages: list[str]) -> None:
    xml = (
        b'<Report><Issues><Project Name="P">'
        b'<Issue TypeId="CS001" File="a.cs" Line="10" Offset="five-nine" Message="m"/>'
        b"</Project></Issues></Report>"
    )
    [occurrence] = _parse(xml).occurrences
    assert occurrence.offset_start == UNSET
    assert occurrence.offset_end == UNSET
    assert occurrence.line == 10
    assert any("xml_attribute_invalid" in message and "Offset" in message for message in log_messages)


def test_malformed_line_keeps_sentinel() -> None:
    xml = b'<Report><Issues><Project Name="P"><Issue TypeId="CS001" Line="ten"/></Project></Issues></Report>'
    [occurrence] = _parse(xml).occurrences
    assert occurrence.line == UNSET


def test_issue_without_type_id_is_dropped() -> None:
    xml = b'<Report><Issues><Project Name="P"><Issue TypeId=" " File="a.cs"/><Issue File="b.cs"/></Project></Issues></Report>'
    assert _parse(xml).occurrences == []


def test_rejected_project_yields_no_occurrences(report_xml: bytes) -> None:
    parser = _parse(report_xml, project_filters=[project_name_equals("P")])
    assert set(parser.issues_by_project) == {"P"}
    assert [issue.file for issue in parser.occurrences] == ["a.cs", "src\\b.cs"]


def test_same_project_name_merges_issues() -> None:
    xml = (
        b'<Report><Issues><Project Name="P"><Issue TypeId="A"/></Project>'
        b'<Project Name="p "><Issue TypeId="B"/></Project>'
        b'<Project Name="P"><Issue TypeId="C"/></Project></Issues></Report>'
    )
    parser = _parse(xml)
    assert [issue.type_id for issue in parser.issues_by_project["P"]] == ["A", "C"]
    assert [issue.type_id for issue in parser.issues_by_project["p"]] == ["B"]


def test_empty_filter_collection_rejects_by_default(report_xml: bytes) -> None:
    parser = _parse(report_xml, definition_filters=[], issue_filters=[], project_filters=[])
    assert parser.definitions == []
    assert parser.occurrences == []


def test_empty_filter_policy_can_accept(report_xml: bytes) -> None:
    policies = FilterConfig(
        empty_definition_filters="accept",
        empty_issue_filters="accept",
        empty_project_filters="accept",
    )
    parser = _parse(report_xml, definition_filters=[], issue_filters=[], project_filters=[], filter_config=policies)
    assert len(parser.definitions) == 6
    assert len(parser.occurrences) == 3


def test_definition_attributes_are_mapped(report_xml: bytes) -> None:
    parser = _parse(report_xml, definition_filters=[has_non_empty_description()])
    by_key = {definition.key: definition for definition in parser.definitions}
    redundant = by_key["RedundantUsingDirective"]
    assert redundant.category == "Redundancies in Code"
    assert redundant.category_id == "CodeRedundancy"
    assert redundant.severity is InspectCodeSeverity.WARNING
    assert redundant.wiki_url == "https://www.jetbrains.com/help/resharper/RedundantUsingDirective.html"
    assert "NoDescription" not in by_key


def test_reparse_clears_previous_results(report_xml: bytes) -> None:
    parser = _parse(report_xml)
    parser.parse(io.BytesIO(b"<Report/>"))
    assert parser.definitions == []
    assert parser.occurrences == []


def test_fatal_markup_error_raises(log_messages: list[str]) -> None:
    parser = InspectCodeReportParser()
    with pytest.raises(ReportParseError) as excinfo:
        parser.parse(io.BytesIO(b'<Report><IssueTypes><IssueType Id="A"></Report>'))
    assert str(excinfo.value).startswith("FATAL: URI=")
    assert excinfo.value.line >= 1
    assert any(message.startswith("ERROR FATAL:") for message in log_messages)


def test_batch_conversion_yields_all_accepted(report_xml: bytes) -> None:
    parser = _parse(report_xml)
    rules = parser.rule_definitions()
    assert {rule.key for rule in rules} == {definition.key for definition in parser.definitions}
    assert len(parser.issues()) == len(parser.occurrences)


def test_repr_mentions_counts(report_xml: bytes) -> None:
    parser = _parse(report_xml)
    assert repr(parser) == "InspectCodeReportParser(definitions=6, projects=2)"


class _NoisyHandler(parser_module._MachineHandler):
    """Reports a non-fatal warning on ``Notice`` and an error on ``Glitch`` elements."""

    def startElement(self, name, attrs) -> None:
        if name == "Notice":
            self.warning(xml.sax.SAXParseException("odd markup", None, self._locator))
        elif name == "Glitch":
            self.error(xml.sax.SAXParseException("recoverable markup error", None, self._locator))
        super().startElement(name, attrs)


def test_non_fatal_markup_problems_are_recorded_and_parsing_continues(
    monkeypatch: pytest.MonkeyPatch, log_messages: list[str]
) -> None:
    monkeypatch.setattr(parser_module, "_MachineHandler", _NoisyHandler)
    parser = _parse(
        b'<Report><IssueTypes>'
        b'<IssueType Id="A" Description="a"/>'
        b"<Notice/>"
        b'<IssueType Id="B" Description="b"/>'
        b"<Glitch/>"
        b'<IssueType Id="C" Description="c"/>'
        b"</IssueTypes></Report>"
    )

    assert [definition.key for definition in parser.definitions] == ["A", "B", "C"]
    assert [severity for severity, _ in parser.problems] == [ParseErrorSeverity.WARNING, ParseErrorSeverity.ERROR]
    warning, error = (message for _, message in parser.problems)
    assert warning.startswith("WARNING: URI=null, Line=1")
    assert warning.endswith(": odd markup")
    assert error.startswith("ERROR: URI=null, Line=1")
    assert any(message.startswith("WARNING WARNING: URI=null") for message in log_messages)
    assert any(message.startswith("ERROR ERROR: URI=null") for message in log_messages)


def test_clean_parse_has_no_problems(report_xml: bytes) -> None:
    assert _parse(report_xml).problems == []
