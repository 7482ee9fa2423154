"""Streaming parsers and schema validation for InspectCode XML documents."""

from inspectsonar.parsing.machines import ParseContext, ParserState
from inspectsonar.parsing.parser import InspectCodeReportParser, ReportParseError, RuleOverrideParser
from inspectsonar.parsing.validator import SchemaValidator, overrides_validator, report_validator

__all__ = [
    "InspectCodeReportParser",
    "ParseContext",
    "ParserState",
    "ReportParseError",
    "RuleOverrideParser",
    "SchemaValidator",
    "overrides_validator",
    "report_validator",
]
