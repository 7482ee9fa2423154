"""Issue sensor: turns the report issues of one project into reportable issues."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from inspectsonar.config.schema import Config, SensorConfig
from inspectsonar.core.models import SonarIssue
from inspectsonar.parsing.parser import InspectCodeReportParser, ReportParseError
from inspectsonar.parsing.validator import report_validator
from inspectsonar.predicates import (
    has_non_empty_description,
    has_valid_issue_offset,
    is_not_null,
    is_valid_line_number,
    project_name_equals,
)
from inspectsonar.rules.languages import Language, get_profile

if TYPE_CHECKING:
    from loguru import Logger


@dataclass(frozen=True, slots=True)
class ResolvedIssue:
    """An issue whose file path is absolute and whose rule is active."""

    repository_key: str
    issue: SonarIssue
    absolute_path: Path


@dataclass(slots=True)
class SensorResult:
    issues: list[ResolvedIssue] = field(default_factory=list)
    skipped: list[tuple[SonarIssue, str]] = field(default_factory=list)


def log_skipped_issue(log: "Logger", issue: SonarIssue, reason: str | None) -> None:
    reason = (reason or "").strip()
    log.info(
        "issue_skipped rule={} line={} range={}-{} file={} reason={}",
        issue.rule_key,
        issue.text_range.line,
        issue.text_range.start_offset,
        issue.text_range.end_offset,
        issue.file_path,
        reason or "-",
    )


class IssueSensor:
    """Collects issues of one project from an InspectCode report."""

    def __init__(
        self,
        language: Language | str = Language.CSHARP,
        *,
        config: Config | None = None,
        log: "Logger | None" = None,
    ):
        self.profile = get_profile(language)
        self.config = config or Config()
        self._log = log or logger.bind(component="sensor", language=self.profile.language.value)

    def execute(self, report_path: Path, active_rule_keys: Iterable[str]) -> SensorResult:
        result = SensorResult()
        if not report_path.is_file():
            self._log.error("report_missing path={}", report_path)
            return result

        active = {key.strip() for key in active_rule_keys if key and key.strip()}
        if not active:
            self._log.info("rules_inactive repository={}", self.profile.repository_key)
            return result

        sensor = self.config.sensor
        if not sensor.validate_properties(self._log):
            self._log.warning("sensor_properties_incomplete action=skip")
            return result

        parser = self._parse(report_path, sensor)
        if parser is None:
            self._log.info("sensor_aborted report={} project={}", report_path, sensor.project_name)
            return result

        issues = parser.issues()
        if not issues:
            self._log.debug("issues_empty project={}", sensor.project_name)
            return result

        known = {rule.key for rule in parser.rule_definitions()}
        usable = active & known
        base_dir = sensor.solution_dir

        for issue in issues:
            if issue.rule_key not in usable:
                reason = f"rule {issue.rule_key} is not an active rule of this report"
                log_skipped_issue(self._log, issue, reason)
                result.skipped.append((issue, reason))
                continue
            if not issue.file_path:
                reason = "issue has no file"
                log_skipped_issue(self._log, issue, reason)
                result.skipped.append((issue, reason))
                continue
            absolute_path = base_dir / Path(issue.file_path.replace("\\", "/"))
            result.issues.append(ResolvedIssue(self.profile.repository_key, issue, absolute_path))

        self._log.info(
            "issues_collected project={} issues={} skipped={}",
            sensor.project_name,
            len(result.issues),
            len(result.skipped),
        )
        return result

    def _parse(self, report_path: Path, sensor: SensorConfig) -> InspectCodeReportParser | None:
        parser = InspectCodeReportParser(
            definition_filters=[is_not_null(), has_non_empty_description()],
            issue_filters=[is_not_null(), has_valid_issue_offset(), is_valid_line_number()],
            project_filters=[is_not_null(), project_name_equals(sensor.project_name)],
            filter_config=self.config.filters,
            log=self._log,
        )
        try:
            with open(report_path, "rb") as stream:
                if self.config.validation.enabled and not report_validator(self._log).validate(stream):
                    self._log.error("report_validation_failed path={}", report_path)
                    return None
                parser.parse(stream)
        except (OSError, ValueError, ReportParseError) as e:
            self._log.error("report_parse_failed path={} error={}", report_path, e)
            return None
        return parser


def collect_issues(
    report_path: Path,
    active_rule_keys: Iterable[str],
    *,
    language: Language | str = Language.CSHARP,
    config: Config | None = None,
) -> SensorResult:
    """Convenience wrapper around :class:`IssueSensor`."""
    return IssueSensor(language, config=config).execute(report_path, active_rule_keys)
