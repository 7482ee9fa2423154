"""Rule repository pipeline: report -> definitions -> overrides -> rules."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from inspectsonar.config.schema import Config
from inspectsonar.core.models import RuleDefinition
from inspectsonar.overrides.engine import MergeReport, OverrideMergeEngine
from inspectsonar.overrides.loader import load_overrides
from inspectsonar.parsing.parser import InspectCodeReportParser, ReportParseError
from inspectsonar.parsing.validator import report_validator
from inspectsonar.rules.languages import Language, LanguageProfile, get_profile

if TYPE_CHECKING:
    from loguru import Logger


def _reject(_: object) -> bool:
    return False


@dataclass(slots=True)
class RuleRepository:
    """Rules of one language repository, overrides already applied."""

    profile: LanguageProfile
    rules: list[RuleDefinition] = field(default_factory=list)
    merge: MergeReport = field(default_factory=MergeReport)
    override_source: str | None = None

    @property
    def key(self) -> str:
        return self.profile.repository_key

    @property
    def name(self) -> str:
        return self.profile.repository_name

    def get(self, rule_key: str) -> RuleDefinition | None:
        for rule in self.rules:
            if rule.key == rule_key:
                return rule
        return None


def parse_rule_definitions(
    report_path: Path,
    profile: LanguageProfile,
    *,
    config: Config,
    log: "Logger",
) -> list[RuleDefinition]:
    """Parse issue type definitions of ``profile``'s language from a report.

    Issues are never collected here. Any failure is logged and yields no rules.
    """
    if not report_path.is_file():
        log.error("report_missing path={}", report_path)
        return []

    parser = InspectCodeReportParser(
        definition_filters=profile.definition_filters(),
        issue_filters=[_reject],
        project_filters=[_reject],
        filter_config=config.filters,
        log=log,
    )
    try:
        with open(report_path, "rb") as stream:
            if config.validation.enabled and not report_validator(log).validate(stream):
                log.error("report_validation_failed path={}", report_path)
                return []
            parser.parse(stream)
    except ReportParseError as e:
        log.error("report_parse_failed path={} error={}", report_path, e)
        return []
    except (OSError, ValueError) as e:
        log.error("report_read_failed path={} error={}", report_path, e)
        return []
    return parser.rule_definitions()


def load_rule_repository(
    report_path: Path,
    language: Language | str = Language.CSHARP,
    *,
    config: Config | None = None,
    overrides_path: Path | None = None,
    log: "Logger | None" = None,
) -> RuleRepository:
    """Build the rule repository of ``language`` from an InspectCode report."""
    cfg = config or Config()
    profile = get_profile(language)
    log = log or logger.bind(component="rules", language=profile.language.value)

    repository = RuleRepository(profile=profile)
    repository.rules = parse_rule_definitions(report_path, profile, config=cfg, log=log)
    if not repository.rules:
        log.info("rules_empty repository={} report={}", profile.repository_key, report_path)
        return repository

    overrides = load_overrides(
        overrides_path,
        config=cfg.overrides,
        validate=cfg.validation.enabled,
        log=log,
    )
    repository.override_source = overrides.source
    if overrides:
        repository.merge = OverrideMergeEngine(log=log).apply(
            repository.rules,
            overrides.category_overrides,
            overrides.rule_overrides,
        )

    log.info(
        "rules_loaded repository={} rules={} overridden={}",
        profile.repository_key,
        len(repository.rules),
        repository.merge.changed,
    )
    return repository
