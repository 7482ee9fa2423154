from pathlib import Path

import pytest

from inspectsonar.config.schema import Config
from inspectsonar.core.enums import SonarRuleType, SonarSeverity
from inspectsonar.rules.languages import Language, get_profile
from inspectsonar.rules.repository import load_rule_repository


def test_csharp_repository_applies_bundled_overrides(report_file: Path) -> None:
    repository = load_rule_repository(report_file, Language.CSHARP)

    assert repository.key == "resharper-clt-cs"
    assert repository.name == "InspectCode"
    assert sorted(rule.key for rule in repository.rules) == ["CS001", "RedundantUsingDirective"]
    assert repository.override_source == "bundled"

    redundant = repository.get("RedundantUsingDirective")
    assert redundant is not None
    assert (redundant.rule_type, redundant.severity) == (SonarRuleType.CODE_SMELL, SonarSeverity.INFO)
    assert "RedundantUsingDirective" in repository.merge.category_hits
    assert "RedundantUsingDirective" in repository.merge.rule_hits

    cs001 = repository.get("CS001")
    assert cs001 is not None
    assert (cs001.rule_type, cs001.severity) == (SonarRuleType.BUG, SonarSeverity.CRITICAL)


def test_explicit_override_file(report_file: Path, overrides_file: Path) -> None:
    repository = load_rule_repository(report_file, "cs", overrides_path=overrides_file)

    cs001 = repository.get("CS001")
    assert cs001 is not None
    assert (cs001.rule_type, cs001.severity) == (SonarRuleType.VULNERABILITY, SonarSeverity.CRITICAL)
    redundant = repository.get("RedundantUsingDirective")
    assert redundant is not None
    assert (redundant.rule_type, redundant.severity) == (SonarRuleType.BUG, SonarSeverity.MAJOR)
    assert repository.override_source == str(overrides_file)


def test_vbnet_repository_keeps_only_visual_basic_rules(report_file: Path) -> None:
    repository = load_rule_repository(report_file, Language.VBNET)
    assert repository.key == "resharper-clt-vbnet"
    assert [rule.key for rule in repository.rules] == ["VBPossibleMistakenCallToGetType.1"]


def test_missing_report_yields_empty_repository(tmp_path: Path, log_messages: list[str]) -> None:
    repository = load_rule_repository(tmp_path / "missing.xml")
    assert repository.rules == []
    assert any(message.startswith("ERROR report_missing") for message in log_messages)


def test_broken_report_yields_empty_repository(tmp_path: Path, log_messages: list[str]) -> None:
    report = tmp_path / "broken.xml"
    report.write_text('<Report><IssueTypes><IssueType Id="CS001" Description="x"></Report>')
    repository = load_rule_repository(report)
    assert repository.rules == []
    assert any(message.startswith("ERROR report_parse_failed") for message in log_messages)


def test_validation_gate_blocks_invalid_report(tmp_path: Path, log_messages: list[str]) -> None:
    report = tmp_path / "invalid.xml"
    report.write_text('<Report><IssueTypes><IssueType Id="CS001" Description="x" Severity="LOUD"/></IssueTypes></Report>')
    config = Config()
    config.validation.enabled = True

    assert load_rule_repository(report, config=config).rules == []
    assert any(message.startswith("ERROR report_validation_failed") for message in log_messages)


def test_validation_gate_passes_valid_report(report_file: Path) -> None:
    config = Config()
    config.validation.enabled = True
    repository = load_rule_repository(report_file, config=config)
    assert len(repository.rules) == 2


def test_unknown_language_is_rejected() -> None:
    with pytest.raises(ValueError):
        get_profile("fortran")


def test_profile_lookup_ignores_case_and_padding() -> None:
    profile = get_profile(" VBNET ")
    assert profile.language is Language.VBNET
    assert (profile.repository_key, profile.display_name) == ("resharper-clt-vbnet", "Visual Basic .NET")
