"""Rule repositories built from InspectCode issue type definitions."""

from inspectsonar.rules.languages import PROFILES, Language, LanguageProfile, get_profile
from inspectsonar.rules.repository import RuleRepository, load_rule_repository, parse_rule_definitions

__all__ = [
    "PROFILES",
    "Language",
    "LanguageProfile",
    "RuleRepository",
    "get_profile",
    "load_rule_repository",
    "parse_rule_definitions",
]
