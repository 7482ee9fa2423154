"""Per-language rule repository profiles."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

from inspectsonar.config.defaults import (
    RULES_REPOSITORY_CSHARP_KEY,
    RULES_REPOSITORY_NAME,
    RULES_REPOSITORY_VBNET_KEY,
)
from inspectsonar.core.models import IssueTypeDefinition
from inspectsonar.predicates import (
    Predicate,
    has_non_empty_description,
    has_valid_issue_severity,
    is_csharp_definition,
    is_not_null,
    is_visual_basic_definition,
    is_web_related_category,
    negate,
)


class Language(StrEnum):
    CSHARP = "cs"
    VBNET = "vbnet"


@dataclass(frozen=True, slots=True)
class LanguageProfile:
    """Repository identity and issue type filters of one language."""

    language: Language
    display_name: str
    repository_key: str
    repository_name: str
    definition_filters: Callable[[], list[Predicate[IssueTypeDefinition]]]


def _csharp_filters() -> list[Predicate[IssueTypeDefinition]]:
    return [
        is_not_null(),
        has_valid_issue_severity(),
        has_non_empty_description(),
        is_csharp_definition(),
        negate(is_visual_basic_definition()),
        negate(is_web_related_category()),
    ]


def _vbnet_filters() -> list[Predicate[IssueTypeDefinition]]:
    return [
        is_not_null(),
        has_valid_issue_severity(),
        has_non_empty_description(),
        is_visual_basic_definition(),
        negate(is_web_related_category()),
    ]


PROFILES: dict[Language, LanguageProfile] = {
    Language.CSHARP: LanguageProfile(
        language=Language.CSHARP,
        display_name="C#",
        repository_key=RULES_REPOSITORY_CSHARP_KEY,
        repository_name=RULES_REPOSITORY_NAME,
        definition_filters=_csharp_filters,
    ),
    Language.VBNET: LanguageProfile(
        language=Language.VBNET,
        display_name="Visual Basic .NET",
        repository_key=RULES_REPOSITORY_VBNET_KEY,
        repository_name=RULES_REPOSITORY_NAME,
        definition_filters=_vbnet_filters,
    ),
}


def get_profile(language: Language | str) -> LanguageProfile:
    """Look up a profile by language key (``cs``/``vbnet``). Raises ``ValueError`` when unknown."""
    try:
        return PROFILES[Language(str(language).strip().lower())]
    except ValueError:
        known = ", ".join(item.value for item in Language)
        raise ValueError(f"unknown language {language!r}, expected one of: {known}") from None
