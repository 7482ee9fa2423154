"""Acceptance predicates for parsed InspectCode records.

Every factory returns a pure, stateless callable. Predicates compose with
:func:`all_of` (logical AND, short-circuit, left to right) and :func:`negate`.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from typing import Any, Literal

from inspectsonar.core.enums import InspectCodeSeverity
from inspectsonar.core.models import IssueOccurrence, IssueTypeDefinition

type Predicate[T] = Callable[[T], bool]
type EmptyPredicatePolicy = Literal["accept", "reject"]

_CSHARP_ISSUE_ID = re.compile(
    r"^\s*(?!AngularHtml\.|Asp\.|Cpp|Css|Es\dFeature|Html\.|VB|Web\.|WebConfig\.)\S{3,}",
    re.IGNORECASE,
)
_VISUAL_BASIC_ISSUE_ID = re.compile(r"^\s*VB\S+", re.IGNORECASE)

_HIDDEN_SEVERITIES = frozenset({InspectCodeSeverity.DO_NOT_SHOW, InspectCodeSeverity.INVALID_SEVERITY})

WEB_RELATED_CATEGORY = "JsStrictModeErrors"


def _accept_all(_: Any) -> bool:
    return True


def _reject_all(_: Any) -> bool:
    return False


def all_of[T](
    predicates: Iterable[Predicate[T]] | None,
    *,
    empty: EmptyPredicatePolicy = "reject",
) -> Predicate[T]:
    """Combine ``predicates`` with a logical AND.

    ``None`` accepts everything. An empty collection follows ``empty``.
    """
    if predicates is None:
        return _accept_all
    chain = tuple(predicates)
    if not chain:
        return _accept_all if empty == "accept" else _reject_all
    if len(chain) == 1:
        return chain[0]

    def combined(item: T) -> bool:
        return all(predicate(item) for predicate in chain)

    return combined


def negate[T](predicate: Predicate[T]) -> Predicate[T]:
    """Return the logical negation of ``predicate``."""

    def negated(item: T) -> bool:
        return not predicate(item)

    return negated


def is_not_null() -> Predicate[Any]:
    return lambda item: item is not None


# Issue type definitions


def has_valid_issue_severity() -> Predicate[IssueTypeDefinition]:
    """Reject definitions InspectCode never shows (``DO_NOT_SHOW``/``INVALID_SEVERITY``)."""
    return lambda definition: definition.severity not in _HIDDEN_SEVERITIES


def has_non_empty_description() -> Predicate[IssueTypeDefinition]:
    return lambda definition: bool((definition.description or "").strip())


def is_csharp_definition() -> Predicate[IssueTypeDefinition]:
    """Match issue ids that are not prefixed by another language or web technology."""
    return lambda definition: _CSHARP_ISSUE_ID.fullmatch(definition.key) is not None


def is_visual_basic_definition() -> Predicate[IssueTypeDefinition]:
    return lambda definition: _VISUAL_BASIC_ISSUE_ID.match(definition.key) is not None


def is_web_related_category() -> Predicate[IssueTypeDefinition]:
    return lambda definition: (definition.category or "").strip().lower() == WEB_RELATED_CATEGORY.lower()


# Issue occurrences


def has_valid_issue_offset() -> Predicate[IssueOccurrence]:
    return lambda issue: issue.offset_start >= 0 and issue.offset_end >= issue.offset_start


def is_valid_line_number() -> Predicate[IssueOccurrence]:
    return lambda issue: issue.line >= 1


# Project names


def is_non_empty_name() -> Predicate[str]:
    return lambda name: bool((name or "").strip())


def project_name_equals(expected: str) -> Predicate[str]:
    """Match a project name ignoring case and surrounding whitespace."""
    wanted = (expected or "").strip().lower()
    return lambda name: name is not None and name.strip().lower() == wanted
