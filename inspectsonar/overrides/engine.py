"""Override merge engine.

Patches the type and severity of already derived rule definitions in two
ordered passes. Category overrides are applied first; rule overrides are
applied second and therefore win for rules matched by both.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from loguru import logger

from inspectsonar.core.models import CategoryOverride, RuleDefinition, RuleOverride

if TYPE_CHECKING:
    from loguru import Logger


@dataclass(slots=True)
class MergeReport:
    """What a merge changed."""

    category_hits: list[str] = field(default_factory=list)
    rule_hits: list[str] = field(default_factory=list)
    unused_rule_overrides: list[str] = field(default_factory=list)

    @property
    def changed(self) -> int:
        return len(set(self.category_hits) | set(self.rule_hits))


def _category_lookup(overrides: Iterable[CategoryOverride], log: "Logger") -> dict[str, CategoryOverride]:
    lookup: dict[str, CategoryOverride] = {}
    for override in overrides:
        if override.key in lookup:
            log.warning("category_override_duplicate category_id={} kept=last", override.key)
        lookup[override.key] = override
    return lookup


def _rule_lookup(overrides: Iterable[RuleOverride], log: "Logger") -> dict[str, RuleOverride]:
    lookup: dict[str, RuleOverride] = {}
    for override in overrides:
        if override.key in lookup:
            log.warning("rule_override_duplicate key={} kept=last", override.key)
        lookup[override.key] = override
    return lookup


class OverrideMergeEngine:
    """Applies category and rule overrides to rule definitions in place."""

    def __init__(self, *, log: "Logger | None" = None):
        self._log = log or logger.bind(component="override_engine")

    def apply(
        self,
        rules: Sequence[RuleDefinition],
        category_overrides: Iterable[CategoryOverride] = (),
        rule_overrides: Iterable[RuleOverride] = (),
    ) -> MergeReport:
        report = MergeReport()
        if not rules:
            return report

        self._apply_categories(rules, _category_lookup(category_overrides, self._log), report)
        self._apply_rules(rules, _rule_lookup(rule_overrides, self._log), report)

        self._log.debug(
            "overrides_applied category_hits={} rule_hits={} unused_rule_overrides={}",
            len(report.category_hits),
            len(report.rule_hits),
            len(report.unused_rule_overrides),
        )
        return report

    def _apply_categories(
        self,
        rules: Sequence[RuleDefinition],
        lookup: dict[str, CategoryOverride],
        report: MergeReport,
    ) -> None:
        self._log.debug("category_overrides_found count={}", len(lookup))
        if not lookup:
            return
        for rule in rules:
            if rule.category_id is None:
                continue
            override = lookup.get(rule.category_id)
            if override is None:
                continue
            self._log.debug("category_override_applied rule={} category_id={}", rule.key, rule.category_id)
            override.apply_to(rule)
            report.category_hits.append(rule.key)

    def _apply_rules(
        self,
        rules: Sequence[RuleDefinition],
        lookup: dict[str, RuleOverride],
        report: MergeReport,
    ) -> None:
        self._log.debug("rule_overrides_found count={}", len(lookup))
        for rule in rules:
            if not lookup:
                self._log.debug("rule_overrides_exhausted")
                break
            # Consumed entries are removed so the pass can stop early.
            override = lookup.pop(rule.key, None)
            if override is None:
                continue
            self._log.debug("rule_override_applied rule={}", rule.key)
            override.apply_to(rule)
            report.rule_hits.append(rule.key)
        report.unused_rule_overrides.extend(lookup)
