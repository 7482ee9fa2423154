"""Rule override documents and the merge engine applying them."""

from inspectsonar.overrides.engine import MergeReport, OverrideMergeEngine
from inspectsonar.overrides.loader import OverrideSet, load_overrides, resolve_override_path

__all__ = [
    "MergeReport",
    "OverrideMergeEngine",
    "OverrideSet",
    "load_overrides",
    "resolve_override_path",
]
