"""Centralized defaults for configuration files and bundled resources."""

from __future__ import annotations

from copy import deepcopy
from typing import Any

OVERRIDE_FILE_NAME = "sonarqube_rule_overrides.xml"
OVERRIDE_FILE_ENV_VAR = "SONAR_PLUGIN_INSPECTCODE_OVERRIDEFILE"

REPORT_SCHEMA_RESOURCE = "inspectcode_report.xsd"
OVERRIDES_SCHEMA_RESOURCE = "rule_overrides.xsd"
SCHEMA_NAMESPACE = "urn:inspectsonar:xml"

RULES_REPOSITORY_CSHARP_KEY = "resharper-clt-cs"
RULES_REPOSITORY_VBNET_KEY = "resharper-clt-vbnet"
RULES_REPOSITORY_NAME = "InspectCode"

DEFAULT_VALIDATION: dict[str, Any] = {
    "enabled": False,
}

DEFAULT_OVERRIDES: dict[str, Any] = {
    "file_name": OVERRIDE_FILE_NAME,
    "env_var": OVERRIDE_FILE_ENV_VAR,
    "use_bundled_default": True,
}

DEFAULT_FILTERS: dict[str, Any] = {
    "empty_definition_filters": "reject",
    "empty_issue_filters": "reject",
    "empty_project_filters": "reject",
}


def apply_missing_defaults(data: dict[str, Any]) -> dict[str, Any]:
    """Fill absent top-level sections of a snake_case config payload in place."""
    for section, defaults in (
        ("validation", DEFAULT_VALIDATION),
        ("overrides", DEFAULT_OVERRIDES),
        ("filters", DEFAULT_FILTERS),
    ):
        current = data.get(section)
        if not isinstance(current, dict):
            data[section] = deepcopy(defaults)
            continue
        for key, value in defaults.items():
            current.setdefault(key, deepcopy(value))
    return data
