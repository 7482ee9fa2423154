"""Issue sensors attaching report issues to project source files."""

from inspectsonar.sensors.issues import IssueSensor, ResolvedIssue, SensorResult, collect_issues

__all__ = ["IssueSensor", "ResolvedIssue", "SensorResult", "collect_issues"]
