from .changes import PlannedChange, planned_changes, pretty_ref
from .console_reporter import report_discovered_actions, report_planned_changes, report_pinned

__all__ = [
    "PlannedChange",
    "planned_changes",
    "pretty_ref",
    "report_discovered_actions",
    "report_planned_changes",
    "report_pinned",
]
