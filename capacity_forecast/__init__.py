"""
Capacity Forecaster

Turns issue-tracker assignments into per-person workload forecasts,
utilization and overload figures.
"""

__version__ = "1.0.0"

from .models import (
    TeamMember,
    TaskAssignment,
    TaskStatus,
    ACTIVE_STATUSES,
    MemberCapacitySummary,
    ResourceAvailability,
)

from .forecaster import (
    CapacityPlanner,
    RosterProvider,
    WorkItemProvider,
    spread_effort,
    merge_workloads,
    days_to_complete,
    calculate_member_capacity,
    calculate_utilization,
    forecast_workload,
    team_capacity_summary,
)

from .store import InMemoryStore

from .visualizer import (
    Visualizer,
    TextReporter,
    CSVExporter,
)

__all__ = [
    # Version
    "__version__",

    # Models
    "TeamMember",
    "TaskAssignment",
    "TaskStatus",
    "ACTIVE_STATUSES",
    "MemberCapacitySummary",
    "ResourceAvailability",

    # Forecaster
    "CapacityPlanner",
    "RosterProvider",
    "WorkItemProvider",
    "spread_effort",
    "merge_workloads",
    "days_to_complete",
    "calculate_member_capacity",
    "calculate_utilization",
    "forecast_workload",
    "team_capacity_summary",

    # Store
    "InMemoryStore",

    # Visualizer
    "Visualizer",
    "TextReporter",
    "CSVExporter",
]
