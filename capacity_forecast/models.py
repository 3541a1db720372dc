"""
Capacity Data Model

Read-only snapshots of the roster and of work-item assignments, plus the
summaries computed from them.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Optional
from enum import Enum


DailyWorkload = dict[date, float]


class TaskStatus(Enum):
    """Lifecycle of a work-item assignment."""
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    ON_HOLD = "on_hold"
    BLOCKED = "blocked"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_active(self) -> bool:
        return self in ACTIVE_STATUSES


ACTIVE_STATUSES = frozenset({
    TaskStatus.NOT_STARTED,
    TaskStatus.IN_PROGRESS,
    TaskStatus.ON_HOLD,
    TaskStatus.BLOCKED,
})


@dataclass(frozen=True)
class TeamMember:
    """A person on the roster and their declared capacity."""
    name: str
    hours_per_day: float = 8.0
    capacity_multiplier: float = 1.0  # part-time / overtime adjustment
    is_active: bool = True
    end_date: Optional[date] = None
    email: Optional[str] = None
    role: Optional[str] = None
    team: Optional[str] = None
    start_date: Optional[date] = None
    skills: Optional[str] = None
    notes: Optional[str] = None

    @property
    def daily_capacity(self) -> float:
        """Effective hours per day."""
        return (self.hours_per_day or 0) * (self.capacity_multiplier or 0)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "team": self.team,
            "hours_per_day": self.hours_per_day,
            "capacity_multiplier": self.capacity_multiplier,
            "daily_capacity": round(self.daily_capacity, 2),
            "is_active": self.is_active,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "skills": self.skills,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class TaskAssignment:
    """One issue assigned to one team member."""
    issue_key: str
    assignee_name: str
    remaining_hours: Optional[float] = None
    start_date: Optional[date] = None
    estimated_completion_date: Optional[date] = None
    task_status: TaskStatus = TaskStatus.NOT_STARTED
    estimated_hours: Optional[float] = None
    is_blocked: bool = False
    blocking_reason: Optional[str] = None
    notes: Optional[str] = None
    id: Optional[int] = None

    @property
    def is_active(self) -> bool:
        return self.task_status.is_active

    @property
    def hours_left(self) -> float:
        """Remaining hours with unknown treated as zero."""
        if not self.remaining_hours or self.remaining_hours < 0:
            return 0.0
        return float(self.remaining_hours)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "issue_key": self.issue_key,
            "assignee_name": self.assignee_name,
            "estimated_hours": self.estimated_hours,
            "remaining_hours": self.remaining_hours,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "estimated_completion_date": (
                self.estimated_completion_date.isoformat()
                if self.estimated_completion_date else None
            ),
            "task_status": self.task_status.value,
            "is_blocked": self.is_blocked,
            "blocking_reason": self.blocking_reason,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class MemberCapacitySummary:
    """Capacity picture for one team member."""
    member_name: str
    role: Optional[str]
    team: Optional[str]
    daily_capacity_hours: float
    total_remaining_hours: float
    active_tasks: int
    estimated_available_date: Optional[date]
    upcoming_deadlines: tuple[TaskAssignment, ...] = field(default_factory=tuple)
    is_overloaded: bool = False
    utilization_percentage: float = 0.0

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "member_name": self.member_name,
            "role": self.role,
            "team": self.team,
            "daily_capacity_hours": round(self.daily_capacity_hours, 2),
            "total_remaining_hours": round(self.total_remaining_hours, 2),
            "active_tasks": self.active_tasks,
            "estimated_available_date": (
                self.estimated_available_date.isoformat()
                if self.estimated_available_date else None
            ),
            "upcoming_deadlines": [t.to_dict() for t in self.upcoming_deadlines],
            "is_overloaded": self.is_overloaded,
            "utilization_percentage": round(self.utilization_percentage, 2),
        }


@dataclass(frozen=True)
class ResourceAvailability:
    """Projected daily workload for one team member."""
    member_name: str
    role: Optional[str]
    team: Optional[str]
    daily_capacity: float
    workload_forecast: DailyWorkload = field(default_factory=dict)

    @property
    def peak_load(self) -> float:
        return max(self.workload_forecast.values(), default=0.0)

    def free_hours(self, day: date) -> float:
        """Unallocated capacity on a given day (never negative)."""
        return max(0.0, self.daily_capacity - self.workload_forecast.get(day, 0.0))

    def to_dict(self) -> dict:
        return {
            "member_name": self.member_name,
            "role": self.role,
            "team": self.team,
            "daily_capacity": round(self.daily_capacity, 2),
            "workload_forecast": {
                day.isoformat(): round(hours, 2)
                for day, hours in sorted(self.workload_forecast.items())
            },
        }
