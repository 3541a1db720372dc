"""
Capacity Forecaster

Spreads remaining effort across each assignment's date range and reduces a
member's active work into utilization, overload and availability figures.
"""

import logging
import math
from datetime import date, timedelta
from typing import Callable, Iterable, Optional, Protocol

from .models import (
    DailyWorkload,
    MemberCapacitySummary,
    ResourceAvailability,
    TaskAssignment,
    TeamMember,
)

logger = logging.getLogger(__name__)

UTILIZATION_WINDOW_DAYS = 30

# Malformed assignment data surfaces as one of these
_DATA_ERRORS = (ArithmeticError, LookupError, TypeError, ValueError, AttributeError)


class RosterProvider(Protocol):
    """Supplies the people whose capacity is planned."""

    def active_members(self) -> list[TeamMember]:
        ...


class WorkItemProvider(Protocol):
    """Supplies the open assignments of a person."""

    def active_tasks_for(self, assignee_name: str) -> list[TaskAssignment]:
        ...


def spread_effort(
    task: TaskAssignment,
    today: date,
    until: Optional[date] = None
) -> DailyWorkload:
    """
    Distribute a task's remaining hours evenly over its date range.

    The range runs from the start date (today when unset) to the estimated
    completion date, both inclusive. Tasks with no remaining hours, no
    completion date, or a completion date before the start produce an empty
    map.

    Args:
        task: Assignment to spread
        today: Current date, used when the task has no start date
        until: Optional last date to emit; the per-day share is still
            computed over the full range

    Returns:
        Mapping of date to hours
    """
    end = task.estimated_completion_date
    hours = task.hours_left
    if end is None or hours <= 0:
        return {}

    start = task.start_date or today
    if end < start:
        return {}

    span_days = (end - start).days + 1
    share = hours / span_days

    last = end if until is None else min(end, until)
    if last < start:
        return {}

    # Offsets never step past `last`, so date.max is a valid completion date
    return {
        start + timedelta(days=offset): share
        for offset in range((last - start).days + 1)
    }


def merge_workloads(*workloads: DailyWorkload) -> DailyWorkload:
    """Union daily workloads, summing hours on shared dates."""
    merged: DailyWorkload = {}
    for workload in workloads:
        for day, hours in workload.items():
            merged[day] = merged.get(day, 0.0) + hours
    return merged


def days_to_complete(total_remaining_hours: float, daily_capacity: float) -> Optional[int]:
    """
    Whole days needed to burn down the remaining hours.

    A partial day still consumes a full day. Returns None when work remains
    but there is no capacity to do it.
    """
    if total_remaining_hours <= 0:
        return 0
    if daily_capacity <= 0:
        return None
    return math.ceil(total_remaining_hours / daily_capacity)


def is_task_overloaded(task: TaskAssignment, daily_capacity: float, today: date) -> bool:
    """Check whether a task needs more than the daily capacity to meet its deadline."""
    deadline = task.estimated_completion_date
    if deadline is None:
        return False

    hours = task.hours_left
    days_available = (deadline - today).days + 1
    if days_available <= 0:
        # Past due: any outstanding work cannot be met
        return hours > 0

    return hours / days_available > daily_capacity


def calculate_utilization(
    tasks: Iterable[TaskAssignment],
    daily_capacity: float,
    today: date,
    window_days: int = UTILIZATION_WINDOW_DAYS
) -> float:
    """
    Average projected daily load as a percentage of capacity, capped at 100.

    The average only covers dates that carry work inside the window.
    """
    if daily_capacity <= 0:
        return 0.0

    window_end = today + timedelta(days=window_days)
    workload = merge_workloads(*(spread_effort(t, today, until=window_end) for t in tasks))
    if not workload:
        return 0.0

    average = sum(workload.values()) / len(workload)
    return min(100.0, (average / daily_capacity) * 100)


def calculate_member_capacity(
    member: TeamMember,
    tasks: Iterable[TaskAssignment],
    today: date,
    window_days: int = UTILIZATION_WINDOW_DAYS
) -> MemberCapacitySummary:
    """
    Reduce a member's active assignments to a capacity summary.

    Args:
        member: Team member
        tasks: The member's assignments; inactive ones are ignored
        today: Current date
        window_days: Forward window for utilization

    Returns:
        MemberCapacitySummary
    """
    active = [t for t in tasks if t.is_active]
    capacity = member.daily_capacity

    total_remaining = sum(t.hours_left for t in active)
    days_needed = days_to_complete(total_remaining, capacity)
    try:
        available_from = today + timedelta(days=days_needed) if days_needed is not None else None
    except OverflowError:
        # Beyond the last representable date
        available_from = None

    upcoming = sorted(
        (t for t in active
         if t.estimated_completion_date is not None and t.estimated_completion_date > today),
        key=lambda t: t.estimated_completion_date
    )

    return MemberCapacitySummary(
        member_name=member.name,
        role=member.role,
        team=member.team,
        daily_capacity_hours=capacity,
        total_remaining_hours=total_remaining,
        active_tasks=len(active),
        estimated_available_date=available_from,
        upcoming_deadlines=tuple(upcoming),
        is_overloaded=any(is_task_overloaded(t, capacity, today) for t in active),
        utilization_percentage=calculate_utilization(active, capacity, today, window_days),
    )


def forecast_workload(
    member: TeamMember,
    tasks: Iterable[TaskAssignment],
    days_ahead: int,
    today: date,
    clip: bool = True
) -> ResourceAvailability:
    """
    Project a member's daily workload.

    Each task is spread over its own full date range. With ``clip`` set,
    only the ``days_ahead`` dates starting today are reported.

    Args:
        member: Team member
        tasks: The member's assignments; inactive ones are ignored
        days_ahead: Horizon length in days
        today: Current date
        clip: Restrict the result to the horizon

    Returns:
        ResourceAvailability with the merged daily workload
    """
    if days_ahead < 0:
        raise ValueError(f"days_ahead must be >= 0, got {days_ahead}")

    until = today + timedelta(days=days_ahead - 1) if clip else None
    workload = merge_workloads(*(spread_effort(t, today, until=until) for t in tasks if t.is_active))

    if clip:
        workload = {day: hours for day, hours in workload.items() if day >= today}

    return ResourceAvailability(
        member_name=member.name,
        role=member.role,
        team=member.team,
        daily_capacity=member.daily_capacity,
        workload_forecast=workload,
    )


class CapacityPlanner:
    """
    Runs the capacity calculations across the roster.

    Usage:
        planner = CapacityPlanner(roster=store, work_items=store)
        summaries = planner.team_capacity_summary()
        forecast = planner.resource_availability_forecast(days_ahead=30)
    """

    def __init__(
        self,
        roster: RosterProvider,
        work_items: WorkItemProvider,
        clock: Callable[[], date] = date.today,
        window_days: int = UTILIZATION_WINDOW_DAYS
    ):
        self.roster = roster
        self.work_items = work_items
        self.clock = clock
        self.window_days = window_days

    def _members(self) -> list[TeamMember]:
        # One entry per name even if the provider repeats a member
        seen = {}
        for member in self.roster.active_members():
            seen.setdefault(member.name, member)
        return list(seen.values())

    def _usable_tasks(self, member: TeamMember, today: date) -> list[TaskAssignment]:
        """
        The member's assignments that can be calculated.

        Assignments with malformed data are logged and left out; if the
        provider fails for the member, the member is treated as having no
        assignments.
        """
        try:
            tasks = list(self.work_items.active_tasks_for(member.name))
        except _DATA_ERRORS:
            logger.exception("Could not load assignments for %s", member.name)
            return []

        usable = []
        for task in tasks:
            try:
                if not task.is_active:
                    continue
                spread_effort(task, today, until=today)
                is_task_overloaded(task, 0.0, today)
            except _DATA_ERRORS:
                logger.exception(
                    "Ignoring assignment %s for %s",
                    getattr(task, "issue_key", "?"), member.name
                )
                continue
            usable.append(task)
        return usable

    def member_capacity(self, name: str, today: Optional[date] = None) -> MemberCapacitySummary:
        """Capacity summary for one active member, KeyError if unknown."""
        today = today or self.clock()
        for member in self._members():
            if member.name.lower() == name.lower():
                tasks = self._usable_tasks(member, today)
                return calculate_member_capacity(member, tasks, today, self.window_days)
        raise KeyError(name)

    def team_capacity_summary(self, today: Optional[date] = None) -> list[MemberCapacitySummary]:
        """Capacity summary for every active member."""
        today = today or self.clock()
        return [
            calculate_member_capacity(member, self._usable_tasks(member, today), today, self.window_days)
            for member in self._members()
        ]

    def resource_availability_forecast(
        self,
        days_ahead: int,
        today: Optional[date] = None
    ) -> list[ResourceAvailability]:
        """Workload forecast for every active member."""
        if days_ahead < 0:
            raise ValueError(f"days_ahead must be >= 0, got {days_ahead}")

        today = today or self.clock()
        return [
            forecast_workload(member, self._usable_tasks(member, today), days_ahead, today)
            for member in self._members()
        ]

    def overloaded_members(self, today: Optional[date] = None) -> list[MemberCapacitySummary]:
        """Members with at least one assignment they cannot finish in time."""
        return [s for s in self.team_capacity_summary(today) if s.is_overloaded]


# Convenience function
def team_capacity_summary(
    roster: RosterProvider,
    work_items: WorkItemProvider,
    today: Optional[date] = None
) -> list[MemberCapacitySummary]:
    """
    Quick function to summarize team capacity.

    Example:
        summaries = team_capacity_summary(store, store)

        for s in summaries:
            print(f"{s.member_name}: {s.utilization_percentage:.0f}%")
    """
    planner = CapacityPlanner(roster=roster, work_items=work_items)
    return planner.team_capacity_summary(today)
