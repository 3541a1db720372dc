"""
Jira assignment sync.

Turns open Jira tickets into roster entries and task assignments.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Iterable, Optional

from .integrations.jira import IssueStatus, JiraTicket
from .models import TaskAssignment, TaskStatus, TeamMember
from .store import InMemoryStore

logger = logging.getLogger(__name__)

UNASSIGNED = "Unassigned"

DEFAULT_POINT_HOURS = {
    1: 4,    # half a day
    2: 8,
    3: 16,
    5: 32,
    8: 64,
    13: 104,
}

_STATUS_MAPPING = {
    IssueStatus.TO_DO: TaskStatus.NOT_STARTED,
    IssueStatus.IN_PROGRESS: TaskStatus.IN_PROGRESS,
    IssueStatus.IN_REVIEW: TaskStatus.IN_PROGRESS,
    IssueStatus.DONE: TaskStatus.COMPLETED,
    IssueStatus.CLOSED: TaskStatus.COMPLETED,
    IssueStatus.BLOCKED: TaskStatus.BLOCKED,
    IssueStatus.ON_HOLD: TaskStatus.ON_HOLD,
}


@dataclass
class SyncResult:
    """Outcome of one sync run."""
    issues_seen: int = 0
    members_created: list[str] = field(default_factory=list)
    assignments_created: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "issues_seen": self.issues_seen,
            "members_created": self.members_created,
            "assignments_created": self.assignments_created,
        }


def estimate_hours_from_story_points(
    story_points: Optional[float],
    point_hours: Optional[dict[int, float]] = None
) -> float:
    """Convert story points to hours; unknown sizes fall back to a day per point."""
    if story_points is None:
        return 8.0

    point_hours = point_hours or DEFAULT_POINT_HOURS
    if story_points in point_hours:
        return float(point_hours[story_points])
    return float(story_points) * 8


def map_issue_status(status: IssueStatus) -> TaskStatus:
    return _STATUS_MAPPING.get(status, TaskStatus.NOT_STARTED)


def estimate_completion(member: Optional[TeamMember], hours: float, today: date) -> date:
    """Date the member would finish the hours at full capacity."""
    if member is not None and member.daily_capacity > 0:
        return today + timedelta(days=math.ceil(hours / member.daily_capacity))
    return today + timedelta(days=int(hours // 8))


def default_member(name: str, today: date) -> TeamMember:
    return TeamMember(
        name=name,
        email=name.lower().replace(" ", ".") + "@company.com",
        role="Developer",
        team="Development",
        hours_per_day=8,
        capacity_multiplier=1.0,
        is_active=True,
        start_date=today,
        notes="Auto-created from Jira assignee",
    )


def sync_jira_assignments(
    store: InMemoryStore,
    tickets: Iterable[JiraTicket],
    today: date,
    point_hours: Optional[dict[int, float]] = None
) -> SyncResult:
    """
    Sync open Jira tickets into the store.

    Every assignee becomes a team member if not already on the roster, and
    every new (issue, assignee) pair becomes an assignment sized from its
    story points.

    Args:
        store: Roster and assignment store
        tickets: Jira tickets
        today: Current date
        point_hours: Story point to hours table

    Returns:
        SyncResult
    """
    logger.info("Syncing Jira assignments with capacity planning...")

    open_tickets = [
        t for t in tickets
        if t.is_open and t.assignee and t.assignee != UNASSIGNED
    ]
    result = SyncResult(issues_seen=len(open_tickets))

    for assignee in sorted({t.assignee for t in open_tickets}):
        if store.get_member(assignee) is None:
            store.add_member(default_member(assignee, today))
            result.members_created.append(assignee)
            logger.info("Created new team member for Jira assignee: %s", assignee)

    for ticket in open_tickets:
        if store.find_assignment(ticket.key, ticket.assignee) is not None:
            continue

        hours = estimate_hours_from_story_points(ticket.story_points, point_hours)
        completion = ticket.due_date or estimate_completion(store.get_member(ticket.assignee), hours, today)

        store.add_assignment(TaskAssignment(
            issue_key=ticket.key,
            assignee_name=ticket.assignee,
            estimated_hours=hours,
            remaining_hours=hours,
            start_date=today,
            estimated_completion_date=completion,
            task_status=map_issue_status(ticket.issue_status),
            is_blocked=ticket.is_blocked,
        ))
        result.assignments_created.append(ticket.key)
        logger.debug("Created new task assignment for issue %s assigned to %s", ticket.key, ticket.assignee)

    logger.info(
        "Synced %d issues with %d unique assignees",
        result.issues_seen, len({t.assignee for t in open_tickets})
    )
    return result
