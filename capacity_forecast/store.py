"""
In-memory roster and assignment store.

Serves as both the roster provider and the work-item provider for the
capacity planner. Nothing here is persisted.
"""

import itertools
import threading
from dataclasses import replace
from datetime import date
from typing import Optional

from .models import TaskAssignment, TaskStatus, TeamMember


class InMemoryStore:
    """
    Holds team members and task assignments.

    Usage:
        store = InMemoryStore()
        store.add_member(TeamMember(name="Alice"))
        store.add_assignment(TaskAssignment(issue_key="PROJ-1", assignee_name="Alice"))
    """

    def __init__(
        self,
        members: Optional[list[TeamMember]] = None,
        assignments: Optional[list[TaskAssignment]] = None
    ):
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._members: dict[str, TeamMember] = {}
        self._assignments: dict[int, TaskAssignment] = {}

        for member in members or []:
            self.add_member(member)
        for assignment in assignments or []:
            self.add_assignment(assignment)

    # Members

    def add_member(self, member: TeamMember) -> TeamMember:
        """Add or replace a member, keyed by name."""
        with self._lock:
            self._members[member.name.lower()] = member
        return member

    def update_member(self, name: str, member: TeamMember) -> Optional[TeamMember]:
        """
        Replace an existing member, None if unknown.

        A rename carries the member's assignments over to the new name.
        Raises ValueError if the new name belongs to another member.
        """
        old_key, new_key = name.lower(), member.name.lower()
        with self._lock:
            if old_key not in self._members:
                return None
            if new_key != old_key and new_key in self._members:
                raise ValueError(f"Member {member.name} already exists")

            del self._members[old_key]
            self._members[new_key] = member

            if new_key != old_key:
                for assignment_id, a in self._assignments.items():
                    if a.assignee_name.lower() == old_key:
                        self._assignments[assignment_id] = replace(a, assignee_name=member.name)
        return member

    def get_member(self, name: str) -> Optional[TeamMember]:
        return self._members.get(name.lower())

    def list_members(self) -> list[TeamMember]:
        return list(self._members.values())

    def active_members(self) -> list[TeamMember]:
        return [m for m in self._members.values() if m.is_active]

    # Assignments

    def add_assignment(self, assignment: TaskAssignment) -> TaskAssignment:
        """Store an assignment, giving it an id."""
        with self._lock:
            stored = replace(assignment, id=next(self._ids))
            self._assignments[stored.id] = stored
        return stored

    def update_assignment(self, assignment_id: int, assignment: TaskAssignment) -> Optional[TaskAssignment]:
        """Replace an existing assignment, None if unknown."""
        with self._lock:
            if assignment_id not in self._assignments:
                return None
            stored = replace(assignment, id=assignment_id)
            self._assignments[assignment_id] = stored
        return stored

    def get_assignment(self, assignment_id: int) -> Optional[TaskAssignment]:
        return self._assignments.get(assignment_id)

    def list_assignments(self) -> list[TaskAssignment]:
        return list(self._assignments.values())

    def find_assignment(self, issue_key: str, assignee_name: str) -> Optional[TaskAssignment]:
        for a in self._assignments.values():
            if a.issue_key == issue_key and a.assignee_name.lower() == assignee_name.lower():
                return a
        return None

    def assignments_for(self, assignee_name: str) -> list[TaskAssignment]:
        return [a for a in self._assignments.values() if a.assignee_name.lower() == assignee_name.lower()]

    def active_tasks_for(self, assignee_name: str) -> list[TaskAssignment]:
        return [a for a in self.assignments_for(assignee_name) if a.is_active]

    def overdue_tasks(self, as_of: date) -> list[TaskAssignment]:
        """Active assignments due on or before the given date."""
        return [
            a for a in self._assignments.values()
            if a.is_active
            and a.estimated_completion_date is not None
            and a.estimated_completion_date <= as_of
        ]

    def blocked_tasks(self) -> list[TaskAssignment]:
        return [
            a for a in self._assignments.values()
            if a.is_blocked or a.task_status == TaskStatus.BLOCKED
        ]

    def total_remaining_hours(self, assignee_name: str) -> float:
        return sum(a.hours_left for a in self.active_tasks_for(assignee_name))

    def team_stats(self, as_of: date) -> dict:
        return {
            "total_members": len(self._members),
            "active_members": len(self.active_members()),
            "total_assignments": len(self._assignments),
            "overdue_tasks": len(self.overdue_tasks(as_of)),
            "blocked_tasks": len(self.blocked_tasks()),
        }
