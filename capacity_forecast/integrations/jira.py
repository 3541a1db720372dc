"""
Jira Integration for the Capacity Forecaster

Pulls open tickets with story points and due dates from Jira.
"""

import os
from datetime import date, datetime
from typing import Optional
from dataclasses import dataclass, field
from enum import Enum

import httpx


class IssueStatus(Enum):
    """Jira workflow statuses understood by the planner."""
    TO_DO = "To Do"
    IN_PROGRESS = "In Progress"
    IN_REVIEW = "In Review"
    IN_QA = "In QA"
    QA_PASSED = "QA Passed"
    QA_FAILED = "QA Failed"
    IN_UAT = "In UAT"
    UAT_PASSED = "UAT Passed"
    UAT_FAILED = "UAT Failed"
    DONE = "Done"
    CLOSED = "Closed"
    BLOCKED = "Blocked"
    ON_HOLD = "On Hold"

    @classmethod
    def from_jira_status(cls, status: Optional[str]) -> "IssueStatus":
        """Normalize a free-text Jira status name; unknown names map to To Do."""
        if status is None:
            return cls.TO_DO
        return _STATUS_ALIASES.get(status.strip().lower(), cls.TO_DO)


_STATUS_ALIASES = {
    "to do": IssueStatus.TO_DO,
    "open": IssueStatus.TO_DO,
    "new": IssueStatus.TO_DO,
    "in progress": IssueStatus.IN_PROGRESS,
    "development": IssueStatus.IN_PROGRESS,
    "dev": IssueStatus.IN_PROGRESS,
    "in review": IssueStatus.IN_REVIEW,
    "code review": IssueStatus.IN_REVIEW,
    "review": IssueStatus.IN_REVIEW,
    "in qa": IssueStatus.IN_QA,
    "qa": IssueStatus.IN_QA,
    "testing": IssueStatus.IN_QA,
    "qa passed": IssueStatus.QA_PASSED,
    "tested": IssueStatus.QA_PASSED,
    "qa failed": IssueStatus.QA_FAILED,
    "testing failed": IssueStatus.QA_FAILED,
    "in uat": IssueStatus.IN_UAT,
    "uat": IssueStatus.IN_UAT,
    "user acceptance testing": IssueStatus.IN_UAT,
    "uat passed": IssueStatus.UAT_PASSED,
    "uat approved": IssueStatus.UAT_PASSED,
    "uat failed": IssueStatus.UAT_FAILED,
    "uat rejected": IssueStatus.UAT_FAILED,
    "done": IssueStatus.DONE,
    "resolved": IssueStatus.DONE,
    "complete": IssueStatus.DONE,
    "closed": IssueStatus.CLOSED,
    "blocked": IssueStatus.BLOCKED,
    "on hold": IssueStatus.ON_HOLD,
    "waiting": IssueStatus.ON_HOLD,
}

# Statuses whose tickets still need capacity
OPEN_STATUSES = (
    IssueStatus.TO_DO,
    IssueStatus.IN_PROGRESS,
    IssueStatus.IN_REVIEW,
    IssueStatus.BLOCKED,
    IssueStatus.ON_HOLD,
)


@dataclass
class JiraTicket:
    """Represents a Jira ticket/issue."""
    key: str
    summary: str
    status: str
    assignee: Optional[str]
    story_points: Optional[float] = None
    due_date: Optional[date] = None
    issue_type: str = "Task"
    priority: str = "Medium"
    labels: list[str] = field(default_factory=list)

    @property
    def issue_status(self) -> IssueStatus:
        return IssueStatus.from_jira_status(self.status)

    @property
    def is_open(self) -> bool:
        return self.issue_status in OPEN_STATUSES

    @property
    def is_blocked(self) -> bool:
        return self.issue_status == IssueStatus.BLOCKED or "blocked" in [l.lower() for l in self.labels]


def _parse_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00")[:10]).date()


class JiraClient:
    """
    Jira Cloud API client for fetching open tickets.

    Usage:
        client = JiraClient(
            url="https://company.atlassian.net",
            email="user@company.com",
            token="api_token"
        )
        tickets = await client.get_active_tickets("PROJ")
    """

    SEARCH_FIELDS = "summary,status,assignee,customfield_10016,duedate,issuetype,priority,labels"

    def __init__(
        self,
        url: Optional[str] = None,
        email: Optional[str] = None,
        token: Optional[str] = None,
        project: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.url = (url or os.getenv("JIRA_URL", "")).rstrip("/")
        self.email = email or os.getenv("JIRA_EMAIL")
        self.token = token or os.getenv("JIRA_TOKEN")
        self.project = project or os.getenv("JIRA_PROJECT")
        self.transport = transport

        if not all([self.url, self.email, self.token]):
            raise ValueError(
                "Jira credentials required. Set JIRA_URL, JIRA_EMAIL, JIRA_TOKEN env vars "
                "or pass them as parameters."
            )

        self.auth = (self.email, self.token)

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[dict] = None
    ) -> dict:
        """Make authenticated request to Jira API."""
        async with httpx.AsyncClient(transport=self.transport) as client:
            response = await client.request(
                method,
                f"{self.url}/rest/api/3{endpoint}",
                auth=self.auth,
                params=params,
                headers={"Accept": "application/json"},
                timeout=30.0
            )
            response.raise_for_status()
            return response.json() if response.content else {}

    @staticmethod
    def parse_issue(issue: dict) -> JiraTicket:
        """Build a JiraTicket from a search result entry."""
        fields = issue["fields"]
        assignee = fields.get("assignee")
        status = fields.get("status") or {}
        issue_type = fields.get("issuetype") or {}

        return JiraTicket(
            key=issue["key"],
            summary=fields.get("summary", ""),
            status=status.get("name", IssueStatus.TO_DO.value),
            assignee=assignee["displayName"] if assignee else None,
            story_points=fields.get("customfield_10016"),  # Story points field
            due_date=_parse_date(fields.get("duedate")),
            issue_type=issue_type.get("name", "Task"),
            priority=fields["priority"]["name"] if fields.get("priority") else "Medium",
            labels=fields.get("labels", [])
        )

    async def search_tickets(
        self,
        jql: str,
        max_results: int = 100
    ) -> list[JiraTicket]:
        """
        Search for tickets using JQL, following pagination.

        Args:
            jql: Jira Query Language string
            max_results: Page size
        """
        tickets = []
        start_at = 0

        while True:
            result = await self._request(
                "GET",
                "/search",
                params={
                    "jql": jql,
                    "startAt": start_at,
                    "maxResults": max_results,
                    "fields": self.SEARCH_FIELDS
                }
            )
            issues = result.get("issues", [])
            tickets.extend(self.parse_issue(issue) for issue in issues)

            start_at += len(issues)
            if not issues or start_at >= result.get("total", 0):
                break

        return tickets

    async def get_active_tickets(self, project: Optional[str] = None) -> list[JiraTicket]:
        """Get tickets that still need work."""
        project = project or self.project
        statuses = ", ".join(f'"{s.value}"' for s in OPEN_STATUSES)
        jql = f"status in ({statuses})"

        if project:
            jql = f"project = {project} AND {jql}"

        return await self.search_tickets(jql)
