"""
Tests for the Jira integration.
"""

import asyncio
from datetime import date

import httpx
import pytest

from capacity_forecast.integrations.jira import IssueStatus, JiraClient, JiraTicket


def _issue(key, status="In Progress", assignee="Alice", points=3, due="2024-06-10"):
    return {
        "key": key,
        "fields": {
            "summary": f"Work on {key}",
            "status": {"name": status},
            "assignee": {"displayName": assignee} if assignee else None,
            "customfield_10016": points,
            "duedate": due,
            "issuetype": {"name": "Story"},
            "priority": {"name": "High"},
            "labels": [],
        },
    }


class TestIssueStatus:
    """Tests for Jira status normalization."""

    def test_aliases(self):
        assert IssueStatus.from_jira_status("Open") == IssueStatus.TO_DO
        assert IssueStatus.from_jira_status("  Code Review ") == IssueStatus.IN_REVIEW
        assert IssueStatus.from_jira_status("waiting") == IssueStatus.ON_HOLD
        assert IssueStatus.from_jira_status("Resolved") == IssueStatus.DONE

    def test_unknown_and_missing(self):
        assert IssueStatus.from_jira_status("Triage") == IssueStatus.TO_DO
        assert IssueStatus.from_jira_status(None) == IssueStatus.TO_DO


class TestJiraTicket:
    """Tests for ticket helpers."""

    def test_open_and_blocked(self):
        ticket = JiraTicket(key="P-1", summary="x", status="Blocked", assignee="Alice")
        assert ticket.is_open
        assert ticket.is_blocked

    def test_done_is_not_open(self):
        ticket = JiraTicket(key="P-1", summary="x", status="Done", assignee="Alice")
        assert not ticket.is_open

    def test_blocked_label(self):
        ticket = JiraTicket(key="P-1", summary="x", status="In Progress", assignee="Alice", labels=["Blocked"])
        assert ticket.is_blocked


class TestJiraClient:
    """Tests for the Jira API client."""

    def test_requires_credentials(self, monkeypatch):
        monkeypatch.delenv("JIRA_URL", raising=False)
        monkeypatch.delenv("JIRA_EMAIL", raising=False)
        monkeypatch.delenv("JIRA_TOKEN", raising=False)

        with pytest.raises(ValueError):
            JiraClient()

    def test_parse_issue(self):
        ticket = JiraClient.parse_issue(_issue("PROJ-7"))

        assert ticket.key == "PROJ-7"
        assert ticket.assignee == "Alice"
        assert ticket.story_points == 3
        assert ticket.due_date == date(2024, 6, 10)
        assert ticket.issue_type == "Story"
        assert ticket.priority == "High"

    def test_parse_unassigned_without_due_date(self):
        ticket = JiraClient.parse_issue(_issue("PROJ-8", assignee=None, due=None))

        assert ticket.assignee is None
        assert ticket.due_date is None

    def test_search_follows_pages(self):
        """Test search keeps requesting until all results are read."""
        pages = {
            0: {"issues": [_issue("PROJ-1"), _issue("PROJ-2")], "total": 3},
            2: {"issues": [_issue("PROJ-3")], "total": 3},
        }
        seen_jql = []

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/rest/api/3/search"
            seen_jql.append(request.url.params["jql"])
            start_at = int(request.url.params["startAt"])
            return httpx.Response(200, json=pages[start_at])

        client = JiraClient(
            url="https://jira.example.com",
            email="bot@example.com",
            token="secret",
            project="PROJ",
            transport=httpx.MockTransport(handler)
        )

        tickets = asyncio.run(client.get_active_tickets())

        assert [t.key for t in tickets] == ["PROJ-1", "PROJ-2", "PROJ-3"]
        assert len(seen_jql) == 2
        assert seen_jql[0].startswith("project = PROJ AND status in (")

    def test_http_errors_propagate(self):
        client = JiraClient(
            url="https://jira.example.com",
            email="bot@example.com",
            token="secret",
            transport=httpx.MockTransport(lambda request: httpx.Response(401))
        )

        with pytest.raises(httpx.HTTPStatusError):
            asyncio.run(client.search_tickets("project = PROJ"))
