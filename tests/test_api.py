"""
Tests for the REST API.
"""

import pytest
from datetime import date, timedelta

from fastapi.testclient import TestClient

from capacity_forecast import api
from capacity_forecast.models import TaskAssignment, TaskStatus, TeamMember
from capacity_forecast.store import InMemoryStore


TODAY = date(2024, 6, 3)


@pytest.fixture
def store(monkeypatch):
    store = InMemoryStore(
        members=[
            TeamMember(name="Alice", role="Developer", team="Backend"),
            TeamMember(name="Bob", hours_per_day=4),
        ],
        assignments=[
            TaskAssignment(issue_key="A-1", assignee_name="Alice", remaining_hours=40,
                           start_date=TODAY, estimated_completion_date=TODAY + timedelta(days=4),
                           task_status=TaskStatus.IN_PROGRESS),
            TaskAssignment(issue_key="B-1", assignee_name="Bob", remaining_hours=40,
                           start_date=TODAY, estimated_completion_date=TODAY,
                           task_status=TaskStatus.BLOCKED),
        ]
    )
    monkeypatch.setattr(api, "store", store)
    monkeypatch.setattr(api, "clock", lambda: TODAY)
    return store


@pytest.fixture
def client(store):
    return TestClient(api.app)


class TestCapacityEndpoints:
    """Tests for capacity summary and forecast endpoints."""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_team_summary(self, client):
        response = client.get("/api/capacity/team-summary")

        assert response.status_code == 200
        by_name = {s["member_name"]: s for s in response.json()}
        assert set(by_name) == {"Alice", "Bob"}
        assert by_name["Alice"]["estimated_available_date"] == (TODAY + timedelta(days=5)).isoformat()
        assert by_name["Alice"]["is_overloaded"] is False
        assert by_name["Alice"]["utilization_percentage"] == 100.0
        assert by_name["Bob"]["is_overloaded"] is True

    def test_member_summary(self, client):
        assert client.get("/api/capacity/team-summary/alice").json()["member_name"] == "Alice"
        assert client.get("/api/capacity/team-summary/nobody").status_code == 404

    def test_overloaded(self, client):
        data = client.get("/api/capacity/overloaded").json()

        assert data["count"] == 1
        assert data["members"][0]["member_name"] == "Bob"

    def test_resource_availability(self, client):
        data = client.get("/api/capacity/resource-availability", params={"days_ahead": 2}).json()

        alice = next(f for f in data if f["member_name"] == "Alice")
        assert alice["workload_forecast"] == {
            TODAY.isoformat(): 8.0,
            (TODAY + timedelta(days=1)).isoformat(): 8.0,
        }

    def test_resource_availability_rejects_negative_horizon(self, client):
        response = client.get("/api/capacity/resource-availability", params={"days_ahead": -1})
        assert response.status_code == 422

    def test_workload_forecast(self, client):
        data = client.get("/api/capacity/workload-forecast/Alice", params={"days_ahead": 10}).json()

        assert data["forecast_days"] == 10
        assert data["total_remaining_hours"] == 40
        assert len(data["forecast"]) == 5
        assert data["workload"][0]["issue_key"] == "A-1"

    def test_workload_forecast_unknown_member(self, client):
        assert client.get("/api/capacity/workload-forecast/Nobody").status_code == 404


class TestRosterEndpoints:
    """Tests for member and assignment management."""

    def test_create_and_update_member(self, client, store):
        response = client.post("/api/capacity/team-members", json={"name": "Carol", "hours_per_day": 6})
        assert response.status_code == 200
        assert store.get_member("Carol").daily_capacity == 6

        response = client.put(
            "/api/capacity/team-members/Carol",
            json={"name": "Carol", "hours_per_day": 6, "capacity_multiplier": 0.5}
        )
        assert response.json()["daily_capacity"] == 3.0

        assert client.put("/api/capacity/team-members/Zed", json={"name": "Zed"}).status_code == 404

    def test_rename_member_conflict(self, client, store):
        response = client.put("/api/capacity/team-members/Alice", json={"name": "Bob"})

        assert response.status_code == 409
        assert store.get_member("Alice") is not None
        assert store.get_member("Bob").hours_per_day == 4

    def test_rename_member_keeps_workload(self, client, store):
        response = client.put("/api/capacity/team-members/Alice", json={"name": "Alicia"})
        assert response.status_code == 200

        summary = client.get("/api/capacity/team-summary/Alicia").json()
        assert summary["active_tasks"] == 1
        assert summary["total_remaining_hours"] == 40

    def test_create_assignment(self, client, store):
        response = client.post("/api/capacity/assignments", json={
            "issue_key": "A-2",
            "assignee_name": "Alice",
            "remaining_hours": 8,
            "estimated_completion_date": (TODAY + timedelta(days=3)).isoformat(),
            "task_status": "in_progress",
        })

        assert response.status_code == 200
        assert response.json()["id"] == 3
        assert len(store.active_tasks_for("Alice")) == 2

    def test_negative_hours_rejected(self, client):
        response = client.post("/api/capacity/assignments", json={
            "issue_key": "A-3", "assignee_name": "Alice", "remaining_hours": -5
        })
        assert response.status_code == 422

    def test_update_assignment(self, client):
        response = client.put("/api/capacity/assignments/1", json={
            "issue_key": "A-1", "assignee_name": "Alice", "task_status": "completed"
        })
        assert response.json()["task_status"] == "completed"
        assert client.put("/api/capacity/assignments/99", json={
            "issue_key": "X", "assignee_name": "Alice"
        }).status_code == 404

    def test_task_queries(self, client):
        assert [a["issue_key"] for a in client.get("/api/capacity/overdue-tasks").json()] == ["B-1"]
        assert [a["issue_key"] for a in client.get("/api/capacity/blocked-tasks").json()] == ["B-1"]
        assert len(client.get("/api/capacity/assignments/assignee/bob").json()) == 1

        stats = client.get("/api/capacity/team-stats").json()
        assert stats["total_members"] == 2
        assert stats["overdue_tasks"] == 1

    def test_sync_without_jira(self, client, monkeypatch):
        for var in ("JIRA_URL", "JIRA_EMAIL", "JIRA_TOKEN"):
            monkeypatch.delenv(var, raising=False)
        monkeypatch.setattr(api, "config", api.Config(config_path="does-not-exist.yaml"))

        assert client.post("/api/capacity/sync-jira").status_code == 400


class TestReportEndpoints:
    def test_text_report(self, client):
        report = client.get("/api/reports/capacity/text").json()["report"]
        assert "TEAM CAPACITY REPORT" in report

    def test_csv_report(self, client):
        response = client.get("/api/reports/capacity/csv")

        assert response.status_code == 200
        lines = response.text.strip().splitlines()
        assert lines[0].startswith("Member,Role,Team")
        assert len(lines) == 3

    def test_forecast_csv(self, client):
        lines = client.get("/api/reports/forecast/csv", params={"days_ahead": 3}).text.strip().splitlines()
        assert lines[0].split(",")[2] == TODAY.isoformat()
