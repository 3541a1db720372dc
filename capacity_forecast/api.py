"""
FastAPI Backend for the Capacity Forecaster

Provides REST API for capacity summaries, workload forecasts and roster
management.
"""

import logging
from datetime import date, datetime
from typing import Optional
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from .config import Config
from .forecaster import CapacityPlanner, forecast_workload
from .integrations import JiraClient
from .models import TaskAssignment, TaskStatus, TeamMember
from .store import InMemoryStore
from .sync import sync_jira_assignments
from .visualizer import Visualizer

logger = logging.getLogger(__name__)


# Global instances
config = Config()
store = InMemoryStore(members=config.team_members)
visualizer = Visualizer()
clock = date.today


def get_planner() -> CapacityPlanner:
    return CapacityPlanner(
        roster=store,
        work_items=store,
        clock=clock,
        window_days=config.utilization_window_days
    )


# Pydantic models for API
class TeamMemberIn(BaseModel):
    name: str
    email: Optional[str] = None
    role: Optional[str] = None
    team: Optional[str] = None
    hours_per_day: float = Field(8.0, ge=0)
    capacity_multiplier: float = Field(1.0, ge=0)
    is_active: bool = True
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    skills: Optional[str] = None
    notes: Optional[str] = None

    def to_member(self) -> TeamMember:
        return TeamMember(**self.model_dump())


class TaskAssignmentIn(BaseModel):
    issue_key: str
    assignee_name: str
    estimated_hours: Optional[float] = Field(None, ge=0)
    remaining_hours: Optional[float] = Field(None, ge=0)
    start_date: Optional[date] = None
    estimated_completion_date: Optional[date] = None
    task_status: TaskStatus = TaskStatus.NOT_STARTED
    is_blocked: bool = False
    blocking_reason: Optional[str] = None
    notes: Optional[str] = None

    def to_assignment(self) -> TaskAssignment:
        return TaskAssignment(**self.model_dump())


# Lifespan context manager
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info("Capacity Forecaster API starting up with %d team members", len(store.list_members()))
    yield
    logger.info("Capacity Forecaster API shutting down")


# Create FastAPI app
app = FastAPI(
    title="Capacity Forecaster",
    description="API for team capacity summaries and workload forecasts",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Health check
@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "integrations": {
            "jira": config.jira_configured
        }
    }


# Capacity endpoints
@app.get("/api/capacity/team-summary")
async def get_team_capacity_summary():
    """Get capacity summary for every active team member."""
    return [s.to_dict() for s in get_planner().team_capacity_summary()]


@app.get("/api/capacity/team-summary/{member_name}")
async def get_member_capacity_summary(member_name: str):
    """Get capacity summary for one team member."""
    try:
        return get_planner().member_capacity(member_name).to_dict()
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Member {member_name} not found")


@app.get("/api/capacity/overloaded")
async def get_overloaded_members():
    """Get team members with assignments they cannot finish in time."""
    overloaded = get_planner().overloaded_members()
    return {
        "count": len(overloaded),
        "members": [s.to_dict() for s in overloaded]
    }


@app.get("/api/capacity/resource-availability")
async def get_resource_availability(days_ahead: int = Query(30, ge=0)):
    """Get the daily workload forecast for every active team member."""
    forecasts = get_planner().resource_availability_forecast(days_ahead)
    return [f.to_dict() for f in forecasts]


@app.get("/api/capacity/workload-forecast/{assignee_name}")
async def get_workload_forecast(assignee_name: str, days_ahead: Optional[int] = Query(None, ge=0)):
    """Get the workload forecast for one team member."""
    member = store.get_member(assignee_name)
    if member is None:
        raise HTTPException(status_code=404, detail=f"Member {assignee_name} not found")

    days_ahead = config.forecast_days_ahead if days_ahead is None else days_ahead
    forecast = forecast_workload(member, store.active_tasks_for(member.name), days_ahead, clock())

    return {
        "assignee_name": member.name,
        "forecast_days": days_ahead,
        "workload": [t.to_dict() for t in store.active_tasks_for(member.name)],
        "forecast": forecast.to_dict()["workload_forecast"],
        "total_remaining_hours": store.total_remaining_hours(member.name)
    }


# Roster endpoints
@app.get("/api/capacity/team-members")
async def get_team_members():
    return [m.to_dict() for m in store.list_members()]


@app.post("/api/capacity/team-members")
async def create_team_member(member: TeamMemberIn):
    return store.add_member(member.to_member()).to_dict()


@app.put("/api/capacity/team-members/{member_name}")
async def update_team_member(member_name: str, member: TeamMemberIn):
    try:
        updated = store.update_member(member_name, member.to_member())
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))
    if updated is None:
        raise HTTPException(status_code=404, detail=f"Member {member_name} not found")
    return updated.to_dict()


# Assignment endpoints
@app.get("/api/capacity/assignments")
async def get_assignments():
    return [a.to_dict() for a in store.list_assignments()]


@app.get("/api/capacity/assignments/assignee/{assignee_name}")
async def get_assignments_by_assignee(assignee_name: str):
    return [a.to_dict() for a in store.assignments_for(assignee_name)]


@app.post("/api/capacity/assignments")
async def create_assignment(assignment: TaskAssignmentIn):
    return store.add_assignment(assignment.to_assignment()).to_dict()


@app.put("/api/capacity/assignments/{assignment_id}")
async def update_assignment(assignment_id: int, assignment: TaskAssignmentIn):
    updated = store.update_assignment(assignment_id, assignment.to_assignment())
    if updated is None:
        raise HTTPException(status_code=404, detail=f"Assignment {assignment_id} not found")
    return updated.to_dict()


@app.get("/api/capacity/overdue-tasks")
async def get_overdue_tasks():
    return [a.to_dict() for a in store.overdue_tasks(clock())]


@app.get("/api/capacity/blocked-tasks")
async def get_blocked_tasks():
    return [a.to_dict() for a in store.blocked_tasks()]


@app.get("/api/capacity/team-stats")
async def get_team_stats():
    return store.team_stats(clock())


# Jira sync
@app.post("/api/capacity/sync-jira")
async def sync_jira():
    """Pull open Jira tickets into the roster and assignment store."""
    if not config.jira_configured:
        raise HTTPException(status_code=400, detail="Jira not configured")

    try:
        jira_client = JiraClient(
            url=config.jira_url,
            email=config.jira_email,
            token=config.jira_token,
            project=config.jira_project
        )
        tickets = await jira_client.get_active_tickets()
        result = sync_jira_assignments(store, tickets, clock(), config.story_points)

        return {"status": "success", **result.to_dict()}

    except Exception as e:
        logger.exception("Error syncing Jira assignments")
        raise HTTPException(status_code=500, detail=f"Failed to sync: {e}")


# Report endpoints
@app.get("/api/reports/capacity/text")
async def get_capacity_text_report():
    """Get text report for team capacity."""
    summaries = get_planner().team_capacity_summary()
    return {"report": visualizer.team_report(summaries, clock(), format="text")}


@app.get("/api/reports/capacity/csv", response_class=PlainTextResponse)
async def get_capacity_csv_report():
    """Get CSV export of team capacity."""
    summaries = get_planner().team_capacity_summary()
    return visualizer.team_report(summaries, clock(), format="csv")


@app.get("/api/reports/forecast/csv", response_class=PlainTextResponse)
async def get_forecast_csv_report(days_ahead: int = Query(14, ge=0)):
    """Get CSV export of the resource availability forecast."""
    forecasts = get_planner().resource_availability_forecast(days_ahead)
    return visualizer.forecast_report(forecasts, clock(), days_ahead, format="csv")


# Run with: uvicorn capacity_forecast.api:app --reload
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
