"""
Capacity Forecaster - Integrations

This module provides integrations with external services:
- Jira: open tickets, story points, due dates
"""

from .jira import JiraClient, JiraTicket, IssueStatus, OPEN_STATUSES

__all__ = [
    "JiraClient",
    "JiraTicket",
    "IssueStatus",
    "OPEN_STATUSES",
]
