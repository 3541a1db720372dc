"""
Configuration for the Capacity Forecaster.

Loads config.yaml and lets environment variables override it.
"""

import os
from typing import Optional

import yaml

from .models import TeamMember


class Config:
    """Load configuration from config.yaml and environment."""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path or os.getenv("CAPACITY_CONFIG", "config/config.yaml")
        self.config = {}

        if os.path.exists(self.config_path):
            with open(self.config_path) as f:
                self.config = yaml.safe_load(f) or {}

        # Override with environment variables
        self._load_env()

    def _load_env(self):
        """Load configuration from environment variables."""
        env_mapping = {
            "JIRA_URL": ("jira", "url"),
            "JIRA_EMAIL": ("jira", "email"),
            "JIRA_TOKEN": ("jira", "token"),
            "JIRA_PROJECT": ("jira", "project"),
            "FORECAST_DAYS_AHEAD": ("forecast", "days_ahead"),
        }

        for env_var, (section, key) in env_mapping.items():
            value = os.getenv(env_var)
            if value:
                if section not in self.config:
                    self.config[section] = {}
                self.config[section][key] = value

    def get(self, section: str, key: str, default=None):
        """Get configuration value."""
        return (self.config.get(section) or {}).get(key, default)

    @property
    def jira_url(self) -> Optional[str]:
        return self.get("jira", "url")

    @property
    def jira_email(self) -> Optional[str]:
        return self.get("jira", "email")

    @property
    def jira_token(self) -> Optional[str]:
        return self.get("jira", "token")

    @property
    def jira_project(self) -> Optional[str]:
        return self.get("jira", "project")

    @property
    def jira_configured(self) -> bool:
        return all([self.jira_url, self.jira_email, self.jira_token])

    @property
    def forecast_days_ahead(self) -> int:
        return int(self.get("forecast", "days_ahead", 14))

    @property
    def utilization_window_days(self) -> int:
        return int(self.get("forecast", "utilization_window_days", 30))

    @property
    def story_points(self) -> Optional[dict[int, float]]:
        mapping = self.config.get("story_points")
        if not mapping:
            return None
        return {int(k): float(v) for k, v in mapping.items()}

    @property
    def team_members(self) -> list[TeamMember]:
        """Roster seed from the team section."""
        members = []
        for entry in self.get("team", "members", []) or []:
            if isinstance(entry, str):
                members.append(TeamMember(name=entry))
                continue
            members.append(TeamMember(
                name=entry["name"],
                hours_per_day=float(entry.get("hours_per_day", 8)),
                capacity_multiplier=float(entry.get("capacity_multiplier", 1.0)),
                is_active=entry.get("is_active", True),
                email=entry.get("email"),
                role=entry.get("role"),
                team=entry.get("team"),
                skills=entry.get("skills"),
                notes=entry.get("notes"),
            ))
        return members
