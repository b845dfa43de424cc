"""Configuration management for tod."""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

TOD_HOME = Path(os.environ.get("TOD_HOME", Path.home() / "tod"))
CONFIG_FILE = TOD_HOME / "config" / "tod.conf"
STATE_FILE = TOD_HOME / "config" / ".state.json"

DEFAULT_API_URL = "https://api.todoist.com"
DEFAULT_FILTER = "today | overdue"


class ProjectNotFoundError(Exception):
    """Raised when a project name is not in the config."""

    pass


@dataclass
class Config:
    """tod configuration."""

    todoist_token: str = ""
    timezone: str = ""
    projects: dict[str, str] = field(default_factory=dict)
    api_url: str = DEFAULT_API_URL
    default_filter: str = DEFAULT_FILTER

    def _project_key(self, name: str) -> str:
        for project_name in self.projects:
            if project_name.lower() == name.lower():
                return project_name
        raise ProjectNotFoundError(f"Project {name} not found, please add it to {CONFIG_FILE}")

    def project_id(self, name: str) -> str:
        """Look up a configured project's Todoist id by name (case-insensitive)."""
        return self.projects[self._project_key(name)]

    def remove_project(self, name: str) -> str:
        """Drop a project from the config (not from Todoist). Returns its configured name."""
        key = self._project_key(name)
        del self.projects[key]
        return key


@dataclass
class State:
    """Per-user state carried between invocations."""

    next_id: str = ""

    def save(self, path: Path | None = None) -> None:
        """Save state to file."""
        path = path or STATE_FILE
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps({"next_id": self.next_id}))
        path.chmod(0o600)

    @classmethod
    def load(cls, path: Path | None = None) -> "State":
        """Load state from file."""
        path = path or STATE_FILE
        if not path.exists():
            return cls()
        try:
            data = json.loads(path.read_text())
            return cls(next_id=str(data.get("next_id") or ""))
        except (json.JSONDecodeError, AttributeError) as e:
            logger.warning(f"Ignoring unreadable state file {path}: {e}")
            return cls()


def _parse_projects(value: str) -> dict[str, str]:
    # JSON format: {"inbox": "2203306141", "work": "2203306142"}
    # Simple format: "inbox:2203306141,work:2203306142"
    projects: dict[str, str] = {}
    if value.startswith("{"):
        try:
            data = json.loads(value)
            for name, project_id in data.items():
                projects[str(name)] = str(project_id)
        except (json.JSONDecodeError, AttributeError) as e:
            logger.warning(f"Failed to parse PROJECTS JSON: {e}")
        return projects

    for entry in value.split(","):
        entry = entry.strip()
        if not entry:
            continue
        if ":" not in entry:
            logger.warning(f"Ignoring project without id: {entry}")
            continue
        name, project_id = entry.rsplit(":", 1)
        projects[name.strip()] = project_id.strip()
    return projects


def _unquote(value: str) -> str:
    # Handle quoted values with inline comments: "value" # comment
    for quote in ('"', "'"):
        if value.startswith(quote):
            end_quote = value.find(quote, 1)
            if end_quote != -1:
                return value[1:end_quote]
            return value[1:]
    # Unquoted: strip inline comments
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def load_config(path: Path | None = None) -> Config:
    """Load configuration from tod.conf, then apply environment overrides."""
    path = path or CONFIG_FILE
    config = Config()

    if path.exists():
        for line in path.read_text().splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue

            if "=" not in line:
                continue

            key, _, value = line.partition("=")
            key = key.strip().lower()
            value = _unquote(value.strip())

            match key:
                case "todoist_token":
                    config.todoist_token = value
                case "timezone":
                    config.timezone = value
                case "projects":
                    config.projects = _parse_projects(value)
                case "api_url":
                    config.api_url = value.rstrip("/")
                case "default_filter":
                    config.default_filter = value
                case _:
                    logger.debug(f"Unknown config key: {key}")

    if os.environ.get("TODOIST_TOKEN"):
        config.todoist_token = os.environ["TODOIST_TOKEN"]

    return config


def save_projects(projects: dict[str, str], path: Path | None = None) -> None:
    """Rewrite the PROJECTS line of tod.conf, leaving every other line alone."""
    path = path or CONFIG_FILE
    lines = path.read_text().splitlines() if path.exists() else []
    value = ",".join(f"{name}:{project_id}" for name, project_id in projects.items())
    projects_line = f'PROJECTS="{value}"'

    output = []
    written = False
    for line in lines:
        key = line.partition("=")[0].strip().lower()
        if "=" in line and key == "projects":
            if not written:
                output.append(projects_line)
                written = True
            continue
        output.append(line)
    if not written:
        output.append(projects_line)

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(output) + "\n")
    logger.debug(f"Saved {len(projects)} project(s) to {path}")
