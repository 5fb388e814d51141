# contractor_dashboard/services/project_tracker.py
"""
Project status and progress tracking.

Progress history is append-only: an update produces a new list made of the
existing log entries followed by at most one new entry.
"""
import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import List, Optional

logger = logging.getLogger(__name__)

STATUSES = ("active", "completed", "on_hold")

STATUS_LABELS = {
    "active": "En curso",
    "completed": "Completado",
    "on_hold": "En pausa",
}

STATUS_ICONS = {
    "active": "🕒",
    "completed": "✅",
    "on_hold": "⏸️",
}


def parse_datetime(value):
    if value is None or isinstance(value, datetime):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return datetime.fromisoformat(text.replace('Z', '+00:00'))
    except ValueError:
        logger.warning(f"Could not parse date {value!r}")
        return None


def format_date(value, with_time=False):
    parsed = parse_datetime(value)
    if parsed is None:
        return "No definida"
    return parsed.strftime('%d/%m/%Y %H:%M' if with_time else '%d/%m/%Y')


def format_money(value):
    if value is None:
        return "-"
    return f"${value:,.2f}"


@dataclass(frozen=True)
class ProgressLog:
    date: str
    description: str
    progress: int

    @classmethod
    def from_dict(cls, data):
        return cls(
            date=str(data.get("date", "")),
            description=str(data.get("description", "")),
            progress=int(data.get("progress") or 0),
        )

    def to_dict(self):
        return {"date": self.date, "description": self.description, "progress": self.progress}


@dataclass(frozen=True)
class ProjectFile:
    id: str
    file_name: str
    file_url: str

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=str(data.get("id", "")),
            file_name=data.get("file_name") or "",
            file_url=data.get("file_url") or "",
        )


def clamp_progress(value):
    return max(0, min(100, int(float(value or 0))))


@dataclass(frozen=True)
class Project:
    id: str
    name: str
    status: str = "active"
    progress: int = 0
    description: str = ""
    client_id: Optional[str] = None
    address: str = ""
    project_type: str = ""
    value: float = 0.0
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    progress_logs: List[ProgressLog] = field(default_factory=list)
    workers: List[str] = field(default_factory=list)
    notes: List[str] = field(default_factory=list)
    files: List[ProjectFile] = field(default_factory=list)
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, row):
        return cls(
            id=str(row["id"]),
            name=row.get("name") or "",
            status=row.get("status") or "active",
            progress=clamp_progress(row.get("progress")),
            description=row.get("description") or "",
            client_id=row.get("client_id"),
            address=row.get("address") or "",
            project_type=row.get("project_type") or "",
            value=float(row.get("value") or 0),
            start_date=row.get("start_date"),
            end_date=row.get("end_date"),
            progress_logs=[ProgressLog.from_dict(log) for log in (row.get("progress_logs") or [])],
            workers=list(row.get("workers") or []),
            notes=list(row.get("notes") or []),
            files=[ProjectFile.from_dict(f) for f in (row.get("files") or [])],
            created_at=row.get("created_at"),
        )

    @property
    def status_label(self):
        return STATUS_LABELS.get(self.status, self.status)


def build_progress_update(project, new_progress, new_status, description=None, now=None):
    """
    Builds the column updates for a progress change.

    :param project: The current Project.
    :param new_progress: Integer percentage between 0 and 100.
    :param new_status: One of STATUSES.
    :param description: Optional note; when given, a log entry is appended.
    :param now: Timestamp for the log entry (defaults to the current UTC time).
    :return: A dict with 'progress', 'status' and, when logged, 'progress_logs'.
    """
    if isinstance(new_progress, bool) or not isinstance(new_progress, int):
        raise ValueError(f"Progress must be an integer, got {new_progress!r}")
    if not 0 <= new_progress <= 100:
        raise ValueError(f"Progress must be between 0 and 100, got {new_progress}")
    if new_status not in STATUSES:
        raise ValueError(f"Unknown project status '{new_status}'")

    updates = {"progress": new_progress, "status": new_status}
    if description and description.strip():
        timestamp = (now or datetime.now(timezone.utc)).isoformat()
        log = ProgressLog(date=timestamp, description=description.strip(), progress=new_progress)
        updates["progress_logs"] = [entry.to_dict() for entry in project.progress_logs] + [log.to_dict()]
    return updates


def apply_update(project, updates):
    changes = dict(updates)
    if "progress_logs" in changes:
        changes["progress_logs"] = [ProgressLog.from_dict(log) for log in changes["progress_logs"]]
    return replace(project, **changes)


def status_counts(projects):
    counts = {status: 0 for status in STATUSES}
    for project in projects:
        counts[project.status] = counts.get(project.status, 0) + 1
    return counts


def recent_activity(projects, limit=5):
    """Returns the newest (project, log) pairs across all projects."""
    entries = []
    for project in projects:
        for log in project.progress_logs:
            parsed = parse_datetime(log.date)
            if parsed is not None:
                if parsed.tzinfo is None:
                    parsed = parsed.replace(tzinfo=timezone.utc)
                entries.append((parsed, project, log))
    entries.sort(key=lambda entry: entry[0], reverse=True)
    return [(project, log) for _, project, log in entries[:limit]]


def search_projects(projects, query="", status=None):
    needle = (query or "").lower()
    results = []
    for project in projects:
        if status and project.status != status:
            continue
        if needle and needle not in project.name.lower() and needle not in project.address.lower():
            continue
        results.append(project)
    return results
