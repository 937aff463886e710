"""Runtime logging utilities for Shopkeep."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from uuid import uuid4

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from .extensions import db
from .models import SystemLog


@dataclass(frozen=True)
class LogRecord:
    """Structured representation of a log message."""

    component: str
    action: str
    level: str
    result: str
    title: str
    user_summary: str
    technical_details: str
    correlation_id: str
    environment: str
    persisted: bool = True


class LogManager:
    """Manage structured logging for the application."""

    def __init__(self) -> None:
        self.app = None
        self.available_levels = ["info", "warn", "error"]
        self.available_components: list[str] = []

    def init_app(self, app) -> None:
        """Attach the log manager to the Flask app."""
        self.app = app

    def _ensure_component(self, component: str) -> None:
        if component not in self.available_components:
            self.available_components.append(component)
            self.available_components.sort()

    def register_component(self, component: str) -> None:
        """Explicitly register a component name."""
        self._ensure_component(component)

    def record(
        self,
        *,
        component: str,
        action: str,
        level: str = "info",
        result: str = "success",
        title: str,
        user_summary: str,
        technical_details: str,
        correlation_id: Optional[str] = None,
    ) -> LogRecord:
        """Persist a new log record.

        When the database rejects the entry the session is rolled back and the
        message goes to the Flask application logger instead, so callers that log
        while handling a storage fault still surface their own error.
        """
        if level not in self.available_levels:
            raise ValueError(f"Unsupported level '{level}'")

        self._ensure_component(component)
        app = self.app or current_app
        environment = app.config.get("ENVIRONMENT", "development")
        correlation = correlation_id or str(uuid4())

        entry = SystemLog(
            component=component,
            action=action,
            level=level,
            result=result,
            title=title,
            user_summary=user_summary,
            technical_details=technical_details,
            correlation_id=correlation,
            environment=environment,
        )

        persisted = True
        try:
            db.session.add(entry)
            self._trim_logs(app.config.get("LOG_RETENTION", 200))
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            persisted = False
            app.logger.error(
                "[%s/%s] %s: %s (%s) [correlation=%s, log store unavailable: %s]",
                component,
                action,
                level,
                title,
                technical_details,
                correlation,
                exc.__class__.__name__,
            )

        return LogRecord(
            component=component,
            action=action,
            level=level,
            result=result,
            title=title,
            user_summary=user_summary,
            technical_details=technical_details,
            correlation_id=correlation,
            environment=environment,
            persisted=persisted,
        )

    def _trim_logs(self, retention: int) -> None:
        """Keep the number of stored logs under the configured retention."""
        total = SystemLog.query.count()
        if total <= retention:
            return
        # delete oldest entries beyond retention
        excess = total - retention
        oldest_ids = [
            entry.id
            for entry in SystemLog.query.order_by(SystemLog.timestamp, SystemLog.id).limit(excess)
        ]
        if oldest_ids:
            SystemLog.query.filter(SystemLog.id.in_(oldest_ids)).delete(synchronize_session=False)

    def fetch_logs(
        self,
        *,
        level: Optional[str] = None,
        component: Optional[str] = None,
        search: Optional[str] = None,
        limit: int = 50,
    ) -> list[dict[str, str]]:
        """Retrieve structured logs with optional filtering."""
        query = SystemLog.query.order_by(SystemLog.timestamp.desc(), SystemLog.id.desc())
        if level and level in self.available_levels:
            query = query.filter_by(level=level)
        if component:
            query = query.filter_by(component=component)
        if search:
            like_pattern = f"%{search}%"
            query = query.filter(
                (SystemLog.title.ilike(like_pattern))
                | (SystemLog.user_summary.ilike(like_pattern))
                | (SystemLog.technical_details.ilike(like_pattern))
                | (SystemLog.correlation_id.ilike(like_pattern))
            )
        records = query.limit(limit).all()
        return [record.serialize() for record in records]

    def latest_timestamp(self) -> Optional[str]:
        """Return ISO formatted timestamp of the most recent log entry."""
        record = SystemLog.query.order_by(SystemLog.timestamp.desc()).first()
        if not record:
            return None
        return record.timestamp.isoformat(timespec="seconds")


log_manager = LogManager()
