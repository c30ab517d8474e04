"""
Session Logger — structured event trail for one editing session.

Every mutation the admin performs in the workflow editor is recorded
as a ``SessionEvent`` and mirrored to the standard ``logging`` tree
under ``service.logging.session``. The in-memory trail is bounded so
an editor left open all day does not grow without limit.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from logging import getLogger
from typing import Any, Deque, Dict, List, Optional
from weakref import WeakValueDictionary

logger = getLogger("service.logging.session")


class SessionEventType(str, Enum):
    """Kinds of events an editing session records."""
    SESSION_OPENED = "session_opened"
    SESSION_CLOSED = "session_closed"
    NODE_ADDED = "node_added"
    NODE_DELETED = "node_deleted"
    NODE_CONFIG_CHANGED = "node_config_changed"
    EDGE_ADDED = "edge_added"
    EDGE_DELETED = "edge_deleted"
    DECODE_SKIPPED = "decode_skipped"
    SAVE_STARTED = "save_started"
    SAVE_SUCCEEDED = "save_succeeded"
    SAVE_FAILED = "save_failed"
    VALIDATION_FAILED = "validation_failed"


@dataclass
class SessionEvent:
    event_type: SessionEventType
    message: str
    data: Dict[str, Any] = field(default_factory=dict)
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.event_type.value,
            "message": self.message,
            "data": self.data,
            "timestamp": self.timestamp,
        }


class SessionLogger:
    """Bounded event trail for a single editing session."""

    def __init__(self, session_id: str, limit: int = 500) -> None:
        self.session_id = session_id
        self._events: Deque[SessionEvent] = deque(maxlen=limit)

    def log(
        self,
        event_type: SessionEventType,
        message: str,
        level: str = "info",
        **data: Any,
    ) -> SessionEvent:
        event = SessionEvent(event_type=event_type, message=message, data=data)
        self._events.append(event)
        getattr(logger, level)(f"[{self.session_id}] {event_type.value}: {message}")
        return event

    def log_node_added(self, node_id: str, node_type: str) -> None:
        self.log(SessionEventType.NODE_ADDED, f"{node_type} as {node_id}", "debug",
                 node_id=node_id, node_type=node_type)

    def log_node_deleted(self, node_id: str, removed_edges: int) -> None:
        self.log(SessionEventType.NODE_DELETED, f"{node_id} (+{removed_edges} edges)", "debug",
                 node_id=node_id, removed_edges=removed_edges)

    def log_edge_added(self, edge_id: str, source: str, target: str,
                       source_handle: Optional[str]) -> None:
        self.log(SessionEventType.EDGE_ADDED, f"{source} -> {target} [{source_handle or 'default'}]",
                 "debug", edge_id=edge_id, source=source, target=target,
                 source_handle=source_handle)

    def log_config_changed(self, node_id: str, fields: List[str]) -> None:
        self.log(SessionEventType.NODE_CONFIG_CHANGED, f"{node_id} {', '.join(fields)}", "debug",
                 node_id=node_id, fields=fields)

    def log_edge_deleted(self, edge_id: str) -> None:
        self.log(SessionEventType.EDGE_DELETED, edge_id, "debug", edge_id=edge_id)

    def log_decode_skipped(self, kind: str, index: int, reason: str) -> None:
        self.log(SessionEventType.DECODE_SKIPPED, f"{kind}[{index}] {reason}", "warning",
                 kind=kind, index=index, reason=reason)

    def log_save(self, event_type: SessionEventType, message: str, **data: Any) -> None:
        level = "error" if event_type == SessionEventType.SAVE_FAILED else "info"
        self.log(event_type, message, level, **data)

    @property
    def events(self) -> List[SessionEvent]:
        return list(self._events)

    def events_of(self, event_type: SessionEventType) -> List[SessionEvent]:
        return [e for e in self._events if e.event_type == event_type]


# ── Registry ──

# Weak values: an entry disappears once no editor holds its logger.
_loggers: WeakValueDictionary[str, SessionLogger] = WeakValueDictionary()


def get_session_logger(
    session_id: str,
    create_if_missing: bool = False,
    limit: Optional[int] = None,
) -> Optional[SessionLogger]:
    """Return the logger for ``session_id``, creating it on request."""
    existing = _loggers.get(session_id)
    if existing is not None or not create_if_missing:
        return existing
    if limit is None:
        from service.config import get_config
        from service.config.sub_config.general.workflow_config import WorkflowEditorConfig
        limit = get_config(WorkflowEditorConfig).session_log_limit
    session_logger = SessionLogger(session_id, limit=limit)
    _loggers[session_id] = session_logger
    return session_logger


def remove_session_logger(session_id: str) -> None:
    _loggers.pop(session_id, None)
