# battery_scm/services/event_logger.py

import json
import uuid
from datetime import datetime
from sqlmodel import Session
from ..models.events import Event


def log_event(session: Session, event_type: str, description: str, metadata: dict | None = None):
    """
    Add an Event row to the session; the caller commits.

    metadata carries the structured side of the event (ids, quantities) and
    is stored as JSON so the event log can be filtered and replayed without
    parsing the description.
    """
    e = Event(
        event_id=f"EVT-{uuid.uuid4().hex}",
        event_type=event_type,
        description=description,
        event_date=datetime.utcnow(),
        metadata_json=json.dumps(metadata, default=str) if metadata is not None else None,
    )
    session.add(e)
    return e
