from __future__ import annotations

import uuid


def new_id() -> str:
    """Opaque primary key for every entity (UUID4 text)."""
    return str(uuid.uuid4())
