"""
models/bug.py
-------------
Domain model for tracked bugs, and the typed identifier used to
reference a bug from other entities.
"""

import re
from dataclasses import dataclass
from datetime import datetime
from typing import NewType, Optional, Union

from db.errors import InvalidReferenceError

BugID = NewType("BugID", int)

STATUS_OPEN = "open"
STATUS_CLOSED = "closed"


@dataclass
class Bug:
    """
    Represents a single tracked defect.

    Attributes:
        id: Database primary key (None for new records).
        title: Short summary. Required by the schema.
        description: Free-form details.
        status: Workflow state, STATUS_OPEN or STATUS_CLOSED by convention.
        priority: Free-form priority label (e.g. 'low', 'high').
        created_at: When the bug was first recorded.
        updated_at: When the bug was last modified. Never before created_at.
    """
    title: str
    description: str = ""
    status: str = STATUS_OPEN
    priority: str = "medium"
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __str__(self) -> str:
        return f"#{self.id} [{self.status}/{self.priority}] {self.title}"


def parse_bug_id(value: Union[int, str]) -> BugID:
    """
    Validate a bug reference coming from outside the storage layer.

    Args:
        value: An int, or a string of ASCII digits such as ``"42"``. Signs,
            whitespace and non-ASCII digits are rejected.

    Returns:
        The identifier as a BugID.

    Raises:
        InvalidReferenceError: If the value is not a positive integer.
    """
    if isinstance(value, bool):
        raise InvalidReferenceError(f"invalid bug ID format: {value!r}")
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, str) and re.fullmatch(r"[0-9]+", value):
        parsed = int(value)
    else:
        raise InvalidReferenceError(f"invalid bug ID format: {value!r}")
    if parsed <= 0:
        raise InvalidReferenceError(f"invalid bug ID: {parsed}")
    return BugID(parsed)
