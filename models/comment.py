"""
models/comment.py
-----------------
Domain model for notes attached to a bug.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class Comment:
    """
    Represents a comment on a bug (many comments per bug).

    Attributes:
        id: Database primary key (None for new records).
        bug_id: Parent bug. Set by the repository on create.
        content: Comment body.
        author: Who wrote it.
        created_at: Timestamp when the record was created.
    """
    content: str = ""
    author: str = ""
    bug_id: Optional[int] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None

    def __str__(self) -> str:
        return f"#{self.id} on bug #{self.bug_id} by {self.author or 'anonymous'}"
