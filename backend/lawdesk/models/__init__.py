# Models package init
"""
LawDesk Backend — ORM Models
=============================

Importing this package registers every table with `Base.metadata`
(used by Alembic autogenerate and `Database.create_all()`).
"""

from lawdesk.models.feedback import Feedback
from lawdesk.models.post import Post

__all__ = ["Feedback", "Post"]
