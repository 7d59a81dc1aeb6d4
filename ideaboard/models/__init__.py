"""
Idea Board – SQLAlchemy ORM models package.

Imports all model classes so ``Base.metadata`` knows every table
through a single ``import ideaboard.models``.
"""

from ideaboard.models.idea import Idea                # noqa: F401
from ideaboard.models.note import Note                # noqa: F401
from ideaboard.models.idea_file import IdeaFile       # noqa: F401
