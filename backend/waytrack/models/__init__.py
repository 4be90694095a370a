"""Re-export models for import convenience."""

from waytrack.models.tables import Document  # noqa: F401
from waytrack.models.archive import (  # noqa: F401
    User, Entry, Category, CATEGORIES, UNCLASSIFIED,
)
