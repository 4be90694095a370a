"""Exception hierarchy for the archive service.

    Exception (built-in)
    └── WaytrackError
        ├── StoreError - document store unreachable or query rejected
        ├── DuplicateUsernameError - several users share one normalized name
        └── UnknownCategoryError - category name outside the fixed set

Not-found is not an error here: lookups return ``None`` or empty lists.
"""


class WaytrackError(Exception):
    """Base class for all archive service errors."""


class StoreError(WaytrackError):
    """Raised when a read against the document store fails.

    Wraps transport and HTTP failures so API handlers can map them to a
    single generic status without knowing which backend is configured.
    """

    def __init__(self, message: str, collection: str | None = None):
        super().__init__(message)
        self.collection = collection


class DuplicateUsernameError(WaytrackError):
    """Two or more user documents match the same case-folded username."""

    def __init__(self, username: str, user_ids: list[str]):
        super().__init__(
            f"Username {username!r} matches {len(user_ids)} users: {', '.join(user_ids)}"
        )
        self.username = username
        self.user_ids = user_ids


class UnknownCategoryError(WaytrackError):
    """A category name that maps to none of tv, music, podcasts, books."""

    def __init__(self, category: str):
        super().__init__(f"Unknown category: {category!r}")
        self.category = category
