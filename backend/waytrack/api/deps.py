"""FastAPI dependencies shared by the routers."""

from fastapi import HTTPException, Request

from waytrack.services.archive import ArchiveService


def get_archive_service(request: Request) -> ArchiveService:
    """The process-wide ArchiveService built at startup."""
    service = getattr(request.app.state, "archive", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Document store not configured")
    return service
