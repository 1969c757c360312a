"""
Shared FastAPI dependencies for snapshot loading.

Usage in routers:
    from ..dependencies import get_pipeline

    @router.get("/api/reports/something")
    def some_endpoint(pipeline: ReportPipeline = Depends(get_pipeline)):
        ...

Every request reads a fresh snapshot; tests swap the repository through
app.dependency_overrides[get_repository].
"""
from fastapi import Depends

from source_config import get_repository as _configured_repository
from reporting import ReportPipeline, Snapshot
from reporting.repository import EntityRepository


def get_repository() -> EntityRepository:
    """Repository for the configured source (SOURCE_DATA_DIR or SOURCE_API_URL)."""
    return _configured_repository()


def get_snapshot(repository: EntityRepository = Depends(get_repository)) -> Snapshot:
    """Fetch all entity kinds; failed kinds are listed in Snapshot.failures."""
    return repository.fetch_snapshot()


def get_pipeline(snapshot: Snapshot = Depends(get_snapshot)) -> ReportPipeline:
    return ReportPipeline(snapshot)
