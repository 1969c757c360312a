from datetime import datetime, timezone
from typing import Dict

from fastapi import APIRouter, Depends

from reporting import Snapshot
from ..config import SOURCE_LABEL
from ..dependencies import get_snapshot
from ..models.schemas import SourceStatus

router = APIRouter()


@router.get("/api/health")
def health_check():
    """Liveness check; does not touch the data source."""
    return {
        "status": "ok",
        "source": SOURCE_LABEL,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/api/sources", response_model=Dict[str, SourceStatus])
def get_source_status(snapshot: Snapshot = Depends(get_snapshot)):
    """Fetch every entity kind once and report count or error per kind"""
    return snapshot.status()
