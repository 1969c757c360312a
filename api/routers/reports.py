from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from reporting import REPORT_CATALOGUE, FilterContext, ReportPipeline, catalogue
from ..dependencies import get_pipeline
from ..helpers import report_context
from ..models.schemas import CatalogueEntry, ReportOut, ReportsResponse

router = APIRouter()


@router.get("/api/reports/catalogue", response_model=List[CatalogueEntry])
def get_report_catalogue():
    """List every report key with the entity kinds it depends on"""
    return catalogue()


@router.get("/api/reports", response_model=ReportsResponse)
def get_reports(
    request: Request,
    keys: Optional[List[str]] = Query(None, description="Report keys (default: all)"),
    context: FilterContext = Depends(report_context),
    pipeline: ReportPipeline = Depends(get_pipeline),
):
    """Generate reports under one date range; failed source kinds are listed in `failures`"""
    if keys:
        unknown = [k for k in keys if k not in REPORT_CATALOGUE]
        if unknown:
            raise HTTPException(status_code=404, detail=f"Unknown report(s): {', '.join(unknown)}")

    results = pipeline.generate(context, keys or None)
    request.state.failed_kinds = sorted(pipeline.failures)
    return {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        **context.to_dict(),
        "failures": pipeline.failures,
        "reports": {key: result.to_dict() for key, result in results.items()},
    }


@router.get("/api/reports/{key}", response_model=ReportOut)
def get_report(
    key: str,
    request: Request,
    context: FilterContext = Depends(report_context),
    pipeline: ReportPipeline = Depends(get_pipeline),
):
    """Generate a single report"""
    if key not in REPORT_CATALOGUE:
        raise HTTPException(status_code=404, detail=f"Report '{key}' not found")
    result = pipeline.report(key, context)
    request.state.failed_kinds = sorted(pipeline.failures)
    return result.to_dict()
