"""
Pydantic models for response validation.
"""
from pydantic import BaseModel
from typing import Any, Dict, List, Optional


class CatalogueEntry(BaseModel):
    key: str
    title: str
    requires: List[str]
    optional: List[str] = []


class ReportOut(BaseModel):
    key: str
    title: str
    rows: List[Dict[str, Any]]
    total: int
    available: bool
    error: Optional[str] = None
    meta: Dict[str, Any] = {}


class ReportsResponse(BaseModel):
    generated_at: str
    today: str
    date_from: Optional[str] = None
    date_to: Optional[str] = None
    failures: Dict[str, str]
    reports: Dict[str, ReportOut]


class SourceStatus(BaseModel):
    ok: bool
    count: int
    error: Optional[str] = None
