"""
Entity Repository

Fetches the raw collections (members, unions, executives, CBAs, OSH
incidents, terminated unions) from the data-access layer, validates them
through the ingestion schemas, and bundles them into an immutable Snapshot
for one report generation.

Entity kinds are fetched independently and in parallel. A kind that fails
is recorded in Snapshot.failures and does not stop the others; reports that
depend on it degrade to "unavailable".

Sources:
    HttpRepository    - JSON read endpoints (requests)
    FileRepository    - <kind>.json files in a directory
    StaticRepository  - in-memory collections
"""
from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import requests

from .config import ENTITY_ENDPOINTS, ENTITY_KINDS
from .schemas import SourceRecord, _to_int, parse_records

logger = logging.getLogger(__name__)


class EntityFetchError(Exception):
    """One entity kind could not be fetched or decoded."""

    def __init__(self, kind: str, reason: str):
        super().__init__(f"{kind}: {reason}")
        self.kind = kind
        self.reason = reason


@dataclass(frozen=True)
class Snapshot:
    """
    Immutable set of validated collections for one report generation.

    Attributes:
        records: entity kind -> validated records (empty when the kind failed)
        failures: entity kind -> failure reason
        fetched_at: UTC time the snapshot was assembled
    """
    records: Dict[str, Tuple[SourceRecord, ...]] = field(default_factory=dict)
    failures: Dict[str, str] = field(default_factory=dict)
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def get(self, kind: str) -> Tuple[SourceRecord, ...]:
        return self.records.get(kind, ())

    def failed(self, kind: str) -> bool:
        return kind in self.failures

    def status(self) -> Dict[str, Dict[str, Any]]:
        """Per-kind fetch status: {"ok": bool, "count": int, "error": str|None}."""
        kinds = list(self.records) + [k for k in self.failures if k not in self.records]
        return {
            kind: {
                "ok": kind not in self.failures,
                "count": len(self.get(kind)),
                "error": self.failures.get(kind),
            }
            for kind in kinds
        }


# ============================================================================
# Response shapes
# ============================================================================

def unwrap_collection(payload: Any) -> Tuple[Optional[List[Any]], Dict[str, Any]]:
    """
    Pull the record list (and pagination meta) out of a response body.

    Accepts a bare array, {"data": [...], "meta": {...}} and the doubly
    wrapped {"data": {"data": [...]}}. Returns (None, {}) for anything else.
    """
    if isinstance(payload, list):
        return payload, {}
    if not isinstance(payload, dict):
        return None, {}

    data = payload.get("data")
    meta = payload.get("meta") if isinstance(payload.get("meta"), dict) else {}
    if isinstance(data, list):
        return data, meta
    if isinstance(data, dict) and isinstance(data.get("data"), list):
        inner_meta = data.get("meta") if isinstance(data.get("meta"), dict) else meta
        return data["data"], inner_meta
    return None, {}


def _has_more_pages(meta: Dict[str, Any], page: int, per_page: int) -> bool:
    total_pages = _to_int(meta.get("total_pages"))
    if total_pages is not None:
        return page < total_pages
    total = _to_int(meta.get("total"))
    size = _to_int(meta.get("per_page")) or per_page
    if total is not None and size > 0:
        return page * size < total
    if "total_pages" in meta or "total" in meta:
        logger.warning(f"Unreadable pagination meta on page {page}, stopping: {meta}")
    return False


# ============================================================================
# Repositories
# ============================================================================

class EntityRepository(ABC):
    """Base repository: subclasses supply raw collections per entity kind."""

    source_name = "base"

    @abstractmethod
    def fetch_raw(self, kind: str) -> List[Any]:
        """Return the raw records of one kind or raise EntityFetchError."""

    def fetch(self, kind: str) -> List[SourceRecord]:
        if kind not in ENTITY_KINDS:
            raise ValueError(f"Unknown entity kind '{kind}'")
        raw = self.fetch_raw(kind)
        records, skipped = parse_records(kind, raw)
        if skipped:
            logger.info(f"Fetched {kind}: {len(records)} records ({skipped} unreadable skipped)")
        else:
            logger.info(f"Fetched {kind}: {len(records)} records")
        return records

    def fetch_snapshot(self, kinds: Sequence[str] = ENTITY_KINDS) -> Snapshot:
        """Fetch every kind in parallel; failed kinds are recorded, not raised."""
        records: Dict[str, Tuple[SourceRecord, ...]] = {}
        failures: Dict[str, str] = {}

        with ThreadPoolExecutor(max_workers=max(1, len(kinds))) as pool:
            futures = {pool.submit(self.fetch, kind): kind for kind in kinds}
            for future in as_completed(futures):
                kind = futures[future]
                try:
                    records[kind] = tuple(future.result())
                except EntityFetchError as e:
                    logger.warning(f"Entity kind '{kind}' unavailable from {self.source_name}: {e.reason}")
                    records[kind] = ()
                    failures[kind] = e.reason

        return Snapshot(
            records={kind: records[kind] for kind in kinds},
            failures={kind: failures[kind] for kind in kinds if kind in failures},
        )


class HttpRepository(EntityRepository):
    """
    Reads each kind from its JSON endpoint, following pagination.

    Args:
        base_url: Root URL of the data-access layer
        session: requests.Session (auth headers already applied)
        per_page: Page size requested from the source
        timeout: Per-request timeout in seconds
        max_pages: Safety bound on pages followed per kind
    """

    source_name = "http"

    def __init__(self, base_url: str, session: Optional[requests.Session] = None,
                 per_page: int = 1000, timeout: float = 30, max_pages: int = 50):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.per_page = per_page
        self.timeout = timeout
        self.max_pages = max_pages

    def fetch_raw(self, kind: str) -> List[Any]:
        url = f"{self.base_url}{ENTITY_ENDPOINTS[kind]}"
        collected: List[Any] = []
        page = 1

        while True:
            try:
                response = self.session.get(
                    url,
                    params={"page": page, "per_page": self.per_page},
                    timeout=self.timeout,
                )
                response.raise_for_status()
                payload = response.json()
            except requests.RequestException as e:
                raise EntityFetchError(kind, str(e)) from e
            except ValueError as e:
                raise EntityFetchError(kind, f"invalid JSON: {e}") from e

            batch, meta = unwrap_collection(payload)
            if batch is None:
                raise EntityFetchError(kind, "unexpected response shape")
            collected.extend(batch)

            if not batch or not _has_more_pages(meta, page, self.per_page):
                break
            if page >= self.max_pages:
                logger.warning(f"{kind}: stopped after {self.max_pages} pages")
                break
            page += 1

        return collected


class FileRepository(EntityRepository):
    """Reads <kind>.json files (same body shapes as the HTTP endpoints)."""

    source_name = "file"

    def __init__(self, directory):
        self.directory = Path(directory)

    def fetch_raw(self, kind: str) -> List[Any]:
        path = self.directory / f"{kind}.json"
        try:
            with open(path, encoding="utf-8") as f:
                payload = json.load(f)
        except OSError as e:
            raise EntityFetchError(kind, f"cannot read {path.name}: {e.strerror or e}") from e
        except ValueError as e:
            raise EntityFetchError(kind, f"invalid JSON in {path.name}: {e}") from e

        batch, _meta = unwrap_collection(payload)
        if batch is None:
            raise EntityFetchError(kind, f"unexpected structure in {path.name}")
        return batch


class StaticRepository(EntityRepository):
    """In-memory collections; kinds named in `failures` raise EntityFetchError."""

    source_name = "memory"

    def __init__(self, collections: Mapping[str, Any], failures: Optional[Mapping[str, str]] = None):
        self.collections = dict(collections)
        self.failures = dict(failures or {})

    def fetch_raw(self, kind: str) -> List[Any]:
        if kind in self.failures:
            raise EntityFetchError(kind, self.failures[kind])
        batch, _meta = unwrap_collection(self.collections.get(kind, []))
        if batch is None:
            raise EntityFetchError(kind, "unexpected structure")
        return batch
