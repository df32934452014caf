"""
In-memory catalog backend.

Implements the CatalogStore contract over plain dicts for local development
and tests. Rows are lost on restart; use the Supabase backend in production.
"""

import copy
import uuid
from collections import Counter
from threading import Lock
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from catalog.store import CatalogStore, QueryResult, Row, TextMatch
from config.constants import CLOTHING_TABLE, OUTFITS_TABLE
from core.errors import StoreError
from core.utils import utc_now


def _project(row: Row, columns: str) -> Row:
    if columns.strip() == "*":
        return copy.deepcopy(row)
    wanted = [c.strip() for c in columns.split(",") if c.strip()]
    return {c: copy.deepcopy(row.get(c)) for c in wanted}


def _text_matches(row: Row, match: TextMatch) -> bool:
    needle = match.keyword.lower()
    for col in match.ilike_columns:
        value = row.get(col)
        if isinstance(value, str) and needle in value.lower():
            return True
    if match.tag_column:
        tags = row.get(match.tag_column) or []
        if match.keyword in tags:
            return True
    return False


def _tag_stats(rows: Iterable[Row], limit: int = 10) -> List[Row]:
    counts = Counter(tag for row in rows for tag in (row.get("tags") or []))
    return [{"tag": tag, "count": n} for tag, n in counts.most_common(limit)]


class InMemoryCatalogStore(CatalogStore):
    """Thread-safe dict-backed catalog."""

    def __init__(self, seed: Optional[Mapping[str, Iterable[Row]]] = None):
        self._tables: Dict[str, List[Row]] = {CLOTHING_TABLE: [], OUTFITS_TABLE: []}
        self._lock = Lock()
        for table, rows in (seed or {}).items():
            for row in rows:
                self.insert(table, row)

    def rows(self, table: str) -> List[Row]:
        with self._lock:
            return copy.deepcopy(self._tables.get(table, []))

    def query(
        self,
        table: str,
        columns: str = "*",
        *,
        equals: Optional[Mapping[str, Any]] = None,
        not_equals: Optional[Mapping[str, Any]] = None,
        any_of: Optional[Mapping[str, Sequence[Any]]] = None,
        one_of_values: Optional[Tuple[str, Sequence[Any]]] = None,
        contains: Optional[Mapping[str, Sequence[Any]]] = None,
        text_match: Optional[TextMatch] = None,
        order_by: Optional[str] = None,
        ascending: bool = False,
        offset: Optional[int] = None,
        limit: Optional[int] = None,
        count: bool = False,
    ) -> QueryResult:
        with self._lock:
            rows = list(self._tables.get(table, []))

        def keep(row: Row) -> bool:
            if any(row.get(c) != v for c, v in (equals or {}).items()):
                return False
            if any(row.get(c) == v for c, v in (not_equals or {}).items()):
                return False
            if any(row.get(c) not in set(vs) for c, vs in (any_of or {}).items()):
                return False
            if one_of_values and row.get(one_of_values[0]) not in set(one_of_values[1]):
                return False
            for c, wanted in (contains or {}).items():
                present = row.get(c) or []
                if not all(w in present for w in wanted):
                    return False
            if text_match and not _text_matches(row, text_match):
                return False
            return True

        matched = [row for row in rows if keep(row)]
        total = len(matched)

        if order_by:
            present = [r for r in matched if r.get(order_by) is not None]
            missing = [r for r in matched if r.get(order_by) is None]
            present.sort(key=lambda r: r[order_by], reverse=not ascending)
            matched = present + missing

        start = offset or 0
        end = start + limit if limit is not None else None
        window = matched[start:end]

        return QueryResult(
            rows=[_project(r, columns) for r in window],
            count=total if count else None,
        )

    def insert(self, table: str, payload: Row) -> Row:
        row = copy.deepcopy(dict(payload))
        row.setdefault("id", str(uuid.uuid4()))
        now = utc_now().isoformat()
        row.setdefault("created_at", now)
        row.setdefault("updated_at", now)
        with self._lock:
            existing = self._tables.setdefault(table, [])
            if any(r["id"] == row["id"] for r in existing):
                raise StoreError(
                    f'duplicate key value violates unique constraint "{table}_pkey"',
                    store_code="23505",
                )
            existing.append(row)
        return copy.deepcopy(row)

    def update(self, table: str, payload: Row, *, ids: Sequence[str]) -> List[Row]:
        wanted = set(ids)
        updated = []
        with self._lock:
            for row in self._tables.get(table, []):
                if row["id"] in wanted:
                    row.update(copy.deepcopy(dict(payload)))
                    updated.append(copy.deepcopy(row))
        return updated

    def delete(self, table: str, *, ids: Sequence[str]) -> List[Row]:
        wanted = set(ids)
        with self._lock:
            rows = self._tables.get(table, [])
            removed = [r for r in rows if r["id"] in wanted]
            self._tables[table] = [r for r in rows if r["id"] not in wanted]
        return copy.deepcopy(removed)

    def rpc(self, name: str, params: Optional[Row] = None) -> List[Row]:
        if name == "get_outfit_season_stats":
            counts = Counter(r.get("season") for r in self.rows(OUTFITS_TABLE))
            return [{"season": season, "count": n} for season, n in counts.items()]
        if name == "get_outfit_tag_stats":
            return _tag_stats(self.rows(OUTFITS_TABLE))
        if name == "get_clothing_tag_stats":
            return _tag_stats(self.rows(CLOTHING_TABLE))
        raise StoreError(f"Could not find the function public.{name}", store_code="PGRST202")
