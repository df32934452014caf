"""
Catalog store: the query contract over the clothing/outfits tables.

Two backends implement the same contract:
1. SupabaseCatalogStore: PostgREST tables + RPC aggregates (production)
2. InMemoryCatalogStore (catalog.memory): development and tests

Callers only see rows as plain dicts and StoreError on failure; every
backend-specific exception is translated at this boundary.
"""

import random
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

import httpx
from postgrest.exceptions import APIError
from supabase import Client

from core.errors import StoreError
from core.logging import get_logger


logger = get_logger(__name__)

Row = Dict[str, Any]


@dataclass(frozen=True)
class TextMatch:
    """
    OR-group matching a keyword against a record.

    Matches when any ``ilike_columns`` contains the keyword
    (case-insensitive) or when ``tag_column`` contains the keyword as an
    element.
    """

    keyword: str
    ilike_columns: Tuple[str, ...] = ("name",)
    tag_column: Optional[str] = "tags"


@dataclass
class QueryResult:
    rows: List[Row] = field(default_factory=list)
    count: Optional[int] = None


class CatalogStore(ABC):
    """Backend-independent catalog contract."""

    @abstractmethod
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
        """
        Filtered select.

        Args:
            equals: column == value for every pair
            not_equals: column != value for every pair
            any_of: column IN values for every pair
            one_of_values: (column, values) matched as an OR of equalities,
                e.g. ("season", ["summer", "all"])
            contains: array column contains every listed element
            text_match: keyword OR-group (see TextMatch)
            order_by / ascending: sort column and direction
            offset / limit: range window applied after sorting
            count: also return the exact number of matching rows
        """

    @abstractmethod
    def insert(self, table: str, payload: Row) -> Row:
        """Insert one row and return it as stored."""

    @abstractmethod
    def update(
        self,
        table: str,
        payload: Row,
        *,
        ids: Sequence[str],
    ) -> List[Row]:
        """Update rows by id and return the updated rows."""

    @abstractmethod
    def delete(self, table: str, *, ids: Sequence[str]) -> List[Row]:
        """Delete rows by id and return the deleted rows."""

    @abstractmethod
    def rpc(self, name: str, params: Optional[Row] = None) -> List[Row]:
        """Call an aggregate function."""

    # ------------------------------------------------------------------
    # Helpers shared by every backend
    # ------------------------------------------------------------------

    def get(self, table: str, row_id: str, columns: str = "*") -> Optional[Row]:
        result = self.query(table, columns, equals={"id": row_id}, limit=1)
        return result.rows[0] if result.rows else None

    def get_many(self, table: str, ids: Iterable[str], columns: str = "*") -> List[Row]:
        id_list = list(dict.fromkeys(ids))
        if not id_list:
            return []
        return self.query(table, columns, any_of={"id": id_list}).rows

    def existing_ids(self, table: str, ids: Iterable[str]) -> Set[str]:
        """Single batched existence check."""
        return {str(row["id"]) for row in self.get_many(table, ids, "id")}

    def count(self, table: str, **filters: Any) -> int:
        result = self.query(table, "id", count=True, limit=1, **filters)
        return result.count or 0

    def sample(
        self,
        table: str,
        columns: str,
        limit: int,
        rng: Optional[random.Random] = None,
    ) -> List[Row]:
        """
        Random rows: a window at a random offset, shuffled.

        PostgREST cannot ORDER BY random(), so the store picks the window
        and the order is shuffled here.
        """
        if limit <= 0:
            return []
        rng = rng or random.Random()
        total = self.count(table)
        if total == 0:
            return []
        window = min(total, limit * 3)
        offset = rng.randint(0, total - window)
        rows = self.query(
            table, columns, order_by="created_at", offset=offset, limit=window
        ).rows
        rng.shuffle(rows)
        return rows[:limit]

    def ping(self, table: str) -> float:
        """Round-trip a cheap count query and return latency in milliseconds."""
        start = time.perf_counter()
        self.count(table)
        return round((time.perf_counter() - start) * 1000, 2)


# =============================================================================
# Supabase backend
# =============================================================================

def _quote(value: str) -> str:
    """Quote a value for a PostgREST or=() filter (commas/parens are reserved)."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def build_or_filter(match: TextMatch) -> str:
    """
    Render a TextMatch as a PostgREST or-filter string.

    Examples:
        >>> build_or_filter(TextMatch("denim"))
        'name.ilike."%denim%",tags.cs.{"denim"}'
    """
    parts = [f"{col}.ilike.{_quote(f'%{match.keyword}%')}" for col in match.ilike_columns]
    if match.tag_column:
        parts.append(f"{match.tag_column}.cs.{{{_quote(match.keyword)}}}")
    return ",".join(parts)


class SupabaseCatalogStore(CatalogStore):
    """Catalog backed by Supabase PostgREST."""

    def __init__(self, client: Client):
        self.client = client

    def _execute(self, operation: str, table: str, builder):
        try:
            return builder.execute()
        except APIError as e:
            logger.error(
                "Supabase request failed",
                operation=operation,
                table=table,
                code=e.code,
                error=e.message,
            )
            raise StoreError(
                e.message or "Store request failed",
                store_code=e.code,
                details=e.details,
                hint=e.hint,
            ) from e
        except httpx.TimeoutException as e:
            logger.error("Supabase request timed out", operation=operation, table=table)
            raise StoreError(f"Store request timed out ({operation} {table})") from e
        except httpx.HTTPError as e:
            logger.error("Supabase transport error", operation=operation, table=table, error=str(e))
            raise StoreError(f"Store unavailable: {e}") from e

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
        query = self.client.table(table).select(columns, count="exact" if count else None)

        for col, value in (equals or {}).items():
            query = query.eq(col, value)
        for col, value in (not_equals or {}).items():
            query = query.neq(col, value)
        for col, values in (any_of or {}).items():
            query = query.in_(col, list(values))
        for col, values in (contains or {}).items():
            query = query.contains(col, list(values))
        if one_of_values:
            col, values = one_of_values
            query = query.or_(",".join(f"{col}.eq.{_quote(str(v))}" for v in values))
        if text_match:
            query = query.or_(build_or_filter(text_match))

        if order_by:
            query = query.order(order_by, desc=not ascending)
        if offset is not None and limit is not None:
            query = query.range(offset, offset + limit - 1)
        elif limit is not None:
            query = query.limit(limit)

        result = self._execute("select", table, query)
        return QueryResult(rows=list(result.data or []), count=result.count)

    def insert(self, table: str, payload: Row) -> Row:
        result = self._execute("insert", table, self.client.table(table).insert(payload))
        if not result.data:
            raise StoreError(f"Insert into {table} returned no row")
        return result.data[0]

    def update(self, table: str, payload: Row, *, ids: Sequence[str]) -> List[Row]:
        if not ids:
            return []
        builder = self.client.table(table).update(payload).in_("id", list(ids))
        return list(self._execute("update", table, builder).data or [])

    def delete(self, table: str, *, ids: Sequence[str]) -> List[Row]:
        if not ids:
            return []
        builder = self.client.table(table).delete().in_("id", list(ids))
        return list(self._execute("delete", table, builder).data or [])

    def rpc(self, name: str, params: Optional[Row] = None) -> List[Row]:
        result = self._execute("rpc", name, self.client.rpc(name, params or {}))
        data = result.data
        if data is None:
            return []
        return data if isinstance(data, list) else [data]
