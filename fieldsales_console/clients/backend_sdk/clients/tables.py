from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

import requests

from ..postgrest import Filter, QuerySpec, parse_content_range
from .base import BaseClient


@dataclass(frozen=True)
class QueryResult:
    rows: list[dict[str, Any]] = field(default_factory=list)
    count: int | None = None


class TableClient(BaseClient):
    def select(self, query: QuerySpec) -> QueryResult:
        headers = {"Prefer": "count=exact"} if query.count else {}
        captured: dict[str, str | None] = {}

        def _capture(response: requests.Response) -> None:
            captured["content_range"] = response.headers.get("Content-Range")

        data = self._request(
            "GET",
            f"/rest/v1/{query.table}",
            params=query.to_params(),
            headers=headers,
            response_hook=_capture,
            operation=f"select:{query.table}",
        )
        rows = data if isinstance(data, list) else []
        count = parse_content_range(captured.get("content_range")) if query.count else None
        return QueryResult(rows=rows, count=count)

    def count(self, query: QuerySpec) -> int:
        captured: dict[str, str | None] = {}

        def _capture(response: requests.Response) -> None:
            captured["content_range"] = response.headers.get("Content-Range")

        self._request(
            "HEAD",
            f"/rest/v1/{query.table}",
            params=[("select", query.select), *query.filter_params()],
            headers={"Prefer": "count=exact"},
            response_hook=_capture,
            operation=f"count:{query.table}",
        )
        return parse_content_range(captured.get("content_range")) or 0

    def update(self, table: str, match: Sequence[Filter], values: Mapping[str, Any]) -> list[dict[str, Any]]:
        if not match:
            raise ValueError("Refusing to update without a row filter")
        data = self._request(
            "PATCH",
            f"/rest/v1/{table}",
            params=[item.encode() for item in match],
            json_body=dict(values),
            headers={"Prefer": "return=representation"},
            operation=f"update:{table}",
        )
        return data if isinstance(data, list) else []
