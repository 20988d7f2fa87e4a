from __future__ import annotations

from typing import Any, Mapping

from ..error_mapper import map_error
from .base import BaseClient


class FunctionsClient(BaseClient):
    def invoke(self, name: str, payload: Mapping[str, Any]) -> dict[str, Any]:
        data = self._request(
            "POST",
            f"/functions/v1/{name}",
            json_body=dict(payload),
            operation=f"function:{name}",
        )
        body = data if isinstance(data, dict) else {}
        # Edge functions may answer 200 with an error body.
        if body.get("error") or body.get("success") is False:
            raise map_error(400, body)
        return body
