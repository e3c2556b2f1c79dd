"""The result envelope every tool invocation produces."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict


class ToolResult(BaseModel):
    """Tagged success/failure outcome of one tool call.

    A success carries ``ok=True`` with ``count``/``results``/``paging`` (and,
    for pass-through tools, every other top-level field HubSpot returned). A
    failure carries only ``ok=False`` and ``error``. Fields are never mixed.
    """

    model_config = ConfigDict(extra="allow")

    ok: bool
    count: int | None = None
    results: list[Any] | None = None
    paging: dict[str, Any] | None = None
    error: str | None = None

    @classmethod
    def listing(cls, results: list[Any], paging: dict[str, Any] | None = None) -> ToolResult:
        return cls(ok=True, count=len(results), results=results, paging=paging)

    @classmethod
    def passthrough(cls, data: Mapping[str, Any]) -> ToolResult:
        """Wrap a HubSpot response, keeping all of its top-level fields."""
        fields = dict(data)
        results = fields.get("results")
        if isinstance(results, list):
            fields.setdefault("count", len(results))
        fields["ok"] = True
        fields.pop("error", None)
        return cls.model_validate(fields)

    @classmethod
    def failure(cls, error: str) -> ToolResult:
        return cls(ok=False, error=error)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_unset=True)
