"""Tool execution: one validated invocation in, one ``ToolResult`` out.

The invoker is stateless apart from the shared ``HubSpotClient``. It never
raises for a failed invocation; HubSpot errors, invalid arguments and
unexpected exceptions all come back as failure envelopes.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from datetime import datetime, timedelta, timezone
from typing import Any, TypeVar

from pydantic import ValidationError

from hubspot_mcp.exceptions import HubSpotError
from hubspot_mcp.hubspot.client import HubSpotClient
from hubspot_mcp.tools import catalog
from hubspot_mcp.tools.arguments import (
    AdvancedSearchArguments,
    BatchReadArguments,
    BatchReadAssociationsArguments,
    GetObjectPropertiesArguments,
    GetPipelinesArguments,
    ListOwnersArguments,
    PaginateObjectsArguments,
    SearchCompaniesArguments,
    SearchContactsArguments,
    SearchDealsArguments,
    SearchRecentlyModifiedArguments,
)
from hubspot_mcp.tools.results import ToolResult

logger = logging.getLogger(__name__)

# HubSpot rejects batch payloads above 100 inputs; groups stay below that.
BATCH_GROUP_SIZE = 90

DEFAULT_RECENT_DAYS = 7

DEFAULT_CONTACT_PROPERTIES = ["email", "firstname", "lastname", "lifecyclestage"]
DEFAULT_COMPANY_PROPERTIES = ["name", "domain", "industry", "city", "country"]
DEFAULT_DEAL_PROPERTIES = ["dealname", "amount", "dealstage", "pipeline", "hs_close_date"]

T = TypeVar("T")

ToolHandler = Callable[[Any], Awaitable[ToolResult]]


def chunked(items: Sequence[T], size: int) -> list[list[T]]:
    """Split ``items`` into contiguous groups of at most ``size``, preserving order."""
    if size < 1:
        raise ValueError("size must be positive")
    return [list(items[start : start + size]) for start in range(0, len(items), size)]


def last_modified_property(object_type: str) -> str:
    # Contacts predate the hs_ prefix and keep their own name for it.
    return "lastmodifieddate" if object_type == "contacts" else "hs_lastmodifieddate"


def search_body(
    *,
    filter_groups: list[dict[str, Any]],
    limit: int,
    properties: list[str] | None = None,
    after: str | None = None,
    sorts: list[dict[str, Any]] | None = None,
    query: str | None = None,
) -> dict[str, Any]:
    """Build the body of a ``/crm/v3/objects/{type}/search`` call."""
    body: dict[str, Any] = {"filterGroups": filter_groups, "limit": limit}
    if properties is not None:
        body["properties"] = properties
    if after is not None:
        body["after"] = after
    if sorts:
        body["sorts"] = sorts
    if query:
        body["query"] = query
    return body


def _token_filter_groups(query: str | None, property_names: Sequence[str]) -> list[dict[str, Any]]:
    # One group per property so that a match on any of them is enough.
    if not query:
        return []
    return [
        {"filters": [{"propertyName": name, "operator": "CONTAINS_TOKEN", "value": query}]}
        for name in property_names
    ]


def _epoch_millis(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return str(int(moment.timestamp() * 1000))


def _listing(data: Mapping[str, Any]) -> ToolResult:
    return ToolResult.listing(list(data.get("results") or []), data.get("paging"))


class ToolInvoker:
    """Runs catalog tools against HubSpot.

    Usage:
        invoker = ToolInvoker(hubspot)
        result = await invoker.invoke("hubspot.deals.search", {"stage": "closedwon"})
        result.to_dict()  # {"ok": True, "count": ..., "results": [...], "paging": ...}
    """

    def __init__(self, hubspot: HubSpotClient) -> None:
        self._hubspot = hubspot
        self._handlers: dict[str, ToolHandler] = {
            catalog.SEARCH_CONTACTS: self.search_contacts,
            catalog.SEARCH_COMPANIES: self.search_companies,
            catalog.SEARCH_DEALS: self.search_deals,
            catalog.LIST_OWNERS: self.list_owners,
            catalog.GET_OBJECT_PROPERTIES: self.get_object_properties,
            catalog.GET_PIPELINES: self.get_pipelines,
            catalog.PAGINATE_OBJECTS: self.paginate_objects,
            catalog.BATCH_READ: self.batch_read,
            catalog.BATCH_READ_ASSOCIATIONS: self.batch_read_associations,
            catalog.SEARCH_RECENTLY_MODIFIED: self.search_recently_modified,
            catalog.ADVANCED_SEARCH: self.advanced_search,
        }

    async def invoke(self, name: str, arguments: Mapping[str, Any] | None = None) -> ToolResult:
        """Validate ``arguments`` for tool ``name`` and run it."""
        definition = catalog.get_tool_definition(name)
        handler = self._handlers.get(name)
        if definition is None or handler is None:
            return ToolResult.failure(f"Unknown tool: {name!r}")

        try:
            validated = definition.arguments.model_validate(dict(arguments or {}))
        except ValidationError as err:
            logger.info("Rejected arguments for %s: %d error(s)", name, err.error_count())
            return ToolResult.failure(f"Invalid arguments for {name}: {err}")

        try:
            result = await handler(validated)
        except HubSpotError as err:
            return ToolResult.failure(str(err))
        except Exception as err:
            logger.exception("Tool %s failed", name)
            return ToolResult.failure(f"{type(err).__name__}: {err}")

        logger.debug("Tool %s returned %s result(s)", name, result.count)
        return result

    async def search_contacts(self, args: SearchContactsArguments) -> ToolResult:
        body = search_body(
            filter_groups=_token_filter_groups(args.query, ["email", "firstname"]),
            properties=args.properties or DEFAULT_CONTACT_PROPERTIES,
            limit=args.limit,
            after=args.after,
        )
        return _listing(await self._hubspot.post("/crm/v3/objects/contacts/search", body))

    async def search_companies(self, args: SearchCompaniesArguments) -> ToolResult:
        body = search_body(
            filter_groups=_token_filter_groups(args.query, ["name", "domain"]),
            properties=args.properties or DEFAULT_COMPANY_PROPERTIES,
            limit=args.limit,
            after=args.after,
        )
        return _listing(await self._hubspot.post("/crm/v3/objects/companies/search", body))

    async def search_deals(self, args: SearchDealsArguments) -> ToolResult:
        filters: list[dict[str, Any]] = []
        if args.stage:
            filters.append({"propertyName": "dealstage", "operator": "EQ", "value": args.stage})
        if args.pipeline:
            filters.append({"propertyName": "pipeline", "operator": "EQ", "value": args.pipeline})
        body = search_body(
            filter_groups=[{"filters": filters}] if filters else [],
            properties=args.properties or DEFAULT_DEAL_PROPERTIES,
            limit=args.limit,
            after=args.after,
        )
        return _listing(await self._hubspot.post("/crm/v3/objects/deals/search", body))

    async def list_owners(self, args: ListOwnersArguments) -> ToolResult:
        data = await self._hubspot.get(
            "/crm/v3/owners",
            {"limit": args.limit, "after": args.after, "email": args.email},
        )
        return ToolResult.passthrough(data)

    async def get_object_properties(self, args: GetObjectPropertiesArguments) -> ToolResult:
        return ToolResult.passthrough(await self._hubspot.get(f"/crm/v3/properties/{args.object_type}"))

    async def get_pipelines(self, args: GetPipelinesArguments) -> ToolResult:
        return ToolResult.passthrough(await self._hubspot.get(f"/crm/v3/pipelines/{args.object_type}"))

    async def paginate_objects(self, args: PaginateObjectsArguments) -> ToolResult:
        data = await self._hubspot.get(
            f"/crm/v3/objects/{args.object_type}",
            {
                "limit": args.limit,
                "after": args.after,
                "properties": args.properties,
                "archived": args.archived,
            },
        )
        return _listing(data)

    async def batch_read(self, args: BatchReadArguments) -> ToolResult:
        path = f"/crm/v3/objects/{args.object_type}/batch/read"
        results: list[Any] = []
        errors: list[Any] = []
        for group in chunked(args.ids, BATCH_GROUP_SIZE):
            body: dict[str, Any] = {"inputs": [{"id": record_id} for record_id in group]}
            if args.properties is not None:
                body["properties"] = args.properties
            data = await self._hubspot.post(path, body)
            results.extend(data.get("results") or [])
            errors.extend(data.get("errors") or [])
        return self._batch_result(results, errors)

    async def batch_read_associations(self, args: BatchReadAssociationsArguments) -> ToolResult:
        path = f"/crm/v4/associations/{args.from_object_type}/{args.to_object_type}/batch/read"
        results: list[Any] = []
        errors: list[Any] = []
        for group in chunked(args.ids, BATCH_GROUP_SIZE):
            data = await self._hubspot.post(path, {"inputs": [{"id": record_id} for record_id in group]})
            results.extend(data.get("results") or [])
            errors.extend(data.get("errors") or [])
        return self._batch_result(results, errors)

    async def search_recently_modified(self, args: SearchRecentlyModifiedArguments) -> ToolResult:
        since = args.since
        if since is None:
            since = datetime.now(timezone.utc) - timedelta(days=args.days or DEFAULT_RECENT_DAYS)
        modified = last_modified_property(args.object_type)
        body = search_body(
            filter_groups=[{"filters": [{"propertyName": modified, "operator": "GTE", "value": _epoch_millis(since)}]}],
            sorts=[{"propertyName": modified, "direction": "DESCENDING"}],
            properties=args.properties,
            limit=args.limit,
            after=args.after,
        )
        return _listing(await self._hubspot.post(f"/crm/v3/objects/{args.object_type}/search", body))

    async def advanced_search(self, args: AdvancedSearchArguments) -> ToolResult:
        body = search_body(
            filter_groups=[group.model_dump(by_alias=True, exclude_none=True) for group in args.filter_groups],
            sorts=[sort.model_dump(by_alias=True) for sort in args.sorts] if args.sorts else None,
            query=args.query,
            properties=args.properties,
            limit=args.limit,
            after=args.after,
        )
        return _listing(await self._hubspot.post(f"/crm/v3/objects/{args.object_type}/search", body))

    @staticmethod
    def _batch_result(results: list[Any], errors: list[Any]) -> ToolResult:
        if not errors:
            return ToolResult.listing(results)
        # Ids HubSpot could not find are reported alongside, not as a failure.
        return ToolResult(ok=True, count=len(results), results=results, paging=None, errors=errors)
