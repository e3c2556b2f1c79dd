"""The fixed set of tools this server exposes."""

from __future__ import annotations

from dataclasses import dataclass

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
    ToolArguments,
)
from hubspot_mcp.types import JsonSchema, Tool, ToolAnnotations

SEARCH_CONTACTS = "hubspot.contacts.search"
SEARCH_COMPANIES = "hubspot.companies.search"
SEARCH_DEALS = "hubspot.deals.search"
LIST_OWNERS = "hubspot.owners.list"
GET_OBJECT_PROPERTIES = "hubspot.properties.get"
GET_PIPELINES = "hubspot.pipelines.get"
PAGINATE_OBJECTS = "hubspot.objects.paginate"
BATCH_READ = "hubspot.objects.batch_read"
BATCH_READ_ASSOCIATIONS = "hubspot.associations.batch_read"
SEARCH_RECENTLY_MODIFIED = "hubspot.objects.recently_modified"
ADVANCED_SEARCH = "hubspot.objects.advanced_search"


@dataclass(frozen=True)
class ToolDefinition:
    """A tool's public description together with its input contract."""

    name: str
    title: str
    description: str
    arguments: type[ToolArguments]

    def to_tool(self) -> Tool:
        schema = self.arguments.model_json_schema(by_alias=True)
        schema.pop("title", None)
        return Tool(
            name=self.name,
            title=self.title,
            description=self.description,
            input_schema=JsonSchema.model_validate(schema),
            annotations=ToolAnnotations(
                title=self.title,
                read_only_hint=True,
                destructive_hint=False,
                idempotent_hint=True,
                open_world_hint=True,
            ),
        )


TOOL_DEFINITIONS: tuple[ToolDefinition, ...] = (
    ToolDefinition(
        name=SEARCH_CONTACTS,
        title="Search contacts",
        description="Search contacts whose email or first name contains the query token.",
        arguments=SearchContactsArguments,
    ),
    ToolDefinition(
        name=SEARCH_COMPANIES,
        title="Search companies",
        description="Search companies whose name or domain contains the query token.",
        arguments=SearchCompaniesArguments,
    ),
    ToolDefinition(
        name=SEARCH_DEALS,
        title="Search deals",
        description="Filter deals by stage and/or pipeline.",
        arguments=SearchDealsArguments,
    ),
    ToolDefinition(
        name=LIST_OWNERS,
        title="List owners",
        description="List the CRM owners (users records can be assigned to).",
        arguments=ListOwnersArguments,
    ),
    ToolDefinition(
        name=GET_OBJECT_PROPERTIES,
        title="Get object properties",
        description="Describe every property defined for a CRM object type.",
        arguments=GetObjectPropertiesArguments,
    ),
    ToolDefinition(
        name=GET_PIPELINES,
        title="Get pipelines",
        description="List the pipelines and their stages for deals or tickets.",
        arguments=GetPipelinesArguments,
    ),
    ToolDefinition(
        name=PAGINATE_OBJECTS,
        title="Page through objects",
        description="Read one page of records of a CRM object type; pass paging.next.after to continue.",
        arguments=PaginateObjectsArguments,
    ),
    ToolDefinition(
        name=BATCH_READ,
        title="Batch read by id",
        description="Read up to 1000 records of one object type by id.",
        arguments=BatchReadArguments,
    ),
    ToolDefinition(
        name=BATCH_READ_ASSOCIATIONS,
        title="Batch read associations",
        description="Read the associations from up to 1000 records to another object type.",
        arguments=BatchReadAssociationsArguments,
    ),
    ToolDefinition(
        name=SEARCH_RECENTLY_MODIFIED,
        title="Recently modified records",
        description="Find records modified since a timestamp or within the last N days, newest first.",
        arguments=SearchRecentlyModifiedArguments,
    ),
    ToolDefinition(
        name=ADVANCED_SEARCH,
        title="Advanced search",
        description="Search any object type with explicit filter groups, sorts and an optional query.",
        arguments=AdvancedSearchArguments,
    ),
)

_BY_NAME = {definition.name: definition for definition in TOOL_DEFINITIONS}


def get_tool_definition(name: str) -> ToolDefinition | None:
    return _BY_NAME.get(name)


def list_tools() -> list[Tool]:
    return [definition.to_tool() for definition in TOOL_DEFINITIONS]
