"""Input contracts for each tool.

Arguments are validated here before anything reaches HubSpot. Unknown fields,
out-of-range numbers and unknown enumeration values are rejected rather than
defaulted.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

ObjectType = Literal["contacts", "companies", "deals", "tickets", "products", "line_items", "quotes"]
PipelineObjectType = Literal["deals", "tickets"]

FilterOperator = Literal[
    "EQ",
    "NEQ",
    "LT",
    "LTE",
    "GT",
    "GTE",
    "BETWEEN",
    "IN",
    "NOT_IN",
    "HAS_PROPERTY",
    "NOT_HAS_PROPERTY",
    "CONTAINS_TOKEN",
    "NOT_CONTAINS_TOKEN",
]

PageSize = Annotated[int, Field(ge=1, le=100, description="Number of records per page (1-100).")]
Cursor = Annotated[str, Field(min_length=1, description="Paging cursor returned as paging.next.after.")]
PropertyNames = Annotated[list[str], Field(min_length=1, description="CRM property names to return.")]
RecordIds = Annotated[
    list[Annotated[str, Field(min_length=1)]],
    Field(min_length=1, max_length=1000, description="Record ids to read, in the order results are wanted."),
]


class ToolArguments(BaseModel):
    """Base class for tool argument models."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class SearchContactsArguments(ToolArguments):
    query: Annotated[str | None, Field(description="Token matched against email and first name.")] = None
    properties: PropertyNames | None = None
    limit: PageSize = 20
    after: Cursor | None = None


class SearchCompaniesArguments(ToolArguments):
    query: Annotated[str | None, Field(description="Token matched against company name and domain.")] = None
    properties: PropertyNames | None = None
    limit: PageSize = 20
    after: Cursor | None = None


class SearchDealsArguments(ToolArguments):
    stage: Annotated[str | None, Field(description="Internal deal stage id, e.g. closedwon.")] = None
    pipeline: Annotated[str | None, Field(description="Internal pipeline id.")] = None
    properties: PropertyNames | None = None
    limit: PageSize = 20
    after: Cursor | None = None


class ListOwnersArguments(ToolArguments):
    email: Annotated[str | None, Field(description="Only return the owner with this email.")] = None
    limit: PageSize = 100
    after: Cursor | None = None


class GetObjectPropertiesArguments(ToolArguments):
    object_type: ObjectType


class GetPipelinesArguments(ToolArguments):
    object_type: PipelineObjectType = "deals"


class PaginateObjectsArguments(ToolArguments):
    object_type: ObjectType
    properties: PropertyNames | None = None
    limit: PageSize = 100
    after: Cursor | None = None
    archived: bool = False


class BatchReadArguments(ToolArguments):
    object_type: ObjectType
    ids: RecordIds
    properties: PropertyNames | None = None


class BatchReadAssociationsArguments(ToolArguments):
    from_object_type: ObjectType
    to_object_type: ObjectType
    ids: RecordIds


class SearchRecentlyModifiedArguments(ToolArguments):
    object_type: ObjectType
    since: Annotated[
        datetime | None,
        Field(description="ISO-8601 timestamp; records modified at or after it are returned."),
    ] = None
    days: Annotated[
        int | None,
        Field(ge=1, le=365, description="Look-back window in days, used when since is not given (default 7)."),
    ] = None
    properties: PropertyNames | None = None
    limit: PageSize = 20
    after: Cursor | None = None

    @model_validator(mode="after")
    def _since_or_days(self) -> SearchRecentlyModifiedArguments:
        if self.since is not None and self.days is not None:
            raise ValueError("pass either 'since' or 'days', not both")
        return self


class SearchFilter(ToolArguments):
    property_name: Annotated[str, Field(alias="propertyName", min_length=1)]
    operator: FilterOperator
    value: str | int | float | bool | None = None
    high_value: Annotated[str | int | float | None, Field(alias="highValue")] = None
    values: list[str | int | float] | None = None

    @model_validator(mode="after")
    def _operands_match_operator(self) -> SearchFilter:
        if self.operator == "BETWEEN" and (self.value is None or self.high_value is None):
            raise ValueError("BETWEEN requires both 'value' and 'highValue'")
        if self.operator in ("IN", "NOT_IN") and not self.values:
            raise ValueError(f"{self.operator} requires a non-empty 'values' list")
        if (
            self.operator not in ("BETWEEN", "IN", "NOT_IN", "HAS_PROPERTY", "NOT_HAS_PROPERTY")
            and self.value is None
        ):
            raise ValueError(f"{self.operator} requires 'value'")
        return self


class SearchFilterGroup(ToolArguments):
    filters: Annotated[list[SearchFilter], Field(min_length=1, max_length=6)]


class SearchSort(ToolArguments):
    property_name: Annotated[str, Field(alias="propertyName", min_length=1)]
    direction: Literal["ASCENDING", "DESCENDING"] = "DESCENDING"


class AdvancedSearchArguments(ToolArguments):
    object_type: ObjectType
    filter_groups: Annotated[
        list[SearchFilterGroup],
        Field(
            default_factory=list,
            max_length=5,
            description="Groups are ORed together; filters inside a group are ANDed.",
        ),
    ]
    sorts: list[SearchSort] | None = None
    query: Annotated[str | None, Field(description="Free-text query over the default searchable properties.")] = None
    properties: PropertyNames | None = None
    limit: PageSize = 20
    after: Cursor | None = None
