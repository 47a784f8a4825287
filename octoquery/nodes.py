"""Nodes of a physical query plan."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Optional, Union

from octoquery.environment import (
    AggregateDescriptor,
    CountingTrigger,
    DatasourceImplementation,
    EndOfStreamTrigger,
    MultiTrigger,
    Schema,
    WatermarkTrigger,
)
from octoquery.expression import Expression

Trigger = Union[CountingTrigger, EndOfStreamTrigger, WatermarkTrigger, MultiTrigger]


class NodeType(Enum):
    """The kinds of plan node."""

    DATASOURCE = "datasource"
    DISTINCT = "distinct"
    FILTER = "filter"
    GROUP_BY = "group_by"
    LOOKUP_JOIN = "lookup_join"
    STREAM_JOIN = "stream_join"
    MAP = "map"
    ORDER_BY = "order_by"
    REQUALIFIER = "requalifier"
    TABLE_VALUED_FUNCTION = "table_valued_function"
    UNNEST = "unnest"

    def __str__(self) -> str:
        return self.value


@dataclass
class Datasource:
    """A table read from a datasource, with the predicates pushed into it.

    ``variable_mapping`` maps qualified column names to the unique variable
    names used in the rest of the plan.
    """

    kind: ClassVar[NodeType] = NodeType.DATASOURCE
    name: str
    alias: str = ""
    datasource_implementation: Optional[DatasourceImplementation] = None
    variable_mapping: dict[str, str] = field(default_factory=dict)
    predicates: list[Expression] = field(default_factory=list)


@dataclass
class Distinct:
    """Removes duplicate records."""

    kind: ClassVar[NodeType] = NodeType.DISTINCT
    source: "Node"


@dataclass
class Filter:
    """Keeps the records for which the predicate holds."""

    kind: ClassVar[NodeType] = NodeType.FILTER
    source: "Node"
    predicate: Expression


@dataclass
class Aggregate:
    """An aggregate column of a group-by."""

    name: str
    output_type: Any = None
    aggregate_descriptor: AggregateDescriptor = field(
        default_factory=AggregateDescriptor
    )


@dataclass
class GroupBy:
    """Groups records by key and aggregates each group.

    ``key_event_time_index`` indexes ``key``, or is -1 if no key part is
    the event time.
    """

    kind: ClassVar[NodeType] = NodeType.GROUP_BY
    source: "Node"
    aggregates: list[Aggregate] = field(default_factory=list)
    aggregate_expressions: list[Expression] = field(default_factory=list)
    key: list[Expression] = field(default_factory=list)
    key_event_time_index: int = -1
    trigger: Trigger = field(default_factory=EndOfStreamTrigger)


@dataclass
class StreamJoin:
    """Joins two streams on equal keys."""

    kind: ClassVar[NodeType] = NodeType.STREAM_JOIN
    left: "Node"
    right: "Node"
    left_key: list[Expression] = field(default_factory=list)
    right_key: list[Expression] = field(default_factory=list)


@dataclass
class LookupJoin:
    """Evaluates ``joined`` once for every record of ``source``."""

    kind: ClassVar[NodeType] = NodeType.LOOKUP_JOIN
    source: "Node"
    joined: "Node"


@dataclass
class Map:
    """Computes one output column per expression."""

    kind: ClassVar[NodeType] = NodeType.MAP
    source: "Node"
    expressions: list[Expression] = field(default_factory=list)


@dataclass
class OrderBy:
    """Sorts records; a multiplier of 1 is ascending, -1 descending."""

    kind: ClassVar[NodeType] = NodeType.ORDER_BY
    source: "Node"
    key: list[Expression] = field(default_factory=list)
    direction_multipliers: list[int] = field(default_factory=list)


@dataclass
class Requalifier:
    """Gives the columns of its source a new qualifier."""

    kind: ClassVar[NodeType] = NodeType.REQUALIFIER
    source: "Node"
    qualifier: str = ""


class TableValuedFunctionArgumentType(Enum):
    """The kinds of argument a table valued function takes."""

    EXPRESSION = "expression"
    TABLE = "table"
    DESCRIPTOR = "descriptor"

    def __str__(self) -> str:
        return self.value


@dataclass
class ExpressionArgument:
    """A scalar expression passed to a table valued function."""

    kind: ClassVar[TableValuedFunctionArgumentType] = (
        TableValuedFunctionArgumentType.EXPRESSION
    )
    expression: Expression

    def __str__(self) -> str:
        return str(self.expression.type)


@dataclass
class TableArgument:
    """A table passed to a table valued function."""

    kind: ClassVar[TableValuedFunctionArgumentType] = (
        TableValuedFunctionArgumentType.TABLE
    )
    table: "Node"

    def __str__(self) -> str:
        return "TABLE"


@dataclass
class DescriptorArgument:
    """A column descriptor passed to a table valued function."""

    kind: ClassVar[TableValuedFunctionArgumentType] = (
        TableValuedFunctionArgumentType.DESCRIPTOR
    )
    descriptor: str

    def __str__(self) -> str:
        return "DESCRIPTOR"


TableValuedFunctionArgument = Union[ExpressionArgument, TableArgument, DescriptorArgument]


@dataclass
class TableValuedFunction:
    """A call of a function that produces a table."""

    kind: ClassVar[NodeType] = NodeType.TABLE_VALUED_FUNCTION
    name: str
    arguments: dict[str, TableValuedFunctionArgument] = field(default_factory=dict)
    function_descriptor: Any = None


@dataclass
class Unnest:
    """Expands a list-valued field into one record per element."""

    kind: ClassVar[NodeType] = NodeType.UNNEST
    source: "Node"
    field: str = ""


NodeBody = Union[
    Datasource,
    Distinct,
    Filter,
    GroupBy,
    LookupJoin,
    StreamJoin,
    Map,
    OrderBy,
    Requalifier,
    TableValuedFunction,
    Unnest,
]


@dataclass
class Node:
    """A plan node with its output schema; ``body`` holds the kind-specific part."""

    body: NodeBody
    schema: Schema = field(default_factory=Schema)

    @property
    def node_type(self) -> NodeType:
        return self.body.kind