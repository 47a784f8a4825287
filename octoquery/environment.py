"""Planning environment: schemas, variable scopes, function catalogues,
datasource resolution and group-by triggers."""

from __future__ import annotations

import dataclasses
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, ClassVar, Optional, Sequence


@dataclass
class SchemaField:
    """A named, typed column of a record."""

    name: str
    type: Any = None


@dataclass
class Schema:
    """The columns of a record stream; ``time_field`` is -1 when absent."""

    fields: list[SchemaField] = field(default_factory=list)
    time_field: int = -1


@dataclass
class VariableContext:
    """A scope of visible record fields, chained to its enclosing scope."""

    fields: list[SchemaField] = field(default_factory=list)
    parent: Optional["VariableContext"] = None

    def with_record_schema(self, schema: Schema) -> "VariableContext":
        """Return a new innermost scope holding the fields of ``schema``."""
        return VariableContext(fields=schema.fields, parent=self)


@dataclass
class AggregateDescriptor:
    """One typed overload of an aggregate."""

    argument_type: Any = None
    output_type: Any = None
    type_fn: Optional[Callable[[Any], tuple[Any, bool]]] = None
    prototype: Optional[Callable[[], Any]] = None


@dataclass
class AggregateDetails:
    """An aggregate's description and its overloads."""

    description: str = ""
    descriptors: list[AggregateDescriptor] = field(default_factory=list)


@dataclass
class FunctionDescriptor:
    """One typed overload of a scalar function.

    A strict function yields null whenever an argument is null.
    """

    argument_types: list[Any] = field(default_factory=list)
    output_type: Any = None
    type_fn: Optional[Callable[[list[Any]], tuple[Any, bool]]] = None
    strict: bool = False
    function: Optional[Callable[[list[Any]], Any]] = None


@dataclass
class FunctionDetails:
    """A function's description and its overloads."""

    description: str = ""
    descriptors: list[FunctionDescriptor] = field(default_factory=list)


class DatasourceImplementation(ABC):
    """A table that can accept pushed-down filter predicates."""

    @abstractmethod
    def push_down_predicates(
        self, new_predicates: Sequence[Any], pushed_down_predicates: Sequence[Any]
    ) -> tuple[list[Any], list[Any], bool]:
        """Return (rejected, pushed_down, changed) for the offered predicates."""


class Database(ABC):
    """A named collection of tables."""

    @abstractmethod
    def list_tables(self) -> list[str]:
        """Return the names of the tables in this database."""

    @abstractmethod
    def get_table(self, name: str) -> tuple[DatasourceImplementation, Schema]:
        """Return the implementation and schema of the named table."""


class DatasourceError(LookupError):
    """Raised when a datasource name cannot be resolved."""


@dataclass
class DatasourceRepository:
    """Resolves table names to datasources.

    Names ending in ``.json`` or ``.csv`` go to the matching file handler,
    ``db.table`` goes to database ``db`` and a bare name to the default
    database.
    """

    databases: dict[str, Callable[[], Database]] = field(default_factory=dict)
    default_database: str = ""
    file_handlers: dict[
        str, Callable[[str], tuple[DatasourceImplementation, Schema]]
    ] = field(default_factory=dict)

    def get_datasource(self, name: str) -> tuple[DatasourceImplementation, Schema]:
        """Return the implementation and schema for ``name``."""
        for extension in ("json", "csv"):
            if name.endswith("." + extension):
                handler = self.file_handlers.get(extension)
                if handler is None:
                    raise DatasourceError(f"no file handler for {extension} files: {name}")
                return handler(name)

        db_name, dot, table = name.partition(".")
        if dot:
            constructor = self.databases.get(db_name)
            if constructor is None:
                raise DatasourceError(f"no such database: {db_name}, as in {name}")
            return self._open(db_name, constructor).get_table(table)

        constructor = self.databases.get(self.default_database)
        if constructor is None:
            raise DatasourceError(f"unknown datasource: {name}")
        return self._open(self.default_database, constructor).get_table(name)

    @staticmethod
    def _open(db_name: str, constructor: Callable[[], Database]) -> Database:
        try:
            return constructor()
        except Exception as exc:
            raise DatasourceError(
                f"couldn't initialize database '{db_name}': {exc}"
            ) from exc


@dataclass
class Environment:
    """Everything planning and materialisation need to look up."""

    aggregates: dict[str, AggregateDetails] = field(default_factory=dict)
    datasources: Optional[DatasourceRepository] = None
    functions: dict[str, FunctionDetails] = field(default_factory=dict)
    physical_config: dict[str, Any] = field(default_factory=dict)
    variable_context: Optional[VariableContext] = None

    def with_record_schema(self, schema: Schema) -> "Environment":
        """Return a copy whose variable scope gains the fields of ``schema``."""
        context = VariableContext(fields=schema.fields, parent=self.variable_context)
        return dataclasses.replace(self, variable_context=context)


class TriggerType(Enum):
    """The kinds of trigger that decide when a group-by emits."""

    COUNTING = "counting"
    END_OF_STREAM = "end_of_stream"
    WATERMARK = "watermark"
    MULTI = "multi"

    def __str__(self) -> str:
        return self.value


@dataclass
class CountingTrigger:
    """Fires after a fixed number of records."""

    kind: ClassVar[TriggerType] = TriggerType.COUNTING
    trigger_after: int = 0

    def __post_init__(self) -> None:
        if self.trigger_after < 0:
            raise ValueError("trigger_after must not be negative")


@dataclass
class EndOfStreamTrigger:
    """Fires once the input stream ends."""

    kind: ClassVar[TriggerType] = TriggerType.END_OF_STREAM


@dataclass
class WatermarkTrigger:
    """Fires when the watermark passes the value of a time field."""

    kind: ClassVar[TriggerType] = TriggerType.WATERMARK
    time_field_index: int = 0


@dataclass
class MultiTrigger:
    """Fires whenever any of its triggers fires."""

    kind: ClassVar[TriggerType] = TriggerType.MULTI
    triggers: list[Any] = field(default_factory=list)