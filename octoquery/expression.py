"""Typed expressions of a physical query plan."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Union

from octoquery.environment import FunctionDescriptor


class ExpressionType(Enum):
    """The kinds of expression."""

    VARIABLE = "variable"
    CONSTANT = "constant"
    FUNCTION_CALL = "function_call"
    AND = "and"
    OR = "or"
    QUERY_EXPRESSION = "query_expression"
    COALESCE = "coalesce"
    TUPLE = "tuple"
    TYPE_ASSERTION = "type_assertion"
    CAST = "cast"
    OBJECT_FIELD_ACCESS = "object_field_access"

    def __str__(self) -> str:
        return self.value


@dataclass
class Variable:
    """A reference to a field; ``is_level0`` marks the current record's scope."""

    kind: ClassVar[ExpressionType] = ExpressionType.VARIABLE
    name: str
    is_level0: bool = False


@dataclass
class Constant:
    """A literal value."""

    kind: ClassVar[ExpressionType] = ExpressionType.CONSTANT
    value: Any = None


@dataclass
class FunctionCall:
    """A call of a scalar function resolved to one overload."""

    kind: ClassVar[ExpressionType] = ExpressionType.FUNCTION_CALL
    name: str
    arguments: list["Expression"] = field(default_factory=list)
    function_descriptor: FunctionDescriptor = field(default_factory=FunctionDescriptor)


@dataclass
class And:
    """Logical conjunction."""

    kind: ClassVar[ExpressionType] = ExpressionType.AND
    arguments: list["Expression"] = field(default_factory=list)


@dataclass
class Or:
    """Logical disjunction."""

    kind: ClassVar[ExpressionType] = ExpressionType.OR
    arguments: list["Expression"] = field(default_factory=list)


@dataclass
class QueryExpression:
    """A subquery used as a value."""

    kind: ClassVar[ExpressionType] = ExpressionType.QUERY_EXPRESSION
    source: Any = None


@dataclass
class Coalesce:
    """The first non-null of its arguments."""

    kind: ClassVar[ExpressionType] = ExpressionType.COALESCE
    arguments: list["Expression"] = field(default_factory=list)


@dataclass
class Tuple:
    """A tuple built from its arguments."""

    kind: ClassVar[ExpressionType] = ExpressionType.TUPLE
    arguments: list["Expression"] = field(default_factory=list)


@dataclass
class TypeAssertion:
    """Asserts at run time that a value has the target type."""

    kind: ClassVar[ExpressionType] = ExpressionType.TYPE_ASSERTION
    expression: "Expression"
    target_type: Any = None


@dataclass
class Cast:
    """Converts a value to the target type."""

    kind: ClassVar[ExpressionType] = ExpressionType.CAST
    expression: "Expression"
    target_type_id: Any = None


@dataclass
class ObjectFieldAccess:
    """Reads one field of an object value."""

    kind: ClassVar[ExpressionType] = ExpressionType.OBJECT_FIELD_ACCESS
    object: "Expression"
    field: str = ""


ExpressionBody = Union[
    Variable,
    Constant,
    FunctionCall,
    And,
    Or,
    QueryExpression,
    Coalesce,
    Tuple,
    TypeAssertion,
    Cast,
    ObjectFieldAccess,
]


@dataclass
class Expression:
    """A typed expression; ``body`` holds the kind-specific part."""

    body: ExpressionBody
    type: Any = None

    @property
    def expression_type(self) -> ExpressionType:
        return self.body.kind

    def split_by_and(self) -> list["Expression"]:
        """Flatten nested conjunctions into their conjuncts."""
        if not isinstance(self.body, And):
            return [self]
        return [part for arg in self.body.arguments for part in arg.split_by_and()]

    def variables_used(self) -> set[str]:
        """Return the names of all variables the expression refers to.

        Raises ValueError for expression kinds whose variables cannot be listed.
        """
        acc: set[str] = set()
        self._collect_variables(acc)
        return acc

    def _collect_variables(self, acc: set[str]) -> None:
        body = self.body
        if isinstance(body, Variable):
            acc.add(body.name)
        elif isinstance(body, Constant):
            return
        elif isinstance(body, (FunctionCall, And, Or)):
            for arg in body.arguments:
                arg._collect_variables(acc)
        elif isinstance(body, (TypeAssertion, Cast)):
            body.expression._collect_variables(acc)
        else:
            raise ValueError(f"cannot list variables of a {body.kind} expression")


def variable_name_matches_field(var_name: str, field_name: str) -> bool:
    """True if the variable names the field, with or without its qualifier."""
    if var_name == field_name:
        return True
    if var_name.count(".") == field_name.count(".") - 1:
        return field_name.partition(".")[2] == var_name
    return False