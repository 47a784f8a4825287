"""Rebuilding plan trees with per-node and per-expression rewrites."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable, Mapping, Optional, Sequence

from octoquery.expression import (
    And,
    Cast,
    Coalesce,
    Constant,
    Expression,
    FunctionCall,
    ObjectFieldAccess,
    Or,
    QueryExpression,
    Tuple,
    TypeAssertion,
    Variable,
)
from octoquery.nodes import (
    Datasource,
    DescriptorArgument,
    Distinct,
    ExpressionArgument,
    Filter,
    GroupBy,
    LookupJoin,
    Map,
    Node,
    OrderBy,
    Requalifier,
    StreamJoin,
    TableArgument,
    TableValuedFunction,
    TableValuedFunctionArgument,
    Unnest,
)

NodeTransformer = Callable[[Node], Node]
ExpressionTransformer = Callable[[Expression], Expression]


@dataclass
class Transformers:
    """Rebuilds a tree bottom-up, applying the optional transformers.

    Every node and expression is copied; a transformer sees each rebuilt
    element after its children have been transformed.
    """

    node_transformer: Optional[NodeTransformer] = None
    expression_transformer: Optional[ExpressionTransformer] = None

    def transform_node(self, node: Node) -> Node:
        """Return a transformed copy of ``node`` and everything below it."""
        body = node.body
        if isinstance(body, Datasource):
            new_body = Datasource(
                name=body.name,
                alias=body.alias,
                datasource_implementation=body.datasource_implementation,
                variable_mapping=body.variable_mapping,
                predicates=self._exprs(body.predicates),
            )
        elif isinstance(body, Distinct):
            new_body = Distinct(source=self.transform_node(body.source))
        elif isinstance(body, Filter):
            new_body = Filter(
                source=self.transform_node(body.source),
                predicate=self.transform_expr(body.predicate),
            )
        elif isinstance(body, GroupBy):
            aggregate_expressions = self._exprs(body.aggregate_expressions)
            key = self._exprs(body.key)
            new_body = GroupBy(
                source=self.transform_node(body.source),
                aggregates=list(body.aggregates),
                aggregate_expressions=aggregate_expressions,
                key=key,
                key_event_time_index=body.key_event_time_index,
                trigger=body.trigger,
            )
        elif isinstance(body, StreamJoin):
            left_key = self._exprs(body.left_key)
            right_key = self._exprs(body.right_key)
            new_body = StreamJoin(
                left=self.transform_node(body.left),
                right=self.transform_node(body.right),
                left_key=left_key,
                right_key=right_key,
            )
        elif isinstance(body, LookupJoin):
            new_body = LookupJoin(
                source=self.transform_node(body.source),
                joined=self.transform_node(body.joined),
            )
        elif isinstance(body, Map):
            expressions = self._exprs(body.expressions)
            new_body = Map(source=self.transform_node(body.source), expressions=expressions)
        elif isinstance(body, OrderBy):
            key = self._exprs(body.key)
            new_body = OrderBy(
                source=self.transform_node(body.source),
                key=key,
                direction_multipliers=list(body.direction_multipliers),
            )
        elif isinstance(body, Requalifier):
            new_body = Requalifier(
                source=self.transform_node(body.source), qualifier=body.qualifier
            )
        elif isinstance(body, TableValuedFunction):
            new_body = TableValuedFunction(
                name=body.name,
                arguments={
                    name: self._tvf_argument(arg) for name, arg in body.arguments.items()
                },
                function_descriptor=body.function_descriptor,
            )
        elif isinstance(body, Unnest):
            new_body = Unnest(source=self.transform_node(body.source), field=body.field)
        else:
            raise TypeError(f"unknown node body type: {type(body).__name__}")

        out = Node(body=new_body, schema=node.schema)
        if self.node_transformer is not None:
            out = self.node_transformer(out)
        return out

    def transform_expr(self, expr: Expression) -> Expression:
        """Return a transformed copy of ``expr`` and everything below it."""
        body = expr.body
        if isinstance(body, Variable):
            new_body = Variable(name=body.name, is_level0=body.is_level0)
        elif isinstance(body, Constant):
            new_body = Constant(value=body.value)
        elif isinstance(body, FunctionCall):
            new_body = FunctionCall(
                name=body.name,
                arguments=self._exprs(body.arguments),
                function_descriptor=body.function_descriptor,
            )
        elif isinstance(body, (And, Or, Coalesce, Tuple)):
            new_body = type(body)(arguments=self._exprs(body.arguments))
        elif isinstance(body, QueryExpression):
            new_body = QueryExpression(source=self.transform_node(body.source))
        elif isinstance(body, TypeAssertion):
            new_body = TypeAssertion(
                expression=self.transform_expr(body.expression),
                target_type=body.target_type,
            )
        elif isinstance(body, Cast):
            new_body = Cast(
                expression=self.transform_expr(body.expression),
                target_type_id=body.target_type_id,
            )
        elif isinstance(body, ObjectFieldAccess):
            new_body = ObjectFieldAccess(
                object=self.transform_expr(body.object), field=body.field
            )
        else:
            raise TypeError(f"unknown expression body type: {type(body).__name__}")

        out = Expression(body=new_body, type=expr.type)
        if self.expression_transformer is not None:
            out = self.expression_transformer(out)
        return out

    def _exprs(self, exprs: Sequence[Expression]) -> list[Expression]:
        return [self.transform_expr(e) for e in exprs]

    def _tvf_argument(
        self, arg: TableValuedFunctionArgument
    ) -> TableValuedFunctionArgument:
        if isinstance(arg, ExpressionArgument):
            return ExpressionArgument(expression=self.transform_expr(arg.expression))
        if isinstance(arg, TableArgument):
            return TableArgument(table=self.transform_node(arg.table))
        if isinstance(arg, DescriptorArgument):
            return DescriptorArgument(descriptor=arg.descriptor)
        raise TypeError(
            f"unknown table valued function argument type: {type(arg).__name__}"
        )


def _variable_renamer(
    old_to_new: Mapping[str, str], only_level0: bool
) -> ExpressionTransformer:
    def rename(expr: Expression) -> Expression:
        body = expr.body
        if isinstance(body, Variable) and (body.is_level0 or not only_level0):
            new_name = old_to_new.get(body.name)
            if new_name is not None:
                return replace(expr, body=replace(body, name=new_name))
        return expr

    return rename


def rename_variables(old_to_new: Mapping[str, str], node: Node) -> Node:
    """Return a copy of ``node`` with variables renamed by ``old_to_new``."""
    return Transformers(
        expression_transformer=_variable_renamer(old_to_new, only_level0=False)
    ).transform_node(node)


def rename_variables_expr(old_to_new: Mapping[str, str], expr: Expression) -> Expression:
    """Return a copy of ``expr`` with variables renamed by ``old_to_new``."""
    return Transformers(
        expression_transformer=_variable_renamer(old_to_new, only_level0=False)
    ).transform_expr(expr)


def rename_record_variables(
    old_to_new: Mapping[str, str], exprs: Sequence[Expression]
) -> list[Expression]:
    """Rename only variables of the current record (level 0) in each expression."""
    transformers = Transformers(
        expression_transformer=_variable_renamer(old_to_new, only_level0=True)
    )
    return [transformers.transform_expr(e) for e in exprs]


def push_down_datasource_predicates(
    datasource: Datasource,
    new_predicates: Sequence[Expression],
    pushed_down_predicates: Sequence[Expression],
) -> tuple[list[Expression], list[Expression], bool]:
    """Offer predicates to the datasource in its own column names.

    Returns (rejected, pushed_down, changed) with variables named as in the
    plan again.
    """
    if datasource.datasource_implementation is None:
        raise ValueError(f"datasource {datasource.name!r} has no implementation")
    prefix = datasource.alias + "."
    unique_to_colname: dict[str, str] = {}
    colname_to_unique: dict[str, str] = {}
    for qualified, unique in datasource.variable_mapping.items():
        trimmed = qualified[len(prefix):] if qualified.startswith(prefix) else qualified
        unique_to_colname[unique] = trimmed
        colname_to_unique[trimmed] = unique

    rejected, pushed_down, changed = (
        datasource.datasource_implementation.push_down_predicates(
            rename_record_variables(unique_to_colname, new_predicates),
            rename_record_variables(unique_to_colname, pushed_down_predicates),
        )
    )
    return (
        rename_record_variables(colname_to_unique, rejected),
        rename_record_variables(colname_to_unique, pushed_down),
        changed,
    )