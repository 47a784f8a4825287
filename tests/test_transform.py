import pytest

from octoquery.environment import (
    CountingTrigger,
    DatasourceImplementation,
    Schema,
    SchemaField,
)
from octoquery.expression import (
    And,
    Cast,
    Constant,
    Expression,
    FunctionCall,
    Or,
    QueryExpression,
    Variable,
)
from octoquery.nodes import (
    Aggregate,
    Datasource,
    DescriptorArgument,
    ExpressionArgument,
    Filter,
    GroupBy,
    Map,
    Node,
    NodeType,
    OrderBy,
    StreamJoin,
    TableArgument,
    TableValuedFunction,
)
from octoquery.transform import (
    Transformers,
    push_down_datasource_predicates,
    rename_record_variables,
    rename_variables,
    rename_variables_expr,
)


def var(name, level0=True):
    return Expression(body=Variable(name=name, is_level0=level0))


def const(value):
    return Expression(body=Constant(value=value))


def names_in(expr):
    return expr.variables_used()


def datasource_node(name="t"):
    return Node(body=Datasource(name=name), schema=Schema([SchemaField("a")], -1))


def test_rename_variables_expr_nested():
    expr = Expression(
        body=And(
            arguments=[
                Expression(body=FunctionCall(name="f", arguments=[var("a"), var("b")])),
                Expression(body=Cast(expression=var("a"))),
            ]
        )
    )
    out = rename_variables_expr({"a": "x"}, expr)
    assert names_in(out) == {"x", "b"}
    assert names_in(expr) == {"a", "b"}


def test_rename_variables_renames_non_level0_too():
    out = rename_variables_expr({"a": "x"}, var("a", level0=False))
    assert out.body.name == "x"
    assert out.body.is_level0 is False


def test_rename_variables_in_node_tree():
    source = Node(body=Map(source=datasource_node(), expressions=[var("a")]))
    node = Node(body=Filter(source=source, predicate=var("a")))
    out = rename_variables({"a": "z"}, node)
    assert out.body.predicate.body.name == "z"
    assert out.body.source.body.expressions[0].body.name == "z"
    assert node.body.predicate.body.name == "a"


def test_rename_record_variables_only_level0():
    exprs = [var("a", level0=True), var("a", level0=False), var("c")]
    out = rename_record_variables({"a": "x"}, exprs)
    assert [e.body.name for e in out] == ["x", "a", "c"]


def test_identity_transform_copies():
    expr = Expression(body=Or(arguments=[var("a"), const(1)]), type="bool")
    out = Transformers().transform_expr(expr)
    assert out == expr
    assert out is not expr
    assert out.body.arguments[0] is not expr.body.arguments[0]


def test_node_transformer_visits_children_first():
    visited = []

    def record(node):
        visited.append(node.node_type)
        return node

    join = Node(
        body=StreamJoin(left=datasource_node("l"), right=datasource_node("r"))
    )
    node = Node(body=Filter(source=join, predicate=var("a")))
    out = Transformers(node_transformer=record).transform_node(node)
    assert out.node_type is NodeType.FILTER
    assert out.body.source.node_type is NodeType.STREAM_JOIN
    assert out.body.source.body.left.body.name == "l"
    assert visited == [
        NodeType.DATASOURCE,
        NodeType.DATASOURCE,
        NodeType.STREAM_JOIN,
        NodeType.FILTER,
    ]


def test_expression_transformer_sees_arguments_before_call():
    seen = []

    def record(expr):
        seen.append(expr.expression_type.value)
        return expr

    expr = Expression(body=FunctionCall(name="f", arguments=[var("a"), const(2)]))
    out = Transformers(expression_transformer=record).transform_expr(expr)
    assert out.body.name == "f"
    assert [arg.expression_type.value for arg in out.body.arguments] == [
        "variable",
        "constant",
    ]
    assert seen == ["variable", "constant", "function_call"]


def test_subquery_source_is_transformed():
    inner = Node(body=Filter(source=datasource_node(), predicate=var("a")))
    expr = Expression(body=QueryExpression(source=inner))
    out = rename_variables_expr({"a": "b"}, expr)
    assert out.body.source.body.predicate.body.name == "b"


def test_order_by_multipliers_copied():
    node = Node(
        body=OrderBy(source=datasource_node(), key=[var("a")], direction_multipliers=[1])
    )
    out = Transformers().transform_node(node)
    node.body.direction_multipliers.append(-1)
    assert out.body.direction_multipliers == [1]


def test_group_by_keeps_trigger_and_copies_aggregates():
    trigger = CountingTrigger(trigger_after=3)
    node = Node(
        body=GroupBy(
            source=datasource_node(),
            aggregates=[Aggregate(name="count")],
            aggregate_expressions=[var("a")],
            key=[var("a")],
            key_event_time_index=0,
            trigger=trigger,
        )
    )
    out = rename_variables({"a": "k"}, node)
    assert out.body.trigger is trigger
    assert out.body.key_event_time_index == 0
    assert out.body.aggregates == node.body.aggregates
    assert out.body.aggregates is not node.body.aggregates
    assert out.body.key[0].body.name == "k"


def test_table_valued_function_arguments():
    node = Node(
        body=TableValuedFunction(
            name="range",
            arguments={
                "start": ExpressionArgument(expression=var("a")),
                "source": TableArgument(
                    table=Node(body=Filter(source=datasource_node(), predicate=var("a")))
                ),
                "time_field": DescriptorArgument(descriptor="a"),
            },
        )
    )
    out = rename_variables({"a": "b"}, node)
    args = out.body.arguments
    assert args["start"].expression.body.name == "b"
    assert args["source"].table.body.predicate.body.name == "b"
    assert args["time_field"].descriptor == "a"


def test_unknown_bodies_raise():
    with pytest.raises(TypeError):
        Transformers().transform_expr(Expression(body=object()))
    with pytest.raises(TypeError):
        Transformers().transform_node(Node(body=object()))


class _OnlyColumnA(DatasourceImplementation):
    def __init__(self):
        self.offered = None

    def push_down_predicates(self, new_predicates, pushed_down_predicates):
        self.offered = [e.body.name for e in new_predicates]
        accepted = [e for e in new_predicates if e.body.name == "a"]
        rejected = [e for e in new_predicates if e.body.name != "a"]
        return rejected, list(pushed_down_predicates) + accepted, bool(accepted)


def test_push_down_renames_both_ways():
    impl = _OnlyColumnA()
    ds = Datasource(
        name="t",
        alias="t",
        datasource_implementation=impl,
        variable_mapping={"t.a": "t.a_1", "t.b": "t.b_2"},
    )
    rejected, pushed, changed = push_down_datasource_predicates(
        ds, [var("t.a_1"), var("t.b_2")], []
    )
    assert impl.offered == ["a", "b"]
    assert [e.body.name for e in rejected] == ["t.b_2"]
    assert [e.body.name for e in pushed] == ["t.a_1"]
    assert changed is True


def test_push_down_without_implementation_raises():
    with pytest.raises(ValueError):
        push_down_datasource_predicates(Datasource(name="t"), [var("a")], [])