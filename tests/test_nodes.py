import pytest

from octoquery.environment import (
    CountingTrigger,
    EndOfStreamTrigger,
    Schema,
    SchemaField,
)
from octoquery.expression import Constant, Expression, Variable
from octoquery.nodes import (
    Aggregate,
    Datasource,
    DescriptorArgument,
    Distinct,
    ExpressionArgument,
    Filter,
    GroupBy,
    LookupJoin,
    Map,
    Node,
    NodeType,
    OrderBy,
    Requalifier,
    StreamJoin,
    TableArgument,
    TableValuedFunction,
    TableValuedFunctionArgumentType,
    Unnest,
)


def _source() -> Node:
    return Node(
        Datasource(name="events", alias="e", variable_mapping={"e.id": "e.id_1"}),
        Schema(fields=[SchemaField("e.id_1", "Int")], time_field=-1),
    )


def _var(name: str) -> Expression:
    return Expression(Variable(name, is_level0=True), type="Int")


def _all_bodies():
    return [
        Datasource(name="t"),
        Distinct(source=None),
        Filter(source=None, predicate=None),
        GroupBy(source=None),
        LookupJoin(source=None, joined=None),
        StreamJoin(left=None, right=None),
        Map(source=None),
        OrderBy(source=None),
        Requalifier(source=None, qualifier="q"),
        TableValuedFunction(name="range"),
        Unnest(source=None, field="x"),
    ]


@pytest.mark.parametrize(
    "body, expected",
    [
        (Datasource(name="t"), NodeType.DATASOURCE),
        (Distinct(source=None), NodeType.DISTINCT),
        (Filter(source=None, predicate=None), NodeType.FILTER),
        (GroupBy(source=None), NodeType.GROUP_BY),
        (LookupJoin(source=None, joined=None), NodeType.LOOKUP_JOIN),
        (StreamJoin(left=None, right=None), NodeType.STREAM_JOIN),
        (Map(source=None), NodeType.MAP),
        (OrderBy(source=None), NodeType.ORDER_BY),
        (Requalifier(source=None, qualifier="q"), NodeType.REQUALIFIER),
        (TableValuedFunction(name="range"), NodeType.TABLE_VALUED_FUNCTION),
        (Unnest(source=None, field="x"), NodeType.UNNEST),
    ],
)
def test_node_type_follows_body(body, expected):
    assert Node(body).node_type is expected


@pytest.mark.parametrize(
    "body, text",
    [
        (Datasource(name="t"), "datasource"),
        (GroupBy(source=None), "group_by"),
        (LookupJoin(source=None, joined=None), "lookup_join"),
        (StreamJoin(left=None, right=None), "stream_join"),
        (OrderBy(source=None), "order_by"),
        (TableValuedFunction(name="range"), "table_valued_function"),
        (Unnest(source=None, field="x"), "unnest"),
    ],
)
def test_node_type_names(body, text):
    assert str(Node(body).node_type) == text


def test_all_node_types_distinct_names():
    names = [str(Node(body).node_type) for body in _all_bodies()]
    assert len(names) == len(set(names)) == 11


def test_default_schema_has_no_time_field():
    node = Node(Datasource(name="t"))
    assert node.schema.time_field == -1
    assert node.schema.fields == []


def test_group_by_defaults():
    group = GroupBy(source=_source())
    assert group.key_event_time_index == -1
    assert isinstance(group.trigger, EndOfStreamTrigger)
    assert group.aggregates == [] and group.key == []


def test_group_by_keeps_given_parts():
    agg = Aggregate(name="count", output_type="Int")
    trigger = CountingTrigger(trigger_after=5)
    group = GroupBy(
        source=_source(),
        aggregates=[agg],
        aggregate_expressions=[_var("e.id_1")],
        key=[_var("e.id_1")],
        key_event_time_index=0,
        trigger=trigger,
    )
    node = Node(group)
    assert node.body.aggregates[0].name == "count"
    assert node.body.trigger.trigger_after == 5
    assert node.body.source.node_type is NodeType.DATASOURCE


def test_expression_argument_str_is_type():
    arg = ExpressionArgument(Expression(Constant(3), type="Int"))
    assert str(arg) == "Int"
    assert arg.kind is TableValuedFunctionArgumentType.EXPRESSION


def test_table_argument_str():
    arg = TableArgument(table=_source())
    assert str(arg) == "TABLE"
    assert arg.kind is TableValuedFunctionArgumentType.TABLE


def test_descriptor_argument_str():
    arg = DescriptorArgument(descriptor="e.time")
    assert str(arg) == "DESCRIPTOR"
    assert arg.kind is TableValuedFunctionArgumentType.DESCRIPTOR


def test_table_valued_function_arguments():
    tvf = TableValuedFunction(
        name="tumble",
        arguments={
            "source": TableArgument(_source()),
            "time_field": DescriptorArgument("e.time"),
            "window_length": ExpressionArgument(Expression(Constant(60), type="Duration")),
        },
    )
    rendered = {name: str(arg) for name, arg in tvf.arguments.items()}
    assert rendered == {
        "source": "TABLE",
        "time_field": "DESCRIPTOR",
        "window_length": "Duration",
    }


def test_datasource_fields():
    node = _source()
    assert node.body.variable_mapping == {"e.id": "e.id_1"}
    assert node.body.predicates == []
    assert node.body.alias == "e"


def test_order_by_directions():
    order = OrderBy(source=_source(), key=[_var("e.id_1")], direction_multipliers=[-1])
    assert order.direction_multipliers == [-1]
    assert len(order.key) == len(order.direction_multipliers)


def test_nested_plan():
    plan = Node(
        Map(
            source=Node(Filter(source=_source(), predicate=_var("e.id_1"))),
            expressions=[_var("e.id_1")],
        )
    )
    assert plan.body.source.node_type is NodeType.FILTER
    assert plan.body.source.body.source.node_type is NodeType.DATASOURCE