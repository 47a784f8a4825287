# octoquery

Building blocks for a SQL query engine: SQL value types with their MySQL
column-type mapping, small byte and string helpers, and the data structures
of a physical query plan together with tools to rewrite them.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

- `octoquery.querytypes`: the `Type` enumeration of SQL value types, whose
  values carry `Flag` bits, the property checks `is_integral`, `is_signed`,
  `is_unsigned`, `is_float`, `is_quoted`, `is_text` and `is_binary`,
  conversion between MySQL column types and flags (`mysql_to_type`,
  `type_to_mysql`), and `EventToken` with `event_token_minimum`.
- `octoquery.bytebuffer`: `Buffer`, an append-only byte buffer with
  `write`, `write_string`, `write_byte` and `getvalue`.
- `octoquery.arena`: `StringArena`, a fixed-capacity arena for strings with
  `new_string`, `space_left` and `used`, and `bytes_to_str`.
- `octoquery.environment`: `Schema` and `SchemaField`, the nested
  `VariableContext`, the `Environment` with function and aggregate
  catalogues (`FunctionDetails`, `FunctionDescriptor`, `AggregateDetails`,
  `AggregateDescriptor`), the abstract `Database` and
  `DatasourceImplementation`, the `DatasourceRepository` that resolves table
  names (raising `DatasourceError`), and the group-by triggers
  `CountingTrigger`, `EndOfStreamTrigger`, `WatermarkTrigger` and
  `MultiTrigger`.
- `octoquery.expression`: `Expression` and its bodies (`Variable`,
  `Constant`, `FunctionCall`, `And`, `Or`, `QueryExpression`, `Coalesce`,
  `Tuple`, `TypeAssertion`, `Cast`, `ObjectFieldAccess`), with
  `Expression.split_by_and`, `Expression.variables_used` and
  `variable_name_matches_field`.
- `octoquery.nodes`: `Node` and its bodies (`Datasource`, `Distinct`,
  `Filter`, `GroupBy`, `StreamJoin`, `LookupJoin`, `Map`, `OrderBy`,
  `Requalifier`, `TableValuedFunction`, `Unnest`) and the table valued
  function arguments `ExpressionArgument`, `TableArgument` and
  `DescriptorArgument`.
- `octoquery.transform`: `Transformers`, which rebuilds a plan bottom-up
  applying optional node and expression transformers, `rename_variables`,
  `rename_variables_expr`, `rename_record_variables` and
  `push_down_datasource_predicates`.

## Examples

Mapping MySQL column types:

```python
from octoquery.querytypes import Type, is_quoted, mysql_to_type, type_to_mysql

assert mysql_to_type(253, 128) is Type.VARBINARY
assert type_to_mysql(Type.BIT) == (16, 32)
assert is_quoted(Type.VARCHAR)
```

A string arena:

```python
from octoquery.arena import StringArena

arena = StringArena(10)
arena.new_string(b"01234")
print(arena.space_left())        # 5
```

Splitting a predicate and listing its variables:

```python
from octoquery.expression import And, Expression, Variable

predicate = Expression(body=And(arguments=[
    Expression(body=Variable("t.a", is_level0=True)),
    Expression(body=Variable("t.b", is_level0=True)),
]))
print(len(predicate.split_by_and()))     # 2
print(sorted(predicate.variables_used()))  # ['t.a', 't.b']
```

Renaming variables:

```python
from octoquery.transform import rename_variables_expr

renamed = rename_variables_expr({"t.a": "t.a_1"}, predicate)
```

## What this package does not do

It holds plan structures but does not execute them: there is no
materialization of plans into running operators, no SQL parser, no
formatting or escaping of values into query text, and no command-line
tool. Datasources and databases are abstract classes for you to implement.