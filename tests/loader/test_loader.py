from __future__ import annotations

from pathlib import Path

import pytest

from contractgen.constants import KIND_ARRAY, KIND_ENUM, KIND_MAP, KIND_OBJECT, KIND_PRIMITIVE
from contractgen.errors import ParseError, SchemaError
from contractgen.loader import load, loads


def test_load_fixture_sections(meals_path: Path):
    doc = load(meals_path)

    assert doc.title == "meals"
    assert doc.version == "1.1.0"
    assert doc.source_path == meals_path
    assert set(doc.types) == {"MealId", "MealType", "Entity", "Meal", "MealPlan"}
    assert {op.operation_id for op in doc.operations.values()} == {
        "listMeals", "getMeal", "createMeal", "getPlan",
    }


def test_type_kinds_are_inferred(meals_path: Path):
    doc = load(meals_path)

    assert doc.types["MealId"].kind == KIND_PRIMITIVE
    assert doc.types["MealId"].primitive == "uuid"
    assert doc.types["MealType"].kind == KIND_ENUM
    assert doc.types["MealType"].values == ("breakfast", "lunch", "dinner")
    assert doc.types["Meal"].kind == KIND_OBJECT
    assert doc.types["Meal"].parent == "Entity"


def test_field_requiredness_and_containers(meals_path: Path):
    meal = load(meals_path).types["Meal"]
    fields = {f.name: f for f in meal.fields}

    assert [f.name for f in meal.fields] == ["name", "calories", "meal_type", "tags"]
    assert fields["name"].required is True
    assert fields["name"].description == "Display name"
    assert fields["calories"].required is False
    assert fields["tags"].type.container == KIND_ARRAY
    assert fields["tags"].type.element.name == "string"


def test_operation_defaults(meals_path: Path):
    ops = {op.operation_id: op for op in load(meals_path).operations.values()}

    assert ops["getMeal"].tag == "meals"
    assert ops["getPlan"].tag == "plans"
    (param,) = ops["getMeal"].parameters
    assert param.location == "path"
    assert param.required is True
    assert param.type.name == "MealId"

    (limit,) = ops["listMeals"].parameters
    assert limit.location == "query"
    assert limit.required is False
    assert ops["listMeals"].response.container == KIND_ARRAY


def test_missing_file_is_parse_error(tmp_path: Path):
    with pytest.raises(ParseError):
        load(tmp_path / "nope.yaml")


def test_malformed_yaml_reports_line():
    with pytest.raises(ParseError) as exc:
        loads("types: {Meal: [unclosed\noperations: {}\n", source="bad.yaml")
    assert exc.value.location.startswith("bad.yaml:")


def test_duplicate_keys_rejected():
    text = """
types:
  Meal: {fields: {name: string}}
  Meal: {fields: {title: string}}
operations: {}
"""
    with pytest.raises(ParseError, match="duplicate key"):
        loads(text)


def test_json_documents_are_accepted():
    doc = loads('{"types": {"Id": "uuid"}, "operations": {}}')
    assert doc.types["Id"].primitive == "uuid"


@pytest.mark.parametrize("text", [
    "types: {}\n",
    "operations: {}\n",
    "- just\n- a list\n",
])
def test_missing_sections_are_schema_errors(text: str):
    with pytest.raises(SchemaError):
        loads(text)


def test_null_sections_are_empty():
    doc = loads("types:\noperations:\n")
    assert len(doc.types) == 0
    assert len(doc.operations) == 0


def test_duplicate_path_and_method_rejected():
    text = """
types: {}
operations:
  a: {method: GET, path: /meals}
  b: {method: get, path: /meals}
"""
    with pytest.raises(SchemaError, match="already declared"):
        loads(text)


def test_undeclared_path_parameter_rejected():
    text = """
types: {}
operations:
  getMeal: {method: GET, path: "/meals/{id}"}
"""
    with pytest.raises(SchemaError, match="not declared"):
        loads(text)


def test_enum_duplicates_rejected():
    with pytest.raises(SchemaError, match="duplicate enum"):
        loads("types: {Color: {values: [red, red]}}\noperations: {}\n")


def test_type_level_required_list():
    text = """
types:
  Meal:
    required: [name]
    properties:
      name: string
      calories: integer
operations: {}
"""
    fields = {f.name: f for f in loads(text).types["Meal"].fields}
    assert fields["name"].required is True
    assert fields["calories"].required is False


def test_refs_maps_and_aliases():
    text = """
types:
  Tally:
    type: map
    values: int64
  Meal:
    fields:
      tally: {$ref: "#/components/schemas/Tally"}
      when: timestamp
operations: {}
"""
    doc = loads(text)
    assert doc.types["Tally"].kind == KIND_MAP
    assert doc.types["Tally"].items.name == "long"
    fields = {f.name: f for f in doc.types["Meal"].fields}
    assert fields["tally"].type.name == "Tally"
    assert fields["when"].type.name == "datetime"


def test_alias_matching_is_case_sensitive():
    text = """
types:
  Timestamp: {fields: {seconds: long}}
  Event: {fields: {at: Timestamp}}
operations: {}
"""
    event = loads(text).types["Event"]
    assert event.fields[0].type.name == "Timestamp"
