from __future__ import annotations

from contractgen.emitters.base import WARN_NAME_COLLISION, WARN_RESERVED_WORD, WARN_UNION_FIELDS
from contractgen.emitters.python import PythonEmitter
from contractgen.loader import loads
from contractgen.normalize import normalize

ROOT = "contract_models"


def _files(result):
    return {f.path: f.content for f in result.files}


def test_optional_wrapper_uses_optional(meal_ir, target_config):
    meal = _files(PythonEmitter().emit(meal_ir, target_config("python")))[f"{ROOT}/models/meal.py"]

    assert meal.startswith("# Generated by contractgen. Do not edit.\nfrom __future__ import annotations\n")
    assert "from typing import Optional" in meal
    assert "from pydantic import BaseModel, ConfigDict, Field" in meal
    assert "class Meal(BaseModel):" in meal
    assert "    model_config = ConfigDict(populate_by_name=True)" in meal
    assert "    name: str\n" in meal
    assert "    calories: Optional[int] = None" in meal


def test_nullable_field_uses_union_with_none(meal_ir, target_config):
    meal = _files(PythonEmitter().emit(
        meal_ir, target_config("python", nullabilityPolicy="nullableField"),
    ))[f"{ROOT}/models/meal.py"]

    assert "    calories: Union[int, None] = None" in meal
    assert "    name: str\n" in meal
    assert "Optional" not in meal


def test_package_layout(meals_ir, target_config):
    result = PythonEmitter().emit(meals_ir, target_config("python", packageName="meals_models"))
    files = _files(result)

    assert set(result.paths) >= {
        "meals_models/__init__.py",
        "meals_models/py.typed",
        "meals_models/operations.py",
        "meals_models/models/__init__.py",
        "meals_models/models/meal.py",
        "meals_models/models/meal_plan.py",
    }
    assert files["meals_models/py.typed"] == ""
    assert "from .meal_plan import MealPlan" in files["meals_models/models/__init__.py"]
    assert '__version__ = "0.1.0"' in files["meals_models/__init__.py"]

    operations = files["meals_models/operations.py"]
    assert "'getMeal'" in operations
    assert "'/meals/{mealId}'" in operations


def test_models_reference_each_other(meals_ir, target_config):
    files = _files(PythonEmitter().emit(meals_ir, target_config("python")))

    meal = files[f"{ROOT}/models/meal.py"]
    assert "from .meal_id import MealId" in meal
    assert "from .meal_type import MealType" in meal
    assert "    id: MealId\n" in meal
    assert "    meal_type: Optional[MealType] = None" in meal
    assert "    tags: Optional[List[str]] = None" in meal

    plan = files[f"{ROOT}/models/meal_plan.py"]
    assert "    meals: List[Meal]\n" in plan
    assert "    notes: Optional[Dict[str, str]] = None" in plan

    enum = files[f"{ROOT}/models/meal_type.py"]
    assert "class MealType(str, Enum):" in enum
    assert "    BREAKFAST = 'breakfast'" in enum
    assert "MealId = UUID" in files[f"{ROOT}/models/meal_id.py"]


def test_renamed_properties_keep_wire_alias(meals_ir, target_config):
    meal = _files(PythonEmitter().emit(
        meals_ir, target_config("python", namingConvention="camelCase"),
    ))[f"{ROOT}/models/meal.py"]

    assert "    mealType: Optional[MealType] = Field(default=None, alias='meal_type')" in meal
    assert "    name: str\n" in meal


def test_reserved_words_are_escaped(target_config):
    ir = normalize(loads("types: {Thing: {fields: {class: {type: string, required: true}}}}\noperations: {}\n"))
    result = PythonEmitter().emit(ir, target_config("python"))

    assert "    class_: str = Field(alias='class')" in _files(result)[f"{ROOT}/models/thing.py"]
    assert [w.code for w in result.warnings] == [WARN_RESERVED_WORD]


def test_union_fields_are_dropped_with_warning(target_config):
    text = """
types:
  Cat: {fields: {meow: boolean}}
  Dog: {fields: {bark: boolean}}
  Pet:
    oneOf: [Cat, Dog]
    fields:
      name: string
operations: {}
"""
    result = PythonEmitter().emit(normalize(loads(text)), target_config("python"))
    pet = _files(result)[f"{ROOT}/models/pet.py"]

    assert "Pet = Union[Cat, Dog]" in pet
    assert [(w.subject, w.code) for w in result.warnings] == [("Pet", WARN_UNION_FIELDS)]


def test_date_policies(target_config):
    ir = normalize(loads("types: {Event: {fields: {at: {type: datetime, required: true}}}}\noperations: {}\n"))

    native = _files(PythonEmitter().emit(ir, target_config("python")))
    epoch = _files(PythonEmitter().emit(ir, target_config("python", dateRepresentation="epoch")))

    assert "from datetime import datetime" in native[f"{ROOT}/models/event.py"]
    assert "    at: datetime\n" in native[f"{ROOT}/models/event.py"]
    assert "    at: int\n" in epoch[f"{ROOT}/models/event.py"]


def test_keyword_module_names_are_suffixed(target_config):
    ir = normalize(loads("types: {Class: {fields: {a: string}}}\noperations: {}\n"))
    result = PythonEmitter().emit(ir, target_config("python"))
    files = _files(result)

    assert "class Class(BaseModel):" in files[f"{ROOT}/models/class2.py"]
    assert "from .class2 import Class" in files[f"{ROOT}/models/__init__.py"]
    assert [(w.subject, w.code) for w in result.warnings] == [("Class", WARN_NAME_COLLISION)]

