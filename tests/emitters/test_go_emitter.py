from __future__ import annotations

from contractgen.emitters.base import WARN_NAMING_OVERRIDE, WARN_RESERVED_WORD
from contractgen.emitters.go import GoEmitter
from contractgen.loader import loads
from contractgen.normalize import normalize


def _files(result):
    return {f.path: f.content for f in result.files}


def test_nullable_field_uses_pointers(meal_ir, target_config):
    result = GoEmitter().emit(meal_ir, target_config("go"))
    meal = _files(result)["model_meal.go"]

    assert "package contract\n" in meal
    assert "type Meal struct {" in meal
    assert '\tName     string `json:"name"`' in meal
    assert '\tCalories *int32  `json:"calories,omitempty"`' in meal
    assert "optional.go" not in result.paths


def test_optional_wrapper_emits_helper(meal_ir, target_config):
    result = GoEmitter().emit(meal_ir, target_config("go", nullabilityPolicy="optionalWrapper"))
    files = _files(result)

    assert '\tCalories Optional[int32] `json:"calories,omitempty"`' in files["model_meal.go"]
    assert '\tName     string ' in files["model_meal.go"]
    assert 'import "encoding/json"' in files["optional.go"]
    assert "type Optional[T any] struct {" in files["optional.go"]


def test_containers_are_not_pointers(meals_ir, target_config):
    files = _files(GoEmitter().emit(meals_ir, target_config("go", packageName="meals")))

    plan = files["model_meal_plan.go"]
    assert "package meals\n" in plan
    assert "[]Meal" in plan
    assert "map[string]string" in plan
    assert "*map" not in plan

    meal = files["model_meal.go"]
    assert 'import "time"' in meal
    assert "*time.Time" in meal
    assert "*[]string" not in meal


def test_enums_are_typed_string_constants(meals_ir, target_config):
    enum = _files(GoEmitter().emit(meals_ir, target_config("go")))["model_meal_type.go"]

    assert "type MealType string" in enum
    assert '\tMealTypeBreakfast MealType = "breakfast"' in enum
    assert '\tMealTypeLunch     MealType = "lunch"' in enum
    assert "type MealId = string" in _files(GoEmitter().emit(meals_ir, target_config("go")))["model_meal_id.go"]


def test_other_naming_conventions_are_overridden(meal_ir, target_config):
    result = GoEmitter().emit(meal_ir, target_config("go", namingConvention="snake_case"))

    assert "\tName " in _files(result)["model_meal.go"]
    assert [(w.subject, w.code) for w in result.warnings] == [("namingConvention", WARN_NAMING_OVERRIDE)]


def test_package_name_is_sanitized(meal_ir, target_config):
    result = GoEmitter().emit(meal_ir, target_config("go", packageName="github.com/acme/Meal-Kit"))
    assert "package mealkit\n" in _files(result)["model_meal.go"]


def test_reserved_type_names_are_escaped(target_config):
    ir = normalize(loads("types: {Optional: {fields: {value: string}}}\noperations: {}\n"))
    result = GoEmitter().emit(ir, target_config("go"))

    assert "type Optional_ struct {" in _files(result)["model_optional.go"]
    assert [w.code for w in result.warnings] == [WARN_RESERVED_WORD]


def test_file_names_avoid_build_constraint_suffixes(target_config):
    text = """
types:
  MealTest: {fields: {a: string}}
  PlanWindows: {fields: {b: string}}
  Meal: {fields: {c: string}}
operations: {}
"""
    result = GoEmitter().emit(normalize(loads(text)), target_config("go"))

    assert sorted(result.paths) == ["model_meal.go", "model_meal_test_.go", "model_plan_windows_.go"]
    assert "type MealTest struct {" in _files(result)["model_meal_test_.go"]
    assert sorted((w.subject, w.code) for w in result.warnings) == [
        ("MealTest", WARN_RESERVED_WORD),
        ("PlanWindows", WARN_RESERVED_WORD),
    ]
