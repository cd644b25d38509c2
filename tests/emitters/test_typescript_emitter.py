from __future__ import annotations

from contractgen.emitters.base import WARN_NAME_COLLISION, WARN_UNSUPPORTED_BINARY
from contractgen.emitters.typescript import TypeScriptEmitter
from contractgen.loader import loads
from contractgen.normalize import normalize


def _files(result):
    return {f.path: f.content for f in result.files}


def test_optional_wrapper_uses_optional_properties(meal_ir, target_config):
    meal = _files(TypeScriptEmitter().emit(meal_ir, target_config("ts")))["model/meal.ts"]

    assert "export interface Meal {" in meal
    assert "  name: string;" in meal
    assert "  calories?: number;" in meal
    assert "name?" not in meal


def test_nullable_field_uses_null_union(meal_ir, target_config):
    meal = _files(TypeScriptEmitter().emit(
        meal_ir, target_config("ts", nullabilityPolicy="nullableField"),
    ))["model/meal.ts"]

    assert "  calories: number | null;" in meal
    assert "  name: string;" in meal


def test_models_import_their_dependencies(meals_ir, target_config):
    files = _files(TypeScriptEmitter().emit(meals_ir, target_config("ts")))

    meal = files["model/meal.ts"]
    assert "import type { MealId } from './meal-id';" in meal
    assert "import type { MealType } from './meal-type';" in meal
    assert "  mealType?: MealType;" in meal
    assert "  tags?: Array<string>;" in meal

    plan = files["model/meal-plan.ts"]
    assert "  meals: Array<Meal>;" in plan
    assert "  notes?: { [key: string]: string; };" in plan

    assert "export type MealId = string;" in files["model/meal-id.ts"]
    assert "  BREAKFAST = 'breakfast'," in files["model/meal-type.ts"]
    assert "export * from './meal-plan';" in files["model/index.ts"]


def test_axios_client(meals_ir, target_config):
    files = _files(TypeScriptEmitter().emit(meals_ir, target_config("ts")))
    api = files["api/meals-api.ts"]

    assert "export class MealsApi extends BaseAPI {" in api
    assert "public getMeal(mealId: MealId, options: AxiosRequestConfig = {}): AxiosPromise<Meal> {" in api
    assert "public createMeal(body: Meal, options: AxiosRequestConfig = {}): AxiosPromise<Meal> {" in api
    assert "params: { 'limit': limit }," in api
    assert "export * from './api/plans-api';" in files["index.ts"]
    assert "base.ts" in files
    assert ("axios", "^1.6.0") in TypeScriptEmitter().emit(meals_ir, target_config("ts")).dependencies


def test_unions_are_native(target_config):
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
    result = TypeScriptEmitter().emit(normalize(loads(text)), target_config("ts"))
    pet = _files(result)["model/pet.ts"]

    assert "export type Pet = (Cat | Dog) & {" in pet
    assert "  name?: string;" in pet
    assert result.warnings == ()


def test_date_policies(target_config):
    ir = normalize(loads("types: {Event: {fields: {at: datetime}}}\noperations: {}\n"))

    for policy, expected in [("epoch", "number"), ("iso8601", "string"), ("native", "Date")]:
        result = TypeScriptEmitter().emit(ir, target_config("ts", dateRepresentation=policy))
        assert f"  at?: {expected};" in _files(result)["model/event.ts"]


def test_binary_falls_back_to_string(target_config):
    ir = normalize(loads("types: {Blob: {fields: {data: binary}}}\noperations: {}\n"))
    result = TypeScriptEmitter().emit(ir, target_config("ts"))

    assert "  data?: string;" in _files(result)["model/blob.ts"]
    assert [w.code for w in result.warnings] == [WARN_UNSUPPORTED_BINARY]


def test_type_name_collisions_get_suffixed_modules(target_config):
    text = """
types:
  MealPlan: {fields: {a: string}}
  meal_plan: {fields: {b: string}}
operations: {}
"""
    result = TypeScriptEmitter().emit(normalize(loads(text)), target_config("ts"))
    files = _files(result)

    assert "export interface MealPlan {" in files["model/meal-plan.ts"]
    assert "export interface MealPlan2 {" in files["model/meal-plan-2.ts"]
    assert [w.subject for w in result.warnings] == ["meal_plan"]


def test_type_module_never_takes_the_barrel_file(target_config):
    ir = normalize(loads("types: {Index: {fields: {page: integer}}}\noperations: {}\n"))
    result = TypeScriptEmitter().emit(ir, target_config("ts"))
    files = _files(result)

    assert result.success
    assert "export interface Index {" in files["model/index2.ts"]
    assert files["model/index.ts"].endswith("export * from './index2';\n")
    assert [(w.subject, w.code) for w in result.warnings] == [("Index", WARN_NAME_COLLISION)]


TAG_COLLISION_CONTRACT = """
types:
  Plan: {fields: {id: string}}
operations:
  listMealPlans: {method: GET, path: /meal-plans, response: Plan}
  listLegacyMealPlans: {method: GET, path: /meal_plans, response: Plan}
"""


def test_tags_colliding_under_casing_get_suffixed_clients(target_config):
    result = TypeScriptEmitter().emit(normalize(loads(TAG_COLLISION_CONTRACT)), target_config("ts"))
    files = _files(result)

    assert result.success
    assert "export class MealPlansApi extends BaseAPI {" in files["api/meal-plans-api.ts"]
    assert "export class MealPlansApi2 extends BaseAPI {" in files["api/meal-plans-api-2.ts"]
    assert "public listLegacyMealPlans(" in files["api/meal-plans-api-2.ts"]
    assert "export * from './api/meal-plans-api-2';" in files["index.ts"]
    assert [(w.subject, w.code) for w in result.warnings] == [("meal_plans", WARN_NAME_COLLISION)]


def test_operations_colliding_under_casing_get_suffixed_methods(target_config):
    text = """
types: {}
operations:
  getMeal: {method: GET, path: /meals}
  get_meal: {method: GET, path: /meals/latest}
"""
    result = TypeScriptEmitter().emit(normalize(loads(text)), target_config("ts"))
    api = _files(result)["api/meals-api.ts"]

    assert api.count("public getMeal(") == 1
    assert "public getMeal2(options: AxiosRequestConfig = {}): AxiosPromise<void> {" in api
    assert "url: this.basePath + `/meals/latest`," in api.split("public getMeal2(")[1]
    assert [(w.subject, w.code) for w in result.warnings] == [("get_meal", WARN_NAME_COLLISION)]
