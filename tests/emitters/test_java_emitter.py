from __future__ import annotations

from contractgen.emitters.base import WARN_NAME_COLLISION, WARN_RESERVED_WORD
from contractgen.emitters.java import JavaEmitter
from contractgen.loader import loads
from contractgen.normalize import normalize

MODEL_DIR = "src/main/java/com/example/contract/model"
API_DIR = "src/main/java/com/example/contract/api"


def _files(result):
    return {f.path: f.content for f in result.files}


def test_optional_wrapper_wraps_only_optional_fields(meal_ir, target_config):
    result = JavaEmitter().emit(meal_ir, target_config("java", nullabilityPolicy="optionalWrapper"))
    meal = _files(result)[f"{MODEL_DIR}/Meal.java"]

    assert "@NotNull\n    private String name;" in meal
    assert "private Optional<Integer> calories = Optional.empty();" in meal
    assert "Optional<String>" not in meal
    assert "import java.util.Optional;" in meal


def test_nullable_field_marks_optional_fields(meal_ir, target_config):
    result = JavaEmitter().emit(meal_ir, target_config("java", nullabilityPolicy="nullableField"))
    meal = _files(result)[f"{MODEL_DIR}/Meal.java"]

    assert "@Nullable\n    private Integer calories;" in meal
    assert "@NotNull\n    private String name;" in meal
    assert "Optional<" not in meal


def test_dto_uses_jackson_wire_names(meals_ir, target_config):
    meal = _files(JavaEmitter().emit(meals_ir, target_config("java")))[f"{MODEL_DIR}/Meal.java"]

    assert '@JsonProperty("meal_type")' in meal
    assert "private MealType mealType;" in meal
    assert "private UUID id;" in meal
    assert "private OffsetDateTime createdAt;" in meal
    assert "public String getName()" in meal
    assert "@JsonInclude(JsonInclude.Include.NON_NULL)" in meal


def test_enum_and_api_interfaces(meals_ir, target_config):
    files = _files(JavaEmitter().emit(meals_ir, target_config("java")))

    enum = files[f"{MODEL_DIR}/MealType.java"]
    assert 'BREAKFAST("breakfast"),' in enum
    assert 'DINNER("dinner");' in enum

    api = files[f"{API_DIR}/MealsApi.java"]
    assert "public interface MealsApi {" in api
    assert '@GetMapping("/meals/{mealId}")' in api
    assert 'ResponseEntity<Meal> getMeal(@PathVariable("mealId") UUID mealId);' in api
    assert "ResponseEntity<Meal> createMeal(@Valid @RequestBody Meal body);" in api
    assert "import com.example.contract.model.Meal;" in api
    assert f"{API_DIR}/PlansApi.java" in files


def test_date_policies(target_config):
    ir = normalize(loads("types: {Event: {fields: {at: datetime}}}\noperations: {}\n"))

    epoch = _files(JavaEmitter().emit(ir, target_config("java", dateRepresentation="epoch")))
    iso = _files(JavaEmitter().emit(ir, target_config("java", dateRepresentation="iso8601")))

    assert "private Long at;" in epoch[f"{MODEL_DIR}/Event.java"]
    assert "private String at;" in iso[f"{MODEL_DIR}/Event.java"]


def test_reserved_field_names_are_escaped(target_config):
    ir = normalize(loads("types: {Thing: {fields: {class: string}}}\noperations: {}\n"))
    result = JavaEmitter().emit(ir, target_config("java"))

    assert '@JsonProperty("class")' in _files(result)[f"{MODEL_DIR}/Thing.java"]
    assert "private String class_;" in _files(result)[f"{MODEL_DIR}/Thing.java"]
    assert "public String getClass_()" in _files(result)[f"{MODEL_DIR}/Thing.java"]
    assert [w.code for w in result.warnings] == [WARN_RESERVED_WORD]


def test_custom_packages(meal_ir, target_config):
    result = JavaEmitter().emit(meal_ir, target_config("java", modelPackage="org.acme.dto"))
    assert "src/main/java/org/acme/dto/Meal.java" in result.paths


def test_dependencies_follow_policies(meal_ir, target_config):
    wrapped = JavaEmitter().emit(meal_ir, target_config("java", nullabilityPolicy="optionalWrapper"))
    plain = JavaEmitter().emit(meal_ir, target_config("java"))

    wrapped_names = [name for name, _ in wrapped.dependencies]
    plain_names = [name for name, _ in plain.dependencies]
    assert "com.fasterxml.jackson.datatype:jackson-datatype-jdk8" in wrapped_names
    assert "com.fasterxml.jackson.datatype:jackson-datatype-jdk8" not in plain_names


def test_tags_colliding_under_casing_get_suffixed_interfaces(target_config):
    text = """
types:
  Plan: {fields: {id: string}}
operations:
  listMealPlans: {method: GET, path: /meal-plans, response: Plan}
  listLegacyMealPlans: {method: GET, path: /meal_plans, response: Plan}
"""
    result = JavaEmitter().emit(normalize(loads(text)), target_config("java"))
    files = _files(result)

    assert result.success
    assert "public interface MealPlansApi {" in files[f"{API_DIR}/MealPlansApi.java"]
    legacy = files[f"{API_DIR}/MealPlansApi2.java"]
    assert "public interface MealPlansApi2 {" in legacy
    assert "ResponseEntity<Plan> listLegacyMealPlans();" in legacy
    assert [(w.subject, w.code) for w in result.warnings] == [("meal_plans", WARN_NAME_COLLISION)]


def test_operations_colliding_under_casing_get_suffixed_methods(target_config):
    text = """
types: {}
operations:
  getMeal: {method: GET, path: /meals}
  get_meal: {method: GET, path: /meals/latest}
"""
    result = JavaEmitter().emit(normalize(loads(text)), target_config("java"))
    api = _files(result)[f"{API_DIR}/MealsApi.java"]

    assert '@GetMapping("/meals")\n    ResponseEntity<Void> getMeal();' in api
    assert '@GetMapping("/meals/latest")\n    ResponseEntity<Void> getMeal2();' in api
    assert [(w.subject, w.code) for w in result.warnings] == [("get_meal", WARN_NAME_COLLISION)]


def test_type_named_after_an_imported_class_is_escaped(target_config):
    text = """
types:
  Optional: {fields: {value: string}}
  Box: {fields: {inner: Optional}}
operations: {}
"""
    result = JavaEmitter().emit(normalize(loads(text)), target_config("java", nullabilityPolicy="optionalWrapper"))
    files = _files(result)

    assert "public class Optional_ {" in files[f"{MODEL_DIR}/Optional_.java"]
    box = files[f"{MODEL_DIR}/Box.java"]
    assert "private Optional<Optional_> inner = Optional.empty();" in box
    assert "import java.util.Optional;" in box
    assert ("Optional", WARN_RESERVED_WORD) in [(w.subject, w.code) for w in result.warnings]
