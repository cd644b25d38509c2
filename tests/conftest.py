from __future__ import annotations

from pathlib import Path

import pytest

from contractgen.config import build_target_config
from contractgen.loader import load, loads
from contractgen.normalize import normalize

FIXTURES = Path(__file__).parent / "fixtures"

MEAL_CONTRACT = """
types:
  Meal:
    fields:
      name: {type: string, required: true}
      calories: integer
operations: {}
"""


@pytest.fixture
def meals_path() -> Path:
    return FIXTURES / "meals.yaml"


@pytest.fixture
def targets_config_path() -> Path:
    return FIXTURES / "targets.yaml"


@pytest.fixture
def meals_ir(meals_path):
    return normalize(load(meals_path))


@pytest.fixture
def meal_ir():
    """Meal{name: string required, calories: integer optional}."""
    return normalize(loads(MEAL_CONTRACT))


@pytest.fixture
def target_config():
    def make(target: str, **options):
        return build_target_config(target, options)
    return make
