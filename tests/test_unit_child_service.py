"""Unit tests for child level tiering — no database required."""

import os

import pytest

os.environ.setdefault("SECRET_KEY", "test-secret-key-for-unit-tests")

from tinymath.services.child_service import initial_level_for_age


@pytest.mark.parametrize(
    ("age", "level"),
    [(0, 1), (2, 1), (3, 2), (4, 2), (5, 3), (12, 3), (99, 3)],
)
def test_initial_level_for_age(age, level):
    assert initial_level_for_age(age) == level
