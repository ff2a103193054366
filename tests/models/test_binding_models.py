# -*- coding: utf-8 -*-
"""
文件目的：测试 `modelbinder/models/binding.py` 与 `modelbinder/models/collections.py` 中的 Pydantic 模型。
"""

import pytest
from pydantic import ValidationError

from modelbinder.models.binding import (
    ModelBindingOptions,
    ModelBindingResult,
    ModelError,
    ModelStateEntry,
)
from modelbinder.models.collections import CollectionSummary, PeopleResponse, Person


def test_binding_options_defaults() -> None:
    options = ModelBindingOptions()

    assert options.allow_validating_top_level_nodes is True
    assert options.max_model_binding_collection_size == 1024
    assert options.max_model_binding_recursion_depth == 32
    assert options.max_model_state_errors == 200


def test_binding_options_validate_assignment() -> None:
    options = ModelBindingOptions()

    options.allow_validating_top_level_nodes = False
    assert options.allow_validating_top_level_nodes is False

    with pytest.raises(ValidationError):
        options.max_model_binding_collection_size = 0


def test_binding_result_success_and_failed() -> None:
    success = ModelBindingResult.success(None)
    failed = ModelBindingResult.failed()

    # None 也可以是成功绑定的值
    assert success.is_model_set is True
    assert success.model is None
    assert failed.is_model_set is False
    assert success != failed
    assert ModelBindingResult.success([1, 2]) == ModelBindingResult.success([1, 2])


def test_binding_result_is_frozen() -> None:
    result = ModelBindingResult.success(1)
    with pytest.raises(ValidationError):
        result.model = 2  # type: ignore[misc]


def test_model_state_entry_defaults() -> None:
    entry = ModelStateEntry()

    assert entry.raw_value is None
    assert entry.attempted_value is None
    assert entry.errors == []
    assert entry.validation_state == "unvalidated"

    entry.errors.append(ModelError(error_message="bad"))
    assert ModelStateEntry().errors == []


def test_person_validation() -> None:
    assert Person(name="Ann", age=30).age == 30
    with pytest.raises(ValidationError):
        Person(name="", age=30)
    with pytest.raises(ValidationError):
        Person(name="Ann", age=-1)


def test_response_models() -> None:
    summary = CollectionSummary(count=0)
    assert summary.total == 0
    assert summary.minimum is None
    assert summary.values == []

    response = PeopleResponse(count=1, people=[Person(name="Ann", age=3)])
    assert response.model_dump() == {
        "count": 1,
        "people": [{"name": "Ann", "age": 3}],
    }
