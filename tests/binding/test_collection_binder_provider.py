# -*- coding: utf-8 -*-
"""
文件目的：测试 `CollectionModelBinderProvider` 的类型选择规则。

- 对 `object`、`int`、普通类、数组 (`Tuple[int, ...]`) 等类型不创建 binder。
- 对 `Iterable[int]`、`Collection[int]`、`Sequence[int]`、`MutableSequence[int]`、`List[int]`
  以及具体集合类 (`UserList[int]`、`Deque[int]`、用户子类) 创建元素类型为 `int` 的
  `CollectionModelBinder`。
- 创建 binder 时从选项中读取 `allow_validating_top_level_nodes`。
"""

import collections
from typing import (
    Any,
    Callable,
    Collection,
    Deque,
    Dict,
    FrozenSet,
    Iterable,
    Iterator,
    List,
    Mapping,
    MutableSequence,
    MutableSet,
    Optional,
    Reversible,
    Sequence,
    Set,
    Tuple,
)

import pytest
from pydantic import BaseModel

from modelbinder.binding.abstractions import ModelBinder
from modelbinder.binding.collection import (
    CollectionModelBinder,
    CollectionModelBinderProvider,
)
from modelbinder.binding.context import ModelBindingContext
from modelbinder.models.binding import ModelBindingOptions
from modelbinder.models.metadata import ModelMetadata


class Person:
    """普通的用户类。"""

    def __init__(self, name: str = "") -> None:
        self.name = name


class PersonModel(BaseModel):
    name: str


class IntCollection(collections.UserList[int]):  # type: ignore[misc]
    pass


class IntBag(List[int]):
    pass


class MarkerBinder(ModelBinder):
    async def bind_model(self, context: ModelBindingContext) -> None:
        return None


@pytest.mark.parametrize(
    "model_type",
    [
        object,
        int,
        str,
        list,
        Person,
        PersonModel,
        Tuple[int, ...],
        Optional[Tuple[int, ...]],
        Dict[str, int],
        Mapping[str, int],
        FrozenSet[int],
        Iterator[int],
    ],
)
def test_get_binder_returns_none_for_unsupported_types(
    provider_context_factory: Callable[..., Any], model_type: Any
) -> None:
    provider = CollectionModelBinderProvider()
    context = provider_context_factory(model_type)

    result = provider.get_binder(context)

    assert result is None
    assert context.created_for == []


@pytest.mark.parametrize(
    "model_type",
    [
        Iterable[int],
        Collection[int],
        Sequence[int],
        Reversible[int],
        MutableSequence[int],
        MutableSet[int],
        List[int],
        list[int],
        Set[int],
        Deque[int],
        IntCollection,
        IntBag,
        Optional[List[int]],
    ],
)
def test_get_binder_returns_collection_binder(
    provider_context_factory: Callable[..., Any], model_type: Any
) -> None:
    provider = CollectionModelBinderProvider()
    element_binder = MarkerBinder()
    requested: List[ModelMetadata] = []

    def on_create_binder(metadata: ModelMetadata) -> ModelBinder:
        requested.append(metadata)
        assert metadata.model_type is int
        return element_binder

    context = provider_context_factory(model_type, on_create_binder=on_create_binder)

    result = provider.get_binder(context)

    assert isinstance(result, CollectionModelBinder)
    assert result.element_type is int
    assert result.element_binder is element_binder
    # 元素 binder 只请求一次
    assert len(requested) == 1


def test_get_binder_element_type_can_be_complex(
    provider_context_factory: Callable[..., Any],
) -> None:
    provider = CollectionModelBinderProvider()
    context = provider_context_factory(List[PersonModel])

    result = provider.get_binder(context)

    assert isinstance(result, CollectionModelBinder)
    assert result.element_type is PersonModel
    assert [m.model_type for m in context.created_for] == [PersonModel]


@pytest.mark.parametrize("allow_validating_top_level_nodes", [True, False])
def test_get_binder_carries_allow_validating_top_level_nodes(
    provider_context_factory: Callable[..., Any],
    allow_validating_top_level_nodes: bool,
) -> None:
    provider = CollectionModelBinderProvider()
    context = provider_context_factory(List[int])
    context.options.allow_validating_top_level_nodes = allow_validating_top_level_nodes

    result = provider.get_binder(context)

    assert isinstance(result, CollectionModelBinder)
    assert result.allow_validating_top_level_nodes is allow_validating_top_level_nodes


def test_options_are_captured_at_creation(
    provider_context_factory: Callable[..., Any],
) -> None:
    options = ModelBindingOptions(max_model_binding_collection_size=5)
    provider = CollectionModelBinderProvider()
    context = provider_context_factory(Sequence[int], options=options)

    result = provider.get_binder(context)
    options.allow_validating_top_level_nodes = False
    options.max_model_binding_collection_size = 50

    assert isinstance(result, CollectionModelBinder)
    assert result.allow_validating_top_level_nodes is True
    assert result.max_collection_size == 5
