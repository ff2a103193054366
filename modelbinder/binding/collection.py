"""
集合模型绑定 (Collection Model Binding)

功能 (Function):
1.  **CollectionModelBinderProvider**: 判断请求的模型类型是否为集合，并为其创建 `CollectionModelBinder`。
    - 数组 (`Tuple[E, ...]`) 交给 `ArrayModelBinderProvider`，这里返回 None。
    - 可变集合 (`MutableSequence[E]`、`MutableSet[E]` 及其子类，如 `List[E]`、`Set[E]`、`Deque[E]`)：
      可以向已有集合添加元素，或创建新集合。
    - 只读接口 (`Iterable[E]`、`Collection[E]`、`Sequence[E]`、`Reversible[E]`)：只要 `list` 可以赋值给它，
      就创建一个 `list`。
    - 其它类型（`object`、`int`、普通类、映射、`FrozenSet[E]`、`Iterator[E]`）返回 None。
2.  **CollectionModelBinder**: 从值提供者中读取集合数据，支持三种格式：
    - 简单集合: `?ids=1&ids=2`
    - 隐式索引: `ids[0]=1&ids[1]=2`，遇到第一个无法绑定的索引时停止
    - 显式索引: `ids.index=a&ids.index=b&ids[a]=1&ids[b]=2`

交互 (Interaction):
- 被导入 (Imported by):
    - `modelbinder.binding.array`: `ArrayModelBinder` 继承 `CollectionModelBinder`。
    - `modelbinder.binding.factory`: 默认 provider 列表。
"""

import collections.abc as cabc
import itertools
import logging
from typing import Any, Iterable, List, Optional

from modelbinder.binding.abstractions import ModelBinder, ModelBinderProvider
from modelbinder.binding.context import ModelBinderProviderContext, ModelBindingContext
from modelbinder.binding.model_names import (
    create_index_model_name,
    create_property_model_name,
)
from modelbinder.binding.value_providers import (
    CompositeValueProvider,
    ElementalValueProvider,
    ValueProviderResult,
)
from modelbinder.core.exceptions import CollectionSizeExceededError, ModelBindingError
from modelbinder.models.binding import ModelBindingResult
from modelbinder.models.metadata import (
    ModelMetadata,
    is_list_assignable,
    is_set_assignable,
    type_class,
)

logger = logging.getLogger(__name__)


class CollectionModelBinder(ModelBinder):
    """
    Binds collection-shaped models, delegating each element to `element_binder`.

    `allow_validating_top_level_nodes` and `max_collection_size` are captured from
    the binding options when the provider creates the binder.
    """

    def __init__(
        self,
        element_type: Any,
        element_binder: ModelBinder,
        allow_validating_top_level_nodes: bool = True,
        max_collection_size: int = 1024,
    ) -> None:
        self.element_type = element_type
        self.element_binder = element_binder
        self.allow_validating_top_level_nodes = allow_validating_top_level_nodes
        self.max_collection_size = max_collection_size

    def __repr__(self) -> str:
        return f"{type(self).__name__}(element_type={self.element_type!r})"

    async def bind_model(self, context: ModelBindingContext) -> None:
        metadata = context.model_metadata
        target_type = metadata.underlying_type
        model = context.model
        logger.debug(
            f"Attempting to bind model of type '{metadata.display_name}' using the name '{context.model_name}'"
        )

        if not context.value_provider.contains_prefix(context.model_name):
            logger.debug(
                f"Could not find a value in the request with name '{context.model_name}' "
                f"of type '{metadata.display_name}'"
            )
            # 顶层对象即使没有数据也要得到一个 (空) 集合
            if context.is_top_level_object:
                if model is None:
                    model = self.create_empty_collection(target_type)
                if self.allow_validating_top_level_nodes:
                    self._add_error_if_binding_required(context)
                context.result = ModelBindingResult.success(model)
            return

        value_result = context.value_provider.get_value(context.model_name)
        if value_result.length == 0:
            bound = await self._bind_complex_collection(context)
        else:
            bound = await self._bind_simple_collection(context, value_result)

        if model is None or not self.can_update_in_place(model):
            model = self.convert_to_collection_type(target_type, bound)
        else:
            self.copy_to_model(model, bound)

        if value_result.length > 0:
            context.model_state.set_model_value(
                context.model_name, value_result.values, str(value_result)
            )

        context.result = ModelBindingResult.success(model)
        logger.debug(
            f"Done attempting to bind model '{context.model_name}' ({len(bound)} element(s))"
        )

    def _element_metadata(self, context: ModelBindingContext) -> ModelMetadata:
        return context.model_metadata.provider.get_metadata_for_type(self.element_type)

    async def _bind_simple_collection(
        self, context: ModelBindingContext, values: ValueProviderResult
    ) -> List[Any]:
        """`?ids=1&ids=2`: 每个原始值单独交给元素 binder。"""
        bound: List[Any] = []
        element_metadata = self._element_metadata(context)
        outer_provider = context.value_provider
        for value in values:
            if value is None:
                continue
            single_value_provider = CompositeValueProvider(
                [ElementalValueProvider(context.model_name, value), outer_provider]
            )
            with context.enter_nested_scope(
                element_metadata,
                field_name=context.field_name,
                model_name=context.model_name,
                model=None,
                value_provider=single_value_provider,
            ):
                await self.element_binder.bind_model(context)
                result = context.result
            if result.is_model_set:
                bound.append(result.model)
        return bound

    async def _bind_complex_collection(self, context: ModelBindingContext) -> List[Any]:
        index_key = create_property_model_name(context.model_name, "index")
        index_result = context.value_provider.get_value(index_key)
        index_names: Optional[List[str]] = None
        if index_result.length > 0:
            index_names = [name for name in index_result if name and name.strip()]
            logger.debug(
                f"Binding '{context.model_name}' using explicit indexes {index_names}"
            )
        return await self._bind_complex_collection_from_indexes(context, index_names)

    async def _bind_complex_collection_from_indexes(
        self, context: ModelBindingContext, index_names: Optional[List[str]]
    ) -> List[Any]:
        indexes_are_implicit = index_names is None
        names: Iterable[str] = (
            (str(i) for i in itertools.count()) if index_names is None else index_names
        )
        element_metadata = self._element_metadata(context)
        bound: List[Any] = []

        for index_name in names:
            full_child_name = create_index_model_name(context.model_name, index_name)
            with context.enter_nested_scope(
                element_metadata,
                field_name=index_name,
                model_name=full_child_name,
                model=None,
            ):
                await self.element_binder.bind_model(context)
                result = context.result

            # 隐式索引在第一个无法绑定的位置停止；显式索引用 None 占位
            if not result.is_model_set and indexes_are_implicit:
                break
            bound.append(result.model if result.is_model_set else None)

            if indexes_are_implicit and len(bound) > self.max_collection_size:
                raise CollectionSizeExceededError(
                    context.model_name,
                    context.model_metadata.model_type,
                    self.max_collection_size,
                )
        return bound

    def _add_error_if_binding_required(self, context: ModelBindingContext) -> None:
        metadata = context.model_metadata
        if metadata.is_binding_required:
            name = context.field_name or metadata.name or context.model_name
            context.model_state.add_model_error(
                context.model_name,
                f"A value for the '{name}' parameter or property was not provided.",
            )

    def can_update_in_place(self, model: Any) -> bool:
        return isinstance(model, (cabc.MutableSequence, cabc.MutableSet))

    def create_empty_collection(self, target_type: Any) -> Any:
        if is_list_assignable(target_type):
            return []
        if is_set_assignable(target_type):
            return set()
        return self._create_instance(target_type)

    def convert_to_collection_type(self, target_type: Any, bound: List[Any]) -> Any:
        if is_list_assignable(target_type):
            return bound
        if is_set_assignable(target_type):
            try:
                return set(bound)
            except TypeError as exc:
                raise ModelBindingError(
                    f"Elements bound for '{target_type}' are not hashable."
                ) from exc
        instance = self._create_instance(target_type)
        self.copy_to_model(instance, bound)
        return instance

    def copy_to_model(self, model: Any, bound: List[Any]) -> None:
        if isinstance(model, cabc.MutableSequence):
            model.clear()
            model.extend(bound)
        elif isinstance(model, cabc.MutableSet):
            model.clear()
            for item in bound:
                model.add(item)
        else:
            logger.debug(f"Model of type '{type(model).__name__}' is read-only; not copying")

    def _create_instance(self, target_type: Any) -> Any:
        cls = type_class(target_type)
        if cls is None:
            raise ModelBindingError(f"Could not create an instance of type '{target_type}'.")
        try:
            return cls()
        except TypeError as exc:
            raise ModelBindingError(
                f"Could not create an instance of type '{target_type}'. Model bound "
                f"collection types must be constructible without arguments."
            ) from exc


class CollectionModelBinderProvider(ModelBinderProvider):
    """Creates a `CollectionModelBinder` for list-like model types."""

    def get_binder(self, context: ModelBinderProviderContext) -> Optional[ModelBinder]:
        metadata = context.metadata

        # 数组有自己的 binder
        if metadata.is_array:
            return None

        if metadata.is_collection_type:
            element_type = metadata.collection_element_type
        elif metadata.is_enumerable_type and is_list_assignable(metadata.underlying_type):
            element_type = metadata.enumerable_element_type
        else:
            return None

        logger.debug(
            f"Creating collection binder for '{metadata.display_name}' with element type '{element_type}'"
        )
        element_binder = context.create_binder(
            context.metadata_provider.get_metadata_for_type(element_type)
        )
        return CollectionModelBinder(
            element_type,
            element_binder,
            allow_validating_top_level_nodes=context.options.allow_validating_top_level_nodes,
            max_collection_size=context.options.max_model_binding_collection_size,
        )
