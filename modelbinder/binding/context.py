"""
绑定上下文 (Binding Contexts)

功能 (Function):
1.  **ModelBindingContext**: 一次绑定操作的可变状态：当前模型的元数据、模型名称（在值提供者中查找的键前缀）、
    已有模型、值提供者、model state 以及结果。binder 通过 `enter_nested_scope` 进入属性/元素作用域，
    退出时自动恢复外层状态。
2.  **ModelBinderProviderContext**: binder provider 在创建 binder 时看到的上下文，
    提供元数据、绑定选项以及为子元素/属性创建 binder 的能力。

交互 (Interaction):
- 被导入 (Imported by):
    - `modelbinder.binding.abstractions`: `ModelBinder.bind_model` 接收 `ModelBindingContext`。
    - `modelbinder.binding.factory`: 提供 `ModelBinderProviderContext` 的具体实现。
    - `modelbinder.services.binding_service`: 为顶层参数创建 `ModelBindingContext`。
"""

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Iterator, Optional

from modelbinder.binding.model_state import ModelStateDictionary
from modelbinder.binding.value_providers import ValueProvider
from modelbinder.core.exceptions import RecursionDepthExceededError
from modelbinder.models.binding import ModelBindingOptions, ModelBindingResult
from modelbinder.models.metadata import ModelMetadata, ModelMetadataProvider

if TYPE_CHECKING:
    from modelbinder.binding.abstractions import ModelBinder

logger = logging.getLogger(__name__)


class ModelBindingContext:
    """Mutable state shared by the binders taking part in one binding operation."""

    def __init__(
        self,
        model_metadata: ModelMetadata,
        value_provider: ValueProvider,
        model_state: Optional[ModelStateDictionary] = None,
        options: Optional[ModelBindingOptions] = None,
        model_name: str = "",
        field_name: Optional[str] = None,
        model: Any = None,
        is_top_level_object: bool = True,
    ) -> None:
        self.options = options or ModelBindingOptions()
        self.model_state = (
            model_state
            if model_state is not None
            else ModelStateDictionary(self.options.max_model_state_errors)
        )
        self.model_metadata = model_metadata
        self.value_provider = value_provider
        self.model_name = model_name
        self.field_name = field_name if field_name is not None else model_name
        self.model = model
        self.is_top_level_object = is_top_level_object
        self.result = ModelBindingResult.failed()
        self.depth = 0

    @property
    def model_type(self) -> Any:
        return self.model_metadata.model_type

    @contextmanager
    def enter_nested_scope(
        self,
        model_metadata: ModelMetadata,
        field_name: Optional[str],
        model_name: str,
        model: Any = None,
        value_provider: Optional[ValueProvider] = None,
    ) -> Iterator["ModelBindingContext"]:
        """
        进入属性或集合元素的作用域。

        作用域内 `result` 被重置为 "未设置"，调用方需要在 `with` 块内读取结果；
        退出时恢复外层的元数据、模型名称、值提供者和结果。
        """
        if self.depth + 1 > self.options.max_model_binding_recursion_depth:
            raise RecursionDepthExceededError(
                model_name, self.options.max_model_binding_recursion_depth
            )

        saved = (
            self.model_metadata,
            self.field_name,
            self.model_name,
            self.model,
            self.is_top_level_object,
            self.value_provider,
            self.result,
        )
        self.model_metadata = model_metadata
        self.field_name = field_name if field_name is not None else model_name
        self.model_name = model_name
        self.model = model
        self.is_top_level_object = False
        if value_provider is not None:
            self.value_provider = value_provider
        self.result = ModelBindingResult.failed()
        self.depth += 1
        try:
            yield self
        finally:
            self.depth -= 1
            (
                self.model_metadata,
                self.field_name,
                self.model_name,
                self.model,
                self.is_top_level_object,
                self.value_provider,
                self.result,
            ) = saved


class ModelBinderProviderContext(ABC):
    """What a `ModelBinderProvider` sees while deciding whether it can bind a type."""

    @property
    @abstractmethod
    def metadata(self) -> ModelMetadata:
        ...

    @property
    @abstractmethod
    def metadata_provider(self) -> ModelMetadataProvider:
        ...

    @property
    @abstractmethod
    def options(self) -> ModelBindingOptions:
        ...

    @abstractmethod
    def create_binder(self, metadata: ModelMetadata) -> "ModelBinder":
        """Creates the binder for a nested type (a collection element or a property)."""
