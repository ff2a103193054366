"""
模型绑定抽象接口 (Model Binding Abstractions)

功能 (Function):
- `ModelBinder`: 从 `ModelBindingContext` 中读取数据并设置 `context.result`。
- `ModelBinderProvider`: 根据元数据决定是否为某个类型提供 binder，不适用时返回 None。

交互 (Interaction):
- 被继承 (Subclassed by): `simple`、`array`、`collection`、`complex` 中的 binder 与 provider，
  以及 `factory.PlaceholderBinder`。
"""

from abc import ABC, abstractmethod
from typing import Optional

from modelbinder.binding.context import ModelBinderProviderContext, ModelBindingContext


class ModelBinder(ABC):
    """Binds one model from the data in a `ModelBindingContext`."""

    @abstractmethod
    async def bind_model(self, context: ModelBindingContext) -> None:
        """Sets `context.result`; leaving it unset means no data was bound."""


class ModelBinderProvider(ABC):
    """Decides whether, and with which binder, a model type can be bound."""

    @abstractmethod
    def get_binder(self, context: ModelBinderProviderContext) -> Optional[ModelBinder]:
        """Returns a binder for `context.metadata`, or None when the type is not handled."""
