from typing import Any, Callable, List, Optional

import pytest

from modelbinder.binding.abstractions import ModelBinder
from modelbinder.binding.context import ModelBinderProviderContext, ModelBindingContext
from modelbinder.binding.model_state import ModelStateDictionary
from modelbinder.binding.value_providers import QueryStringValueProvider
from modelbinder.models.binding import ModelBindingOptions
from modelbinder.models.metadata import ModelMetadata, ModelMetadataProvider


class StubBinder(ModelBinder):
    """A binder that records calls and never sets a result."""

    def __init__(self) -> None:
        self.calls: List[str] = []

    async def bind_model(self, context: ModelBindingContext) -> None:
        self.calls.append(context.model_name)


class StubProviderContext(ModelBinderProviderContext):
    """
    模拟 binder provider 看到的上下文。

    `on_create_binder` 在 provider 为元素/属性请求 binder 时被调用，
    测试可以用它检查请求的元数据；未设置时返回 `StubBinder`。
    `options` 可以在测试中直接修改。
    """

    def __init__(
        self,
        model_type: Any,
        metadata_provider: Optional[ModelMetadataProvider] = None,
        options: Optional[ModelBindingOptions] = None,
        on_create_binder: Optional[Callable[[ModelMetadata], ModelBinder]] = None,
    ) -> None:
        self._metadata_provider = metadata_provider or ModelMetadataProvider()
        self._metadata = self._metadata_provider.get_metadata_for_type(model_type)
        self._options = options or ModelBindingOptions()
        self.on_create_binder = on_create_binder
        self.created_for: List[ModelMetadata] = []

    @property
    def metadata(self) -> ModelMetadata:
        return self._metadata

    @property
    def metadata_provider(self) -> ModelMetadataProvider:
        return self._metadata_provider

    @property
    def options(self) -> ModelBindingOptions:
        return self._options

    def create_binder(self, metadata: ModelMetadata) -> ModelBinder:
        self.created_for.append(metadata)
        if self.on_create_binder is not None:
            return self.on_create_binder(metadata)
        return StubBinder()


@pytest.fixture
def provider_context_factory() -> Callable[..., StubProviderContext]:
    def _factory(model_type: Any, **kwargs: Any) -> StubProviderContext:
        return StubProviderContext(model_type, **kwargs)

    return _factory


@pytest.fixture
def binding_context_factory(
    metadata_provider: ModelMetadataProvider,
) -> Callable[..., ModelBindingContext]:
    """
    创建一个以查询字符串为数据源的 `ModelBindingContext`。

    用法: `binding_context_factory(List[int], {"ids": ["1", "2"]}, model_name="ids")`
    """

    def _factory(
        model_type: Any,
        values: Optional[dict] = None,
        *,
        model_name: str = "",
        name: Optional[str] = None,
        is_binding_required: bool = False,
        options: Optional[ModelBindingOptions] = None,
        model: Any = None,
        model_state: Optional[ModelStateDictionary] = None,
    ) -> ModelBindingContext:
        if name is not None:
            metadata = metadata_provider.get_metadata_for_parameter(
                model_type, name, is_binding_required=is_binding_required
            )
        else:
            metadata = metadata_provider.get_metadata_for_type(model_type)
        return ModelBindingContext(
            metadata,
            QueryStringValueProvider(values or {}),
            model_state=model_state,
            options=options,
            model_name=model_name,
            model=model,
        )

    return _factory
