"""
Binder 工厂 (Model Binder Factory)

功能 (Function):
按顺序询问注册的 `ModelBinderProvider`，第一个返回 binder 的 provider 胜出。
为元素和属性创建子 binder 时使用同一个工厂，因此递归类型（例如 `Node` 包含 `List[Node]`）
会得到一个 `PlaceholderBinder`，在外层 binder 创建完成后指向它。
创建好的顶层 binder 按元数据缓存。

交互 (Interaction):
- 依赖 (Depends on):
    - `modelbinder.binding.simple` / `array` / `collection` / `complex`: 默认 provider。
- 被导入 (Imported by):
    - `modelbinder.core.lifespan`: 应用启动时创建工厂。
    - `modelbinder.services.binding_service`: 为参数创建 binder。
"""

import logging
from typing import Dict, Hashable, List, Optional, Sequence

from modelbinder.binding.abstractions import ModelBinder, ModelBinderProvider
from modelbinder.binding.array import ArrayModelBinderProvider
from modelbinder.binding.collection import CollectionModelBinderProvider
from modelbinder.binding.complex import ComplexObjectModelBinderProvider
from modelbinder.binding.context import ModelBinderProviderContext, ModelBindingContext
from modelbinder.binding.simple import SimpleTypeModelBinderProvider
from modelbinder.core.exceptions import BinderNotFoundError, ModelBindingError
from modelbinder.models.binding import ModelBindingOptions
from modelbinder.models.metadata import ModelMetadata, ModelMetadataProvider

logger = logging.getLogger(__name__)


def default_model_binder_providers() -> List[ModelBinderProvider]:
    # 顺序很重要：数组必须在集合之前
    return [
        SimpleTypeModelBinderProvider(),
        ArrayModelBinderProvider(),
        CollectionModelBinderProvider(),
        ComplexObjectModelBinderProvider(),
    ]


def _cache_key(metadata: ModelMetadata) -> Optional[Hashable]:
    key = metadata.identity
    try:
        hash(key)
    except TypeError:
        return None
    return key


class PlaceholderBinder(ModelBinder):
    """Stands in for a binder that is still being created further up a recursive type."""

    def __init__(self, metadata: ModelMetadata) -> None:
        self.metadata = metadata
        self.inner: Optional[ModelBinder] = None

    def __repr__(self) -> str:
        return f"PlaceholderBinder(metadata={self.metadata!r}, resolved={self.inner is not None})"

    async def bind_model(self, context: ModelBindingContext) -> None:
        if self.inner is None:
            raise ModelBindingError(
                f"The binder for '{self.metadata.display_name}' was never resolved."
            )
        await self.inner.bind_model(context)


class _FactoryProviderContext(ModelBinderProviderContext):
    def __init__(
        self,
        factory: "ModelBinderFactory",
        metadata: ModelMetadata,
        visited: Dict[Hashable, ModelBinder],
    ) -> None:
        self._factory = factory
        self._metadata = metadata
        self._visited = visited

    @property
    def metadata(self) -> ModelMetadata:
        return self._metadata

    @property
    def metadata_provider(self) -> ModelMetadataProvider:
        return self._factory.metadata_provider

    @property
    def options(self) -> ModelBindingOptions:
        return self._factory.options

    def create_binder(self, metadata: ModelMetadata) -> ModelBinder:
        return self._factory._create_binder_core(metadata, self._visited)


class ModelBinderFactory:
    def __init__(
        self,
        metadata_provider: ModelMetadataProvider,
        options: Optional[ModelBindingOptions] = None,
        providers: Optional[Sequence[ModelBinderProvider]] = None,
    ) -> None:
        self.metadata_provider = metadata_provider
        self.options = options or ModelBindingOptions()
        self.providers: List[ModelBinderProvider] = list(
            providers if providers is not None else default_model_binder_providers()
        )
        self._cache: Dict[Hashable, ModelBinder] = {}

    def create_binder(self, metadata: ModelMetadata) -> ModelBinder:
        """
        为 `metadata` 创建 binder。

        Raises:
            BinderNotFoundError: 没有任何 provider 能处理该类型。
        """
        key = _cache_key(metadata)
        if key is not None and key in self._cache:
            return self._cache[key]

        binder = self._create_binder_core(metadata, {})
        if key is not None:
            self._cache[key] = binder
        return binder

    def _create_binder_core(
        self, metadata: ModelMetadata, visited: Dict[Hashable, ModelBinder]
    ) -> ModelBinder:
        key = _cache_key(metadata)
        if key is not None:
            if key in self._cache:
                return self._cache[key]
            if key in visited:
                return visited[key]

        placeholder = PlaceholderBinder(metadata)
        if key is not None:
            visited[key] = placeholder

        context = _FactoryProviderContext(self, metadata, visited)
        binder: Optional[ModelBinder] = None
        for provider in self.providers:
            binder = provider.get_binder(context)
            if binder is not None:
                logger.debug(
                    f"{type(provider).__name__} created {binder!r} for '{metadata.display_name}'"
                )
                break

        if binder is None:
            raise BinderNotFoundError(metadata.model_type)

        placeholder.inner = binder
        if key is not None:
            visited[key] = binder
        return binder
