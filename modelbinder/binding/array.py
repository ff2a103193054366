"""
数组模型绑定 (Array Model Binding)

功能 (Function):
`Tuple[E, ...]` 是本项目中的 "数组"：长度由请求数据决定，且绑定结果不可原地修改。
- **ArrayModelBinder**: 复用 `CollectionModelBinder` 的三种集合格式，结果转换为 `tuple`。
- **ArrayModelBinderProvider**: 只处理数组类型；其它集合交给 `CollectionModelBinderProvider`。

交互 (Interaction):
- 依赖 (Depends on): `modelbinder.binding.collection.CollectionModelBinder`。
- 被导入 (Imported by): `modelbinder.binding.factory`。
"""

import logging
from typing import Any, List, Optional

from modelbinder.binding.abstractions import ModelBinder, ModelBinderProvider
from modelbinder.binding.collection import CollectionModelBinder
from modelbinder.binding.context import ModelBinderProviderContext

logger = logging.getLogger(__name__)


class ArrayModelBinder(CollectionModelBinder):
    """Binds `Tuple[E, ...]`. Tuples are immutable, so the bound result always replaces the model."""

    def can_update_in_place(self, model: Any) -> bool:
        return False

    def create_empty_collection(self, target_type: Any) -> Any:
        return ()

    def convert_to_collection_type(self, target_type: Any, bound: List[Any]) -> Any:
        return tuple(bound)

    def copy_to_model(self, model: Any, bound: List[Any]) -> None:
        # 数组长度不可变
        return None


class ArrayModelBinderProvider(ModelBinderProvider):
    def get_binder(self, context: ModelBinderProviderContext) -> Optional[ModelBinder]:
        metadata = context.metadata
        if not metadata.is_array:
            return None

        element_type = metadata.element_type
        logger.debug(f"Creating array binder for '{metadata.display_name}'")
        element_binder = context.create_binder(
            context.metadata_provider.get_metadata_for_type(element_type)
        )
        return ArrayModelBinder(
            element_type,
            element_binder,
            allow_validating_top_level_nodes=context.options.allow_validating_top_level_nodes,
            max_collection_size=context.options.max_model_binding_collection_size,
        )
