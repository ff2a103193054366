"""
复杂对象绑定 (Complex Object Binding)

功能 (Function):
为 pydantic 模型和 dataclass 逐个属性绑定数据：属性 `name` 在前缀 `person` 下对应键 `person.name`，
在集合元素中对应 `people[0].name`。所有属性绑定完成后，用 pydantic `TypeAdapter` 构造对象，
验证错误映射回 model state 中对应的键。
非顶层对象如果请求中没有任何以其前缀开头的数据，则不会被创建。
"""

import logging
from typing import Any, Dict, Optional, Sequence, Union

from pydantic import TypeAdapter, ValidationError

from modelbinder.binding.abstractions import ModelBinder, ModelBinderProvider
from modelbinder.binding.context import ModelBinderProviderContext, ModelBindingContext
from modelbinder.binding.model_names import (
    create_index_model_name,
    create_property_model_name,
)
from modelbinder.models.binding import ModelBindingResult

logger = logging.getLogger(__name__)


def _model_name_for_location(prefix: str, loc: Sequence[Union[int, str]]) -> str:
    name = prefix
    for part in loc:
        if isinstance(part, int):
            name = create_index_model_name(name, part)
        else:
            name = create_property_model_name(name, part)
    return name


class ComplexObjectModelBinder(ModelBinder):
    def __init__(self, model_type: Any, property_binders: Dict[str, ModelBinder]) -> None:
        self.model_type = model_type
        self.property_binders = property_binders
        self._adapter: TypeAdapter[Any] = TypeAdapter(model_type)

    def __repr__(self) -> str:
        return f"ComplexObjectModelBinder(model_type={self.model_type!r})"

    async def bind_model(self, context: ModelBindingContext) -> None:
        metadata = context.model_metadata
        logger.debug(
            f"Attempting to bind model of type '{metadata.display_name}' using the name '{context.model_name}'"
        )

        if not context.is_top_level_object and not context.value_provider.contains_prefix(
            context.model_name
        ):
            logger.debug(
                f"Could not find a value in the request with name '{context.model_name}' "
                f"of type '{metadata.display_name}'"
            )
            return

        values: Dict[str, Any] = {}
        for name, property_metadata in metadata.properties.items():
            key = property_metadata.binder_model_name or name
            property_model_name = create_property_model_name(context.model_name, key)
            with context.enter_nested_scope(
                property_metadata,
                field_name=name,
                model_name=property_model_name,
                model=None,
            ):
                await self.property_binders[name].bind_model(context)
                result = context.result
            if result.is_model_set:
                values[key] = result.model

        try:
            model = self._adapter.validate_python(values)
        except ValidationError as exc:
            self._add_validation_errors(context, exc)
            return

        context.result = ModelBindingResult.success(model)
        logger.debug(f"Done attempting to bind model '{context.model_name}'")

    def _add_validation_errors(
        self, context: ModelBindingContext, exc: ValidationError
    ) -> None:
        for error in exc.errors():
            loc = error.get("loc", ())
            key = _model_name_for_location(context.model_name, loc)
            # 属性 binder 已经记录了转换错误，不再重复
            if context.model_state.has_errors(key):
                continue
            if error.get("type") == "missing" and loc:
                message = f"A value for the '{loc[-1]}' property was not provided."
            else:
                message = error.get("msg", "The value is invalid.")
            context.model_state.add_model_error(key, message, exc)


class ComplexObjectModelBinderProvider(ModelBinderProvider):
    def get_binder(self, context: ModelBinderProviderContext) -> Optional[ModelBinder]:
        metadata = context.metadata
        if (
            metadata.is_complex_type
            and not metadata.is_enumerable_type
            and metadata.is_property_container
        ):
            property_binders = {
                name: context.create_binder(property_metadata)
                for name, property_metadata in metadata.properties.items()
            }
            return ComplexObjectModelBinder(metadata.underlying_type, property_binders)
        return None
