"""
简单类型模型绑定 (Simple Type Model Binding)

功能 (Function):
- **SimpleTypeModelBinder**: 读取当前模型名称下的第一个原始值，用 pydantic `TypeAdapter` 转换为目标类型
  (`int`、`float`、`bool`、`datetime`、`Enum`、`str` 等)。
    - 空白输入视为 None (`str` 保留原始值)；不可为 None 的类型记录 "The value '<v>' is invalid."。
    - 转换失败不抛出异常，而是在 model state 中记录 "The value '<v>' is not valid for <类型>."。
- **SimpleTypeModelBinderProvider**: 所有非复杂类型都由它处理。

交互 (Interaction):
- 被导入 (Imported by):
    - `modelbinder.binding.factory`: 默认 provider 列表中的第一个。
    - 集合 binder 通过 factory 为元素类型获得本 binder。
"""

import logging
from typing import Any, Optional

from pydantic import TypeAdapter, ValidationError

from modelbinder.binding.abstractions import ModelBinder, ModelBinderProvider
from modelbinder.binding.context import ModelBinderProviderContext, ModelBindingContext
from modelbinder.models.binding import ModelBindingResult

logger = logging.getLogger(__name__)


class SimpleTypeModelBinder(ModelBinder):
    """Converts a single raw string into a simple type using a pydantic `TypeAdapter`."""

    def __init__(self, model_type: Any) -> None:
        self.model_type = model_type
        self._adapter: TypeAdapter[Any] = TypeAdapter(model_type)

    async def bind_model(self, context: ModelBindingContext) -> None:
        metadata = context.model_metadata
        logger.debug(
            f"Attempting to bind model of type '{metadata.display_name}' using the name '{context.model_name}'"
        )

        value_result = context.value_provider.get_value(context.model_name)
        if value_result.length == 0:
            logger.debug(
                f"Could not find a value in the request with name '{context.model_name}' "
                f"of type '{metadata.display_name}'"
            )
            return

        context.model_state.set_model_value(
            context.model_name, value_result.values, str(value_result)
        )
        value = value_result.first_value or ""

        model: Any
        # str 保留原始值（包括空字符串），其余类型把空白输入视为 None
        if metadata.underlying_type is not str and not value.strip():
            model = None
        else:
            try:
                model = self._adapter.validate_python(value)
            except ValidationError as exc:
                logger.debug(
                    f"Conversion of '{value}' to '{metadata.display_name}' failed: {exc.error_count()} error(s)"
                )
                context.model_state.add_model_error(
                    context.model_name,
                    f"The value '{value}' is not valid for {metadata.display_name}.",
                    exc,
                )
                return

        if model is None and not metadata.is_nullable:
            context.model_state.add_model_error(
                context.model_name, f"The value '{value}' is invalid."
            )
            return

        context.result = ModelBindingResult.success(model)
        logger.debug(f"Done attempting to bind model '{context.model_name}'")


class SimpleTypeModelBinderProvider(ModelBinderProvider):
    def get_binder(self, context: ModelBinderProviderContext) -> Optional[ModelBinder]:
        if context.metadata.is_complex_type:
            return None
        return SimpleTypeModelBinder(context.metadata.model_type)
