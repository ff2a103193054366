"""
模型绑定服务模块 (Model Binding Service Module)

功能 (Function):
`BindingService` 负责顶层参数的绑定：
    - 通过 `ModelMetadataProvider` 获取参数元数据，通过 `ModelBinderFactory` 获取 binder。
    - 选择模型名称前缀：显式 `prefix` > 参数名 > 空前缀。
    - 创建 `ModelBindingContext` 并执行绑定，结果与 model state 封装为 `BoundParameter`。

交互 (Interaction):
- 依赖 (Depends on): `modelbinder.binding.*`、`modelbinder.models.metadata`。
- 被使用 (Used by):
    - `modelbinder.core.lifespan`: 应用启动时创建实例并存入 `app.state`。
    - `modelbinder.api.v1.dependencies.bind_from_request`: 每个请求调用 `bind_parameter`。
"""

import logging
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

from modelbinder.binding.context import ModelBindingContext
from modelbinder.binding.factory import ModelBinderFactory
from modelbinder.binding.model_state import ModelStateDictionary
from modelbinder.binding.value_providers import ValueProvider
from modelbinder.models.binding import ModelBindingOptions, ModelBindingResult
from modelbinder.models.metadata import ModelMetadataProvider

logger = logging.getLogger(__name__)


class BoundParameter(BaseModel):
    """The outcome of binding one action parameter."""

    model_config = ConfigDict(arbitrary_types_allowed=True, protected_namespaces=())

    name: str
    model_name: str
    result: ModelBindingResult
    model_state: ModelStateDictionary

    @property
    def is_valid(self) -> bool:
        return self.model_state.is_valid

    @property
    def value(self) -> Any:
        return self.result.model if self.result.is_model_set else None


class BindingService:
    """Binds top-level parameters from a value provider."""

    def __init__(
        self,
        binder_factory: ModelBinderFactory,
        metadata_provider: ModelMetadataProvider,
        options: Optional[ModelBindingOptions] = None,
    ):
        self.binder_factory = binder_factory
        self.metadata_provider = metadata_provider
        self.options = options or binder_factory.options

    async def bind_parameter(
        self,
        value_provider: ValueProvider,
        model_type: Any,
        name: str,
        *,
        prefix: Optional[str] = None,
        is_binding_required: bool = False,
        model_state: Optional[ModelStateDictionary] = None,
    ) -> BoundParameter:
        """
        绑定一个参数。

        未指定 `prefix` 时先用参数名查找；请求中没有任何以参数名开头的数据时，
        退回空前缀，这样 `?name=x` 也能绑定到复杂参数的属性 `name` 上。

        Raises:
            BinderNotFoundError: 类型无法绑定。
            CollectionSizeExceededError / RecursionDepthExceededError: 超出绑定限制。
        """
        logger.info(f"Binding parameter '{name}' of type '{model_type}'")
        metadata = self.metadata_provider.get_metadata_for_parameter(
            model_type, name, is_binding_required=is_binding_required
        )
        binder = self.binder_factory.create_binder(metadata)

        if prefix is not None:
            model_name = prefix
        elif value_provider.contains_prefix(name):
            model_name = name
        else:
            model_name = ""
            logger.debug(f"No values found with prefix '{name}'; falling back to empty prefix")

        state = model_state if model_state is not None else ModelStateDictionary(
            self.options.max_model_state_errors
        )
        context = ModelBindingContext(
            metadata,
            value_provider,
            model_state=state,
            options=self.options,
            model_name=model_name,
            field_name=name,
        )
        await binder.bind_model(context)

        if not context.result.is_model_set:
            logger.debug(f"Parameter '{name}' was not bound")
        elif not state.is_valid:
            logger.warning(
                f"Parameter '{name}' bound with {state.error_count} model state error(s)"
            )

        return BoundParameter(
            name=name,
            model_name=model_name,
            result=context.result,
            model_state=state,
        )
