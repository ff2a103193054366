# -*- coding: utf-8 -*-
"""
FastAPI 依赖注入 (Dependency Injection) 定义文件

主要职责:
1.  **获取共享资源**: `get_app_state` 与 `get_binding_service` 从 `lifespan` 管理的 `request.app.state`
    中取出绑定服务。
2.  **请求模型绑定**: `bind_from_request(model_type, name)` 生成一个依赖函数，它为当前请求创建值提供者
    (表单 -> 路由参数 -> 查询字符串)，调用 `BindingService.bind_parameter` 并返回绑定结果。
    model state 中有错误时抛出 `ModelBindingValidationError`，由 `modelbinder.main` 转换为 422 响应。

与其他文件的交互:
*   **`modelbinder.core.lifespan`**: 在应用启动时把 `binding_service` 放入 `app.state`。
*   **`modelbinder.binding.value_providers`**: `create_value_provider` 从请求构造值提供者。
*   **API 端点文件 (e.g., `modelbinder/api/v1/endpoints/collections.py`)**: 通过
    `Depends(bind_from_request(...))` 获取绑定好的参数。
"""

import logging
from typing import Any, Awaitable, Callable, Optional, cast

from fastapi import Depends, HTTPException, Request, status
from starlette.datastructures import State

from modelbinder.binding.value_providers import create_value_provider
from modelbinder.core.exceptions import ModelBindingValidationError
from modelbinder.services.binding_service import BindingService

logger = logging.getLogger(__name__)


def get_app_state(request: Request) -> State:
    """
    依赖函数：返回应用的共享状态 (`app.state`)。

    Raises:
        HTTPException: `request.app.state` 不存在时返回 500。
    """
    if not hasattr(request.app, "state"):
        logger.error(
            "应用状态 'request.app.state' 未找到！Lifespan 可能未正确执行或初始化失败。"
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="应用状态未初始化，服务暂时不可用。",
        )
    return cast(State, request.app.state)


def get_binding_service(state: State = Depends(get_app_state)) -> BindingService:
    """
    依赖函数：从应用状态中获取 `BindingService`。

    Raises:
        HTTPException: 绑定服务未初始化 (lifespan 未运行或已关闭) 时返回 503。
    """
    service = getattr(state, "binding_service", None)
    if service is None:
        logger.error("模型绑定服务未在应用状态中初始化或不可用。")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="模型绑定服务当前不可用。",
        )
    return cast(BindingService, service)


def bind_from_request(
    model_type: Any,
    name: str,
    *,
    prefix: Optional[str] = None,
    required: bool = False,
    default: Any = None,
) -> Callable[..., Awaitable[Any]]:
    """
    为端点参数创建一个绑定依赖。

    Args:
        model_type: 要绑定的类型，例如 `Sequence[int]` 或 `List[Person]`。
        name: 参数名，同时是默认的值前缀。
        prefix: 显式前缀；提供后不再退回空前缀。
        required: 为 True 时，顶层集合没有任何数据会记录一条 model state 错误。
        default: 没有绑定到任何值时返回的值。
    """

    async def _bind(
        request: Request,
        service: BindingService = Depends(get_binding_service),
    ) -> Any:
        value_provider = await create_value_provider(request)
        bound = await service.bind_parameter(
            value_provider,
            model_type,
            name,
            prefix=prefix,
            is_binding_required=required,
        )
        if not bound.is_valid:
            logger.info(
                f"Model binding for '{name}' failed with {bound.model_state.error_count} error(s)"
            )
            raise ModelBindingValidationError(bound.model_state)
        if not bound.result.is_model_set:
            return default
        return bound.value

    _bind.__name__ = f"bind_{name}"
    return _bind
