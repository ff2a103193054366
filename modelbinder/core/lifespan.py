"""
应用生命周期管理模块 (Application Lifespan Module)

功能 (Function):
`lifespan` 异步上下文管理器在 FastAPI 应用启动时创建模型绑定所需的共享组件，并存放在 `app.state` 上：
    - `binding_options`: 由 `Settings` 生成的 `ModelBindingOptions`。
    - `metadata_provider`: 缓存类型元数据的 `ModelMetadataProvider`。
    - `binder_factory`: 缓存 binder 的 `ModelBinderFactory`。
    - `binding_service`: 供 API 依赖使用的 `BindingService`。
应用关闭时把这些属性重置为 None。

交互 (Interaction):
- 依赖 (Depends on):
    - `modelbinder.core.config`: `Settings` 作为参数显式传入，方便测试注入不同配置。
- 被使用 (Used by):
    - `modelbinder.main`: 通过 `functools.partial(lifespan, settings=...)` 传给 `FastAPI`。
    - `modelbinder.api.v1.dependencies`: 从 `request.app.state` 读取 `binding_service`。
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from modelbinder.binding.factory import ModelBinderFactory
from modelbinder.core.config import Settings
from modelbinder.models.metadata import ModelMetadataProvider
from modelbinder.services.binding_service import BindingService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI, settings: Settings) -> AsyncGenerator[None, None]:
    """
    Handles application startup and shutdown events.
    Builds the binding components once and stores them on app.state.
    """
    logger.info("Application lifespan startup: Initializing binding components...")

    app.state.binding_options = None
    app.state.metadata_provider = None
    app.state.binder_factory = None
    app.state.binding_service = None

    try:
        options = settings.binding_options()
        metadata_provider = ModelMetadataProvider()
        binder_factory = ModelBinderFactory(metadata_provider, options=options)
        app.state.binding_options = options
        app.state.metadata_provider = metadata_provider
        app.state.binder_factory = binder_factory
        app.state.binding_service = BindingService(
            binder_factory, metadata_provider, options
        )
    except Exception as e:
        logger.exception(f"Failed to initialize binding components: {e}")
        raise RuntimeError("Binding component initialization failed") from e

    logger.info(
        f"Binding components ready (allow_validating_top_level_nodes="
        f"{options.allow_validating_top_level_nodes}, "
        f"max_collection_size={options.max_model_binding_collection_size})"
    )

    try:
        yield
    finally:
        logger.info("Application lifespan shutdown: Releasing binding components...")
        app.state.binding_service = None
        app.state.binder_factory = None
        app.state.metadata_provider = None
        app.state.binding_options = None
        logger.info("Application lifespan shutdown complete.")
