# tests/conftest.py

"""
文件目的：定义 Pytest Fixtures 和测试配置

本文件定义了 ModelBinder 测试所需的共享 Fixtures：
- **测试配置** (`test_settings`): 不读取 `.env` 的 `Settings`，日志级别为 DEBUG。
- **测试应用实例** (`test_app`): 通过 `create_app(test_settings)` 创建的 FastAPI 应用。
- **HTTP 测试客户端** (`client`): 使用 `asgi-lifespan` 的 `LifespanManager` 执行应用的启动/关闭事件，
  再通过 `httpx.ASGITransport` 向应用发送请求。
- **绑定组件** (`metadata_provider`, `binding_options`, `binder_factory`, `binding_service`):
  直接测试绑定管道时使用的真实实例。

使用方法：
测试函数通过参数名请求 Fixture，例如:
`async def test_something(client: AsyncClient, binder_factory: ModelBinderFactory): ...`
"""

import os

# 必须在导入 modelbinder 之前设置，config 模块据此识别测试环境
os.environ.setdefault("PYTEST_RUNNING", "1")

import logging
from typing import AsyncGenerator

import httpx
import pytest
import pytest_asyncio
from asgi_lifespan import LifespanManager
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from modelbinder.binding.factory import ModelBinderFactory
from modelbinder.core.config import Settings
from modelbinder.main import create_app
from modelbinder.models.binding import ModelBindingOptions
from modelbinder.models.metadata import ModelMetadataProvider
from modelbinder.services.binding_service import BindingService

logger = logging.getLogger(__name__)


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    测试专用配置。

    `_env_file=None` 避免开发者本地的 `.env` 影响测试结果。
    集合长度限制调小，便于在 API 测试中触发 `CollectionSizeExceededError`。
    """
    settings = Settings(
        _env_file=None,
        project_name="ModelBinder Test",
        log_level="DEBUG",
        environment="test",
        max_model_binding_collection_size=16,
    )
    logger.debug(f"[test_settings] Using settings object ID: {id(settings)}")
    return settings


@pytest.fixture(scope="session")
def test_app(test_settings: Settings) -> FastAPI:
    """使用测试配置创建的 FastAPI 应用实例。"""
    return create_app(test_settings)


@pytest_asyncio.fixture(scope="function")
async def client(test_app: FastAPI) -> AsyncGenerator[httpx.AsyncClient, None]:
    """
    为每个测试函数创建一个 `httpx.AsyncClient`。

    `LifespanManager` 在进入上下文时触发 startup，退出时触发 shutdown，
    因此 `app.state.binding_service` 在请求期间可用。
    """
    async with LifespanManager(test_app) as manager:
        transport = ASGITransport(app=manager.app)
        async with AsyncClient(transport=transport, base_url="http://test") as async_client:
            yield async_client


@pytest.fixture
def binding_options() -> ModelBindingOptions:
    return ModelBindingOptions()


@pytest.fixture
def metadata_provider() -> ModelMetadataProvider:
    return ModelMetadataProvider()


@pytest.fixture
def binder_factory(
    metadata_provider: ModelMetadataProvider, binding_options: ModelBindingOptions
) -> ModelBinderFactory:
    return ModelBinderFactory(metadata_provider, options=binding_options)


@pytest.fixture
def binding_service(
    binder_factory: ModelBinderFactory,
    metadata_provider: ModelMetadataProvider,
    binding_options: ModelBindingOptions,
) -> BindingService:
    return BindingService(binder_factory, metadata_provider, binding_options)
