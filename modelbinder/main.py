"""
ModelBinder FastAPI 应用入口文件

主要职责:
1.  **初始化 FastAPI 应用**: `create_app(settings)` 创建 `FastAPI` 实例，并通过 `functools.partial`
    把 `settings` 传给 `modelbinder.core.lifespan.lifespan`。
2.  **配置中间件**:
    *   `CORSMiddleware`: 允许本地前端开发服务器访问。
    *   `RequestLoggingMiddleware`: 记录每个请求的方法、路径、查询参数、状态码和耗时。
3.  **注册 API 路由**: 将 `modelbinder.api.v1.api.api_router` 挂载到 `settings.api_v1_str` 下。
4.  **定义异常处理器**:
    *   `ModelBindingValidationError` -> 422，响应体中的 `errors` 按模型名称 (如 `people[0].age`) 分组。
    *   `RequestValidationError` -> 422。
    *   `ModelBindingError` (binder 缺失、超出集合长度或递归深度) -> 500，`error_code` 为 `MODEL_BINDING_ERROR`。
    *   其它未处理的 `Exception` -> 500。
5.  **基础端点**: `/` 与 `/health`。
6.  **启动服务**: 直接运行此文件会用 Uvicorn 启动开发服务器。
"""

import json
import logging
import time
from functools import partial
from typing import Awaitable, Callable, Dict

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.middleware.base import BaseHTTPMiddleware

from modelbinder.logging_config import setup_logging
from modelbinder.core.config import Settings, settings

setup_logging(settings.log_level, settings.log_dir)
logger = logging.getLogger("modelbinder.main")

from modelbinder.api.v1.api import api_router as api_v1_router
from modelbinder.core.exceptions import ModelBindingError, ModelBindingValidationError
from modelbinder.core.lifespan import lifespan

origins = [
    "http://localhost",
    "http://localhost:3000",
    "http://localhost:5173",
]


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = id(request)
        start_time = time.time()
        method = request.method
        path = request.url.path
        client = (
            f"{request.client.host}:{request.client.port}" if request.client else "Unknown"
        )

        logger.debug(f"→ 请求开始 [{request_id}] {method} {path} 客户端: {client}")
        logger.debug(f"→ 查询参数 [{request_id}]: {dict(request.query_params)}")
        logger.debug(
            f"→ Content-Type [{request_id}]: {request.headers.get('content-type', '<none>')}"
        )

        try:
            response = await call_next(request)
        except Exception as e:
            process_time = (time.time() - start_time) * 1000
            logger.error(
                f"! 请求处理异常 [{request_id}] {method} {path} - 耗时: {process_time:.2f}ms: {e}"
            )
            raise

        process_time = (time.time() - start_time) * 1000
        status_code = response.status_code
        log_msg = (
            f"← 响应完成 [{request_id}] {method} {path} - 状态码: {status_code} "
            f"- 耗时: {process_time:.2f}ms"
        )
        if status_code >= 500:
            logger.error(log_msg)
        elif status_code >= 400:
            logger.warning(log_msg)
        else:
            logger.debug(log_msg)
        return response


async def model_binding_validation_exception_handler(
    request: Request, exc: ModelBindingValidationError
) -> JSONResponse:
    """Request data could not be bound; returns the model state errors keyed by model name."""
    request_id = id(request)
    errors = exc.model_state.to_errors()
    logger.warning(f"模型绑定失败 [{request_id}] {request.method} {request.url.path}")
    logger.warning(
        f"模型绑定错误详情 [{request_id}]: {json.dumps(errors, indent=2, ensure_ascii=False)}"
    )
    return JSONResponse(
        status_code=422,
        content={
            "detail": "请求数据绑定失败，请检查您的输入。",
            "errors": errors,
            "request_id": str(request_id),
        },
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    request_id = id(request)
    errors = exc.errors()
    logger.warning(f"请求验证失败 [{request_id}] {request.method} {request.url.path}")
    try:
        logger.warning(f"验证错误详情 [{request_id}]: {json.dumps(errors, indent=2)}")
    except TypeError:
        logger.warning(f"验证错误详情 [{request_id}]: {errors}")
    return JSONResponse(
        status_code=422,
        content={
            "detail": "请求参数验证失败，请检查您的输入。",
            "errors": json.loads(json.dumps(errors, default=str)),
            "request_id": str(request_id),
        },
    )


async def model_binding_exception_handler(
    request: Request, exc: ModelBindingError
) -> JSONResponse:
    """Binder configuration problems and exceeded binding limits."""
    request_id = id(request)
    logger.error(
        f"模型绑定管道错误 [{request_id}] {request.method} {request.url.path}: {exc}"
    )
    return JSONResponse(
        status_code=500,
        content={
            "detail": "服务器无法绑定请求数据。",
            "error_code": "MODEL_BINDING_ERROR",
            "request_id": str(request_id),
        },
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    request_id = id(request)
    logger.exception(
        f"全局异常处理器捕获到未处理异常 [{request_id}] "
        f"请求: {request.method} {request.url.path}"
    )
    return JSONResponse(
        status_code=500,
        content={
            "detail": "服务器内部发生错误，请联系管理员或稍后重试。",
            "error_code": "INTERNAL_SERVER_ERROR",
            "request_id": str(request_id),
        },
    )


def create_app(app_settings: Settings) -> FastAPI:
    """
    创建 FastAPI 应用。

    测试通过传入不同的 `Settings` 得到独立的应用实例（例如更小的集合长度限制）。
    """
    application = FastAPI(
        title=f"{app_settings.project_name} API",
        description="Binds query strings, route values and form posts to typed Python models.",
        version="1.0.0",
        lifespan=partial(lifespan, settings=app_settings),
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_middleware(RequestLoggingMiddleware)

    application.add_exception_handler(
        ModelBindingValidationError, model_binding_validation_exception_handler
    )
    application.add_exception_handler(RequestValidationError, validation_exception_handler)
    application.add_exception_handler(ModelBindingError, model_binding_exception_handler)
    application.add_exception_handler(Exception, global_exception_handler)

    @application.get("/")
    async def read_root() -> Dict[str, str]:
        logger.debug("访问根端点 /")
        return {"message": f"Welcome to {app_settings.project_name} API"}

    @application.get("/health", status_code=200, tags=["Health"])
    async def health_check() -> Dict[str, str]:
        logger.debug("执行健康检查 /health")
        return {"status": "ok"}

    application.include_router(api_v1_router, prefix=app_settings.api_v1_str)
    return application


app = create_app(settings)


if __name__ == "__main__":
    logger.info(f"启动 Uvicorn 开发服务器 (环境: {settings.environment})")
    logger.info(f"访问地址: http://{settings.api_host}:{settings.api_port}")
    uvicorn.run(
        "modelbinder.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
        log_level=settings.log_level.lower(),
    )
