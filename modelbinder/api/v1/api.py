# -*- coding: utf-8 -*-
"""
API 版本 v1 的主路由器聚合文件

`api_router` 聚合 `endpoints` 子目录下的子路由器，并由 `modelbinder/main.py` 以 `settings.api_v1_str`
(默认 `/api/v1`) 为前缀挂载。例如 `collections_endpoints.router` 设置了 `prefix="/collections"`，
其中的 `/summary` 最终对应 `/api/v1/collections/summary`。
"""

from fastapi import APIRouter

from modelbinder.api.v1.endpoints import (
    collections as collections_endpoints,
)
from modelbinder.api.v1.endpoints import (
    render as render_endpoints,
)

api_router = APIRouter()

api_router.include_router(
    collections_endpoints.router, prefix="/collections", tags=["Collections"]
)
api_router.include_router(render_endpoints.router, prefix="/render", tags=["Render"])
