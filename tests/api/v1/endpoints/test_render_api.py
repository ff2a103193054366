# -*- coding: utf-8 -*-
"""
文件目的：测试 HTML 渲染端点 (`/api/v1/render/list`) 与 `render_item_list`。

绑定到的每一项都会被转义，外层标记由 `HtmlString` 原样输出。
"""

import httpx
import pytest

from modelbinder.api.v1.endpoints.render import render_item_list
from modelbinder.core.html import HtmlString

RENDER_URL = "/api/v1/render/list"


def test_render_item_list_escapes_items_only() -> None:
    fragment = render_item_list(["a<b", "Tom & Jerry"])

    assert isinstance(fragment, HtmlString)
    assert str(fragment) == "<ul><li>a&lt;b</li><li>Tom &amp; Jerry</li></ul>"


def test_render_empty_list() -> None:
    assert str(render_item_list([])) == "<ul></ul>"


@pytest.mark.asyncio
async def test_render_list_endpoint(client: httpx.AsyncClient) -> None:
    response = await client.get(
        RENDER_URL, params=[("items", "<script>"), ("items", "plain")]
    )

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert response.text == "<ul><li>&lt;script&gt;</li><li>plain</li></ul>"


@pytest.mark.asyncio
async def test_render_list_indexed_items(client: httpx.AsyncClient) -> None:
    response = await client.get(RENDER_URL, params={"items[0]": "x", "items[1]": "y"})

    assert response.status_code == 200
    assert response.text == "<ul><li>x</li><li>y</li></ul>"
