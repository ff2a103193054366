# -*- coding: utf-8 -*-
"""
文件目的：测试 `modelbinder/binding/value_providers.py` 与 `model_names.py`。

- 多值字典提供者：大小写不敏感的键、前缀匹配规则 (`prefix`、`prefix.x`、`prefix[x]`)。
- 组合提供者：第一个有值的提供者获胜。
- `create_value_provider(request)`：表单 -> 路由参数 -> 查询字符串的顺序。
"""

from typing import Any, Dict
from unittest.mock import AsyncMock, MagicMock

import pytest
from starlette.datastructures import FormData, QueryParams
from starlette.requests import Request

from modelbinder.binding.model_names import (
    create_index_model_name,
    create_property_model_name,
)
from modelbinder.binding.value_providers import (
    NONE_RESULT,
    CompositeValueProvider,
    ElementalValueProvider,
    FormValueProvider,
    QueryStringValueProvider,
    RouteValueProvider,
    ValueProviderResult,
    create_value_provider,
    has_form_content_type,
)


# --- model names ---


def test_create_index_model_name() -> None:
    assert create_index_model_name("people", 0) == "people[0]"
    assert create_index_model_name("", 3) == "[3]"
    assert create_index_model_name("ids", "a") == "ids[a]"


def test_create_property_model_name() -> None:
    assert create_property_model_name("people[0]", "name") == "people[0].name"
    assert create_property_model_name("", "name") == "name"
    assert create_property_model_name("people", "") == "people"
    assert create_property_model_name("people", "[0]") == "people[0]"


# --- ValueProviderResult ---


def test_value_provider_result() -> None:
    result = ValueProviderResult(["a", "b"])

    assert result.length == 2
    assert result.first_value == "a"
    assert list(result) == ["a", "b"]
    assert str(result) == "a,b"
    assert result == ValueProviderResult(("a", "b"))
    assert ValueProviderResult("x").values == ("x",)


def test_none_result_is_empty() -> None:
    assert NONE_RESULT.length == 0
    assert NONE_RESULT.first_value is None
    assert not NONE_RESULT
    assert str(NONE_RESULT) == ""


# --- MultiDictValueProvider ---


def test_query_params_multi_values() -> None:
    provider = QueryStringValueProvider(QueryParams("ids=1&ids=2&name=x"))

    assert provider.get_value("ids").values == ("1", "2")
    assert provider.get_value("IDS").values == ("1", "2")
    assert provider.get_value("missing") is NONE_RESULT


@pytest.mark.parametrize(
    "prefix, expected",
    [
        ("people", True),
        ("PEOPLE", True),
        ("people[0]", True),
        ("people[0].name", True),
        ("people[1]", False),
        ("peo", False),
        ("person", False),
        ("", True),
    ],
)
def test_contains_prefix(prefix: str, expected: bool) -> None:
    provider = FormValueProvider({"people[0].name": "Ann", "people[0].age": "3"})
    assert provider.contains_prefix(prefix) is expected


def test_empty_provider_contains_no_prefix() -> None:
    assert QueryStringValueProvider({}).contains_prefix("") is False


def test_mapping_source_with_lists_and_numbers() -> None:
    provider = RouteValueProvider({"ids": ["1", "2"], "id": 7, "skip": None})

    assert provider.get_value("ids").values == ("1", "2")
    assert provider.get_value("id").values == ("7",)
    assert provider.get_value("skip") is NONE_RESULT


def test_non_text_form_values_are_ignored() -> None:
    upload = MagicMock(name="UploadFile")
    provider = FormValueProvider(FormData([("file", upload), ("name", "doc")]))

    assert provider.get_value("file") is NONE_RESULT
    assert provider.get_value("name").values == ("doc",)


# --- Elemental / Composite ---


def test_elemental_value_provider() -> None:
    provider = ElementalValueProvider("ids", "5")

    assert provider.contains_prefix("ids")
    assert not provider.contains_prefix("other")
    assert provider.get_value("IDS").values == ("5",)
    assert provider.get_value("ids[0]") is NONE_RESULT


def test_composite_first_provider_with_value_wins() -> None:
    composite = CompositeValueProvider(
        [
            QueryStringValueProvider({"a": "from-first"}),
            QueryStringValueProvider({"a": "from-second", "b": "only-second"}),
        ]
    )

    assert composite.get_value("a").values == ("from-first",)
    assert composite.get_value("b").values == ("only-second",)
    assert composite.get_value("c") is NONE_RESULT
    assert composite.contains_prefix("b")
    assert len(composite) == 2


def test_composite_insert_and_append() -> None:
    composite = CompositeValueProvider()
    composite.append(QueryStringValueProvider({"a": "appended"}))
    composite.insert(0, ElementalValueProvider("a", "inserted"))

    assert composite.get_value("a").values == ("inserted",)


# --- create_value_provider ---


def _make_request(
    query_string: bytes = b"",
    path_params: Dict[str, Any] = None,
    content_type: str = None,
) -> Request:
    headers = []
    if content_type:
        headers.append((b"content-type", content_type.encode("latin-1")))
    scope = {
        "type": "http",
        "method": "POST" if content_type else "GET",
        "path": "/test",
        "query_string": query_string,
        "headers": headers,
        "path_params": path_params or {},
    }
    return Request(scope)


def test_has_form_content_type() -> None:
    assert has_form_content_type(
        _make_request(content_type="application/x-www-form-urlencoded; charset=utf-8")
    )
    assert has_form_content_type(_make_request(content_type="multipart/form-data; boundary=x"))
    assert not has_form_content_type(_make_request(content_type="application/json"))
    assert not has_form_content_type(_make_request())


@pytest.mark.asyncio
async def test_create_value_provider_without_form() -> None:
    request = _make_request(query_string=b"ids=1&ids=2", path_params={"id": "9"})

    provider = await create_value_provider(request)

    assert [type(p) for p in provider] == [RouteValueProvider, QueryStringValueProvider]
    assert provider.get_value("ids").values == ("1", "2")
    assert provider.get_value("id").values == ("9",)


@pytest.mark.asyncio
async def test_create_value_provider_form_takes_precedence() -> None:
    request = _make_request(
        query_string=b"name=from-query",
        content_type="application/x-www-form-urlencoded",
    )
    request.form = AsyncMock(return_value=FormData([("name", "from-form")]))  # type: ignore[method-assign]

    provider = await create_value_provider(request)

    assert [type(p) for p in provider] == [
        FormValueProvider,
        RouteValueProvider,
        QueryStringValueProvider,
    ]
    assert provider.get_value("name").values == ("from-form",)
