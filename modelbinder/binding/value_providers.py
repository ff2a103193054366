"""
值提供者 (Value Providers)

功能 (Function):
值提供者是 binder 读取原始请求数据的唯一入口。每个提供者回答两个问题：
1.  `contains_prefix(prefix)`: 请求中是否存在以 `prefix` 开头的键（`prefix`、`prefix.x`、`prefix[x]`）。
2.  `get_value(key)`: 键对应的全部原始字符串值，封装为 `ValueProviderResult`。

提供的实现:
- `MultiDictValueProvider`: 基于 Starlette 的 `MultiDict`/`FormData` 或普通映射，键不区分大小写。
  `QueryStringValueProvider`、`FormValueProvider`、`RouteValueProvider` 是它的具名子类。
- `ElementalValueProvider`: 单个键、单个值；集合 binder 用它逐个绑定 `?ids=1&ids=2` 中的元素。
- `CompositeValueProvider`: 按顺序组合多个提供者，第一个有值的提供者获胜。

交互 (Interaction):
- 被导入 (Imported by):
    - `modelbinder.binding.*`: binder 通过 `ModelBindingContext.value_provider` 访问。
    - `modelbinder.api.v1.dependencies`: `create_value_provider(request)` 为每个请求创建组合提供者。
"""

import logging
from abc import ABC, abstractmethod
from typing import (
    Any,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Union,
)

from starlette.requests import Request

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


class ValueProviderResult:
    """Raw string values found under one key, in request order."""

    __slots__ = ("values",)

    def __init__(self, values: Union[str, Sequence[str], None] = None) -> None:
        if values is None:
            self.values: Tuple[str, ...] = ()
        elif isinstance(values, str):
            self.values = (values,)
        else:
            self.values = tuple(values)

    @property
    def first_value(self) -> Optional[str]:
        return self.values[0] if self.values else None

    @property
    def length(self) -> int:
        return len(self.values)

    def __len__(self) -> int:
        return len(self.values)

    def __iter__(self) -> Iterator[str]:
        return iter(self.values)

    def __bool__(self) -> bool:
        return bool(self.values)

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, ValueProviderResult):
            return self.values == other.values
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.values)

    def __str__(self) -> str:
        return ",".join(self.values)

    def __repr__(self) -> str:
        return f"ValueProviderResult({list(self.values)!r})"


# 表示 "没有找到值" 的共享实例
NONE_RESULT = ValueProviderResult()


def _prefix_matches(key: str, prefix: str) -> bool:
    if not prefix:
        return True
    if not key.startswith(prefix):
        return False
    if len(key) == len(prefix):
        return True
    return key[len(prefix)] in ".["


class ValueProvider(ABC):
    """Read-only access to request data by model name."""

    @abstractmethod
    def contains_prefix(self, prefix: str) -> bool:
        ...

    @abstractmethod
    def get_value(self, key: str) -> ValueProviderResult:
        ...


class MultiDictValueProvider(ValueProvider):
    """
    基于多值字典的提供者。

    `source` 可以是 Starlette 的 `QueryParams`/`FormData`（提供 `multi_items()`），
    也可以是普通映射，其值为字符串或字符串序列。非字符串的值（如上传文件）会被忽略。
    """

    source_name = "multidict"

    def __init__(self, source: Union[Mapping[str, Any], Iterable[Tuple[str, Any]], None]) -> None:
        self._values: Dict[str, List[str]] = {}
        for key, value in self._iter_items(source):
            if value is None:
                continue
            if not isinstance(value, str):
                if isinstance(value, (int, float)):
                    value = str(value)
                else:
                    logger.debug(
                        f"Skipping non-text value for key '{key}' in {self.source_name} values"
                    )
                    continue
            self._values.setdefault(key.lower(), []).append(value)

    @staticmethod
    def _iter_items(source: Any) -> Iterator[Tuple[str, Any]]:
        if source is None:
            return
        if hasattr(source, "multi_items"):
            yield from source.multi_items()
            return
        items = source.items() if isinstance(source, Mapping) else source
        for key, value in items:
            if isinstance(value, (list, tuple)):
                for item in value:
                    yield key, item
            else:
                yield key, value

    def contains_prefix(self, prefix: str) -> bool:
        if not self._values:
            return False
        prefix = prefix.lower()
        return any(_prefix_matches(key, prefix) for key in self._values)

    def get_value(self, key: str) -> ValueProviderResult:
        values = self._values.get(key.lower())
        if not values:
            return NONE_RESULT
        return ValueProviderResult(values)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(keys={sorted(self._values)!r})"


class QueryStringValueProvider(MultiDictValueProvider):
    source_name = "query string"


class FormValueProvider(MultiDictValueProvider):
    source_name = "form"


class RouteValueProvider(MultiDictValueProvider):
    source_name = "route"


class ElementalValueProvider(ValueProvider):
    """Exposes exactly one value under one key."""

    def __init__(self, key: str, value: str) -> None:
        self.key = key
        self.value = value

    def contains_prefix(self, prefix: str) -> bool:
        return _prefix_matches(self.key.lower(), prefix.lower())

    def get_value(self, key: str) -> ValueProviderResult:
        if key.lower() == self.key.lower():
            return ValueProviderResult(self.value)
        return NONE_RESULT


class CompositeValueProvider(ValueProvider):
    """Queries providers in order; the first one holding a value wins."""

    def __init__(self, providers: Optional[Iterable[ValueProvider]] = None) -> None:
        self.providers: List[ValueProvider] = list(providers or [])

    def append(self, provider: ValueProvider) -> None:
        self.providers.append(provider)

    def insert(self, index: int, provider: ValueProvider) -> None:
        self.providers.insert(index, provider)

    def __len__(self) -> int:
        return len(self.providers)

    def __iter__(self) -> Iterator[ValueProvider]:
        return iter(self.providers)

    def contains_prefix(self, prefix: str) -> bool:
        return any(provider.contains_prefix(prefix) for provider in self.providers)

    def get_value(self, key: str) -> ValueProviderResult:
        for provider in self.providers:
            result = provider.get_value(key)
            if result.length > 0:
                return result
        return NONE_RESULT


def has_form_content_type(request: Request) -> bool:
    content_type = request.headers.get("content-type", "")
    return content_type.split(";")[0].strip().lower() in FORM_CONTENT_TYPES


async def create_value_provider(request: Request) -> CompositeValueProvider:
    """
    为请求创建组合值提供者。顺序: 表单 -> 路由参数 -> 查询字符串。
    """
    composite = CompositeValueProvider()
    if has_form_content_type(request):
        form = await request.form()
        composite.append(FormValueProvider(form))
    composite.append(RouteValueProvider(request.path_params))
    composite.append(QueryStringValueProvider(request.query_params))
    logger.debug(
        f"Created value providers for {request.method} {request.url.path}: "
        f"{[type(p).__name__ for p in composite]}"
    )
    return composite
