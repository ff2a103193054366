"""
模型元数据 (Model Metadata)

功能 (Function):
这个模块负责 "看懂" 一个需要绑定的 Python 类型，并把结论整理成 `ModelMetadata`：
1.  **类型分类**: 简单类型（可以从单个字符串转换，如 `int`、`date`、枚举）、数组（`Tuple[E, ...]`）、
    可变集合（`MutableSequence[E]`、`MutableSet[E]` 及其子类）、可枚举类型（`Iterable[E]`）以及复杂对象
    （pydantic 模型、dataclass）。
2.  **元素类型解析**: 在 `typing` 别名和类的 `__orig_bases__` 中查找参数化的集合基类，得到元素类型。
3.  **属性元数据**: 为 pydantic 模型和 dataclass 的每个字段生成属性级别的元数据。
4.  **缓存**: `ModelMetadataProvider` 对同一类型/属性/参数只创建一次元数据。

交互 (Interaction):
- 被导入 (Imported by):
    - `modelbinder.binding.*`: 各个 binder provider 根据元数据决定能否处理某个类型。
    - `modelbinder.services.binding_service`: 为顶层参数获取元数据。
"""

import collections.abc as cabc
import dataclasses
import datetime
import decimal
import enum
import logging
import types
import typing
import uuid
from functools import cached_property
from pathlib import PurePath
from typing import Any, Dict, Hashable, Literal, Optional, Tuple, TypeVar

from pydantic import BaseModel

logger = logging.getLogger(__name__)

MetadataKind = Literal["type", "property", "parameter"]

# 可以直接从单个字符串转换的类型
SIMPLE_TYPES: Tuple[type, ...] = (
    str,
    int,
    float,
    bool,
    bytes,
    decimal.Decimal,
    uuid.UUID,
    datetime.date,
    datetime.datetime,
    datetime.time,
    datetime.timedelta,
    PurePath,
)

# 对应 "ICollection<T>": 可以原地添加元素的集合
MUTABLE_COLLECTION_ABCS: Tuple[type, ...] = (cabc.MutableSequence, cabc.MutableSet)

_UNION_TYPES: Tuple[Any, ...] = (typing.Union, getattr(types, "UnionType", typing.Union))


def strip_annotated(tp: Any) -> Any:
    """Returns the inner type of `Annotated[T, ...]`, or `tp` unchanged."""
    while typing.get_origin(tp) is typing.Annotated:
        tp = typing.get_args(tp)[0]
    return tp


def unwrap_optional(tp: Any) -> Tuple[Any, bool]:
    """
    拆开 `Optional[T]` / `T | None`。

    Returns:
        Tuple[Any, bool]: (去掉 None 后的类型, 是否允许 None)。
    """
    tp = strip_annotated(tp)
    if typing.get_origin(tp) in _UNION_TYPES:
        args = typing.get_args(tp)
        non_none = tuple(arg for arg in args if arg is not type(None))
        if len(non_none) != len(args):
            if len(non_none) == 1:
                return strip_annotated(non_none[0]), True
            return typing.Union[non_none], True  # type: ignore[return-value]
    return tp, tp is None or tp is type(None)


def type_class(tp: Any) -> Optional[type]:
    """The runtime class behind `tp` (`list` for `List[int]`), if there is one."""
    origin = typing.get_origin(tp)
    if isinstance(origin, type):
        return origin
    if origin is None and isinstance(tp, type):
        return tp
    return None


def _safe_issubclass(cls: Any, target: type) -> bool:
    try:
        return isinstance(cls, type) and issubclass(cls, target)
    except TypeError:
        return False


def _single_closed_arg(alias: Any) -> Optional[Any]:
    args = typing.get_args(alias)
    if len(args) != 1 or isinstance(args[0], TypeVar) or args[0] is Ellipsis:
        return None
    return args[0]


def extract_element_type(tp: Any, target: type) -> Optional[Any]:
    """
    查找 `tp` 实现的、以 `target` 为基类的参数化集合接口，并返回其元素类型。

    `List[int]` 对 `MutableSequence` 返回 `int`；
    `class Bag(List[int])` 通过 `__orig_bases__` 同样返回 `int`；
    非泛型类型 (`list`, `str`) 或未闭合的类型变量返回 None。
    """
    origin = typing.get_origin(tp)
    if origin is not None:
        if _safe_issubclass(origin, target):
            return _single_closed_arg(tp)
        return None

    if not _safe_issubclass(tp, target):
        return None
    for klass in tp.__mro__:
        for base in klass.__dict__.get("__orig_bases__", ()):
            base_origin = typing.get_origin(base)
            if _safe_issubclass(base_origin, target):
                element = _single_closed_arg(base)
                if element is not None:
                    return element
    return None


def is_array_type(tp: Any) -> bool:
    """`Tuple[E, ...]` is the array shape; fixed-length tuples are not."""
    tp = strip_annotated(tp)
    if typing.get_origin(tp) is not tuple:
        return False
    args = typing.get_args(tp)
    return len(args) == 2 and args[1] is Ellipsis


def is_list_assignable(tp: Any) -> bool:
    """True when a plain `list` can stand in for `tp` (`Sequence[int]`, `Iterable[int]`, `List[int]`)."""
    cls = type_class(strip_annotated(tp))
    return cls is not None and cls is not object and _safe_issubclass(list, cls)


def is_set_assignable(tp: Any) -> bool:
    cls = type_class(strip_annotated(tp))
    return cls is not None and cls is not object and _safe_issubclass(set, cls)


def is_simple_type(tp: Any) -> bool:
    tp, _ = unwrap_optional(tp)
    origin = typing.get_origin(tp)
    if origin is Literal:
        return True
    if origin in _UNION_TYPES:
        return all(is_simple_type(arg) for arg in typing.get_args(tp))
    if origin is not None:
        return False
    return _safe_issubclass(tp, SIMPLE_TYPES) or _safe_issubclass(tp, enum.Enum)


def is_property_container(tp: Any) -> bool:
    """pydantic 模型和 dataclass 可以按属性绑定。"""
    return _safe_issubclass(tp, BaseModel) or (
        isinstance(tp, type) and dataclasses.is_dataclass(tp)
    )


class ModelMetadata:
    """
    Describes a type, a property of a container type, or an action parameter.

    Classification is computed lazily and cached on the instance; element and
    property metadata are resolved through the owning provider, so recursive
    types (a `Node` holding `List[Node]`) do not loop.
    """

    def __init__(
        self,
        provider: "ModelMetadataProvider",
        model_type: Any,
        kind: MetadataKind = "type",
        name: Optional[str] = None,
        container_type: Optional[type] = None,
        is_required: bool = False,
        is_binding_required: bool = False,
        binder_model_name: Optional[str] = None,
    ) -> None:
        self.provider = provider
        self.model_type = model_type
        self.metadata_kind = kind
        self.name = name
        self.container_type = container_type
        self.is_required = is_required
        self.is_binding_required = is_binding_required
        self.binder_model_name = binder_model_name
        self.underlying_type, self.is_nullable = unwrap_optional(model_type)

    def __repr__(self) -> str:
        return (
            f"ModelMetadata(kind={self.metadata_kind!r}, model_type={self.model_type!r}, "
            f"name={self.name!r})"
        )

    @property
    def identity(self) -> Hashable:
        return (
            self.metadata_kind,
            self.model_type,
            self.container_type,
            self.name,
            self.is_binding_required,
        )

    @property
    def display_name(self) -> str:
        if self.name:
            return self.name
        return getattr(self.underlying_type, "__name__", repr(self.underlying_type))

    @cached_property
    def is_simple_type(self) -> bool:
        return is_simple_type(self.underlying_type)

    @property
    def is_complex_type(self) -> bool:
        return not self.is_simple_type

    @cached_property
    def is_array(self) -> bool:
        return is_array_type(self.underlying_type)

    @cached_property
    def collection_element_type(self) -> Optional[Any]:
        for target in MUTABLE_COLLECTION_ABCS:
            element = extract_element_type(self.underlying_type, target)
            if element is not None:
                return element
        return None

    @property
    def is_collection_type(self) -> bool:
        return self.collection_element_type is not None

    @cached_property
    def enumerable_element_type(self) -> Optional[Any]:
        if self.is_simple_type:
            return None
        return extract_element_type(self.underlying_type, cabc.Iterable)

    @property
    def is_enumerable_type(self) -> bool:
        return self.is_array or self.enumerable_element_type is not None

    @cached_property
    def element_type(self) -> Optional[Any]:
        if self.is_array:
            return typing.get_args(strip_annotated(self.underlying_type))[0]
        if self.collection_element_type is not None:
            return self.collection_element_type
        return self.enumerable_element_type

    @cached_property
    def element_metadata(self) -> Optional["ModelMetadata"]:
        if self.element_type is None:
            return None
        return self.provider.get_metadata_for_type(self.element_type)

    @property
    def is_property_container(self) -> bool:
        return is_property_container(self.underlying_type)

    @cached_property
    def properties(self) -> Dict[str, "ModelMetadata"]:
        if not self.is_property_container:
            return {}
        return self.provider.get_properties_for_type(self.underlying_type)


class ModelMetadataProvider:
    """Creates and caches `ModelMetadata` for types, properties and parameters."""

    def __init__(self) -> None:
        self._cache: Dict[Hashable, ModelMetadata] = {}
        self._properties_cache: Dict[type, Dict[str, ModelMetadata]] = {}

    def _get_or_create(self, metadata: ModelMetadata) -> ModelMetadata:
        try:
            key = metadata.identity
            hash(key)
        except TypeError:
            # Annotated 中不可哈希的元数据，跳过缓存
            return metadata
        cached = self._cache.get(key)
        if cached is None:
            self._cache[key] = metadata
            cached = metadata
        return cached

    def get_metadata_for_type(self, model_type: Any) -> ModelMetadata:
        return self._get_or_create(ModelMetadata(self, model_type))

    def get_metadata_for_parameter(
        self,
        model_type: Any,
        name: str,
        is_binding_required: bool = False,
    ) -> ModelMetadata:
        return self._get_or_create(
            ModelMetadata(
                self,
                model_type,
                kind="parameter",
                name=name,
                is_required=is_binding_required,
                is_binding_required=is_binding_required,
            )
        )

    def get_metadata_for_property(self, container_type: type, name: str) -> ModelMetadata:
        properties = self.get_properties_for_type(container_type)
        if name not in properties:
            raise KeyError(f"'{container_type.__name__}' has no property '{name}'")
        return properties[name]

    def get_properties_for_type(self, container_type: type) -> Dict[str, ModelMetadata]:
        cached = self._properties_cache.get(container_type)
        if cached is not None:
            return cached

        properties: Dict[str, ModelMetadata] = {}
        if _safe_issubclass(container_type, BaseModel):
            for field_name, field in container_type.model_fields.items():
                properties[field_name] = ModelMetadata(
                    self,
                    field.annotation,
                    kind="property",
                    name=field_name,
                    container_type=container_type,
                    is_required=field.is_required(),
                    binder_model_name=field.alias,
                )
        elif dataclasses.is_dataclass(container_type):
            hints = typing.get_type_hints(container_type, include_extras=True)
            for dc_field in dataclasses.fields(container_type):
                if not dc_field.init:
                    continue
                required = (
                    dc_field.default is dataclasses.MISSING
                    and dc_field.default_factory is dataclasses.MISSING
                )
                properties[dc_field.name] = ModelMetadata(
                    self,
                    hints.get(dc_field.name, Any),
                    kind="property",
                    name=dc_field.name,
                    container_type=container_type,
                    is_required=required,
                )

        logger.debug(
            f"Resolved {len(properties)} bindable properties for {container_type!r}"
        )
        self._properties_cache[container_type] = properties
        return properties
