"""
HTML 字符串包装 (HTML String Wrapper)

功能 (Function):
`HtmlString` 用于标记一段已经是 HTML 的文本。它只保存文本本身，读取时原样返回，
不做任何转义、规范化或校验。模板引擎（Jinja2、MarkupSafe）通过 `__html__` 协议识别它，
不会对其内容进行二次转义。

交互 (Interaction):
- 被导入 (Imported by):
    - `modelbinder.api.v1.endpoints.render`: 渲染端点返回 `HtmlString`，再由 `HTMLResponse` 输出。
"""

from typing import Any


class HtmlString:
    """An immutable holder for text that is already HTML."""

    __slots__ = ("_value",)

    def __init__(self, value: str) -> None:
        # object.__setattr__ 绕过下面的只读保护
        object.__setattr__(self, "_value", value)

    @property
    def value(self) -> str:
        return self._value

    def __str__(self) -> str:
        return self._value

    def __html__(self) -> str:
        return self._value

    def __repr__(self) -> str:
        return f"HtmlString({self._value!r})"

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, HtmlString):
            return self._value == other._value
        return NotImplemented

    def __hash__(self) -> int:
        return hash((HtmlString, self._value))

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")
