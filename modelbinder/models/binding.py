"""
模型绑定相关 Pydantic 模型 (Model Binding Pydantic Models)

功能 (Function):
这个模块定义了模型绑定管道在各组件之间传递的数据结构：
1.  **ModelBindingOptions**: 绑定选项，相当于框架级的全局设置，由 binder provider 在创建 binder 时读取。
2.  **ModelBindingResult**: 单次绑定的结果，区分 "已设置模型" 和 "未设置模型"（`None` 也可能是合法的已设置值）。
3.  **ModelError / ModelStateEntry**: model state 中每个键对应的原始值、尝试值和错误信息。

交互 (Interaction):
- 被导入 (Imported by):
    - `modelbinder.core.config`: `Settings.binding_options()` 构建 `ModelBindingOptions`。
    - `modelbinder.binding.*`: binder、上下文和 model state 使用这些模型。
"""

from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

ModelValidationState = Literal["unvalidated", "valid", "invalid", "skipped"]


class ModelBindingOptions(BaseModel):
    """
    模型绑定选项。

    providers 在创建 binder 的那一刻读取这些值，之后修改选项不会影响已创建的 binder。
    """

    model_config = ConfigDict(validate_assignment=True)

    # 顶层集合在请求中没有数据时，是否检查 "binding required"
    allow_validating_top_level_nodes: bool = True
    # 隐式索引 (name[0], name[1], ...) 绑定的集合最大长度
    max_model_binding_collection_size: int = Field(default=1024, ge=1)
    # 嵌套绑定作用域的最大深度
    max_model_binding_recursion_depth: int = Field(default=32, ge=1)
    # ModelStateDictionary 最多记录的错误数量
    max_model_state_errors: int = Field(default=200, ge=1)


class ModelBindingResult(BaseModel):
    """Outcome of a single `bind_model` call."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    is_model_set: bool = False
    model: Any = None

    @classmethod
    def success(cls, model: Any) -> "ModelBindingResult":
        return cls(is_model_set=True, model=model)

    @classmethod
    def failed(cls) -> "ModelBindingResult":
        return cls(is_model_set=False, model=None)


class ModelError(BaseModel):
    """单条绑定错误。"""

    error_message: str
    exception_type: Optional[str] = None


class ModelStateEntry(BaseModel):
    """model state 中某个键 (如 `people[0].age`) 的状态。"""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    raw_value: Any = None
    attempted_value: Optional[str] = None
    errors: List[ModelError] = Field(default_factory=list)
    validation_state: ModelValidationState = "unvalidated"
