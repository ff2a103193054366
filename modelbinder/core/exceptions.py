"""
模型绑定异常 (Model Binding Exceptions)

这些异常表示绑定管道本身的配置或安全限制问题。
请求数据转换失败不会抛出异常，而是记录到 `ModelStateDictionary` 中。
`ModelBindingValidationError` 是唯一一个携带 model state 的异常，
由 `modelbinder.main` 中的异常处理器转换为 422 响应。
"""

from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from modelbinder.binding.model_state import ModelStateDictionary


class ModelBindingError(Exception):
    """Base class for errors raised by the model-binding pipeline."""


class BinderNotFoundError(ModelBindingError):
    """No registered provider can create a binder for the requested model type."""

    def __init__(self, model_type: Any) -> None:
        self.model_type = model_type
        super().__init__(
            f"Could not create a model binder for model object of type '{model_type}'."
        )


class CollectionSizeExceededError(ModelBindingError):
    """A collection grew beyond `max_model_binding_collection_size` while binding."""

    def __init__(self, model_name: str, model_type: Any, max_size: int) -> None:
        self.model_name = model_name
        self.model_type = model_type
        self.max_size = max_size
        super().__init__(
            f"Collection bound to '{model_name}' exceeded "
            f"max_model_binding_collection_size ({max_size}). Address issues in "
            f"'{model_type}' or raise the limit."
        )


class RecursionDepthExceededError(ModelBindingError):
    """Nested binding scopes went deeper than `max_model_binding_recursion_depth`."""

    def __init__(self, model_name: str, max_depth: int) -> None:
        self.model_name = model_name
        self.max_depth = max_depth
        super().__init__(
            f"Model binding system exceeded max_model_binding_recursion_depth "
            f"({max_depth}) while binding '{model_name}'."
        )


class ModelBindingValidationError(ModelBindingError):
    """Raised by the HTTP layer when bound request data left errors in model state."""

    def __init__(self, model_state: "ModelStateDictionary") -> None:
        self.model_state = model_state
        super().__init__(
            f"Model binding produced {model_state.error_count} error(s)."
        )
