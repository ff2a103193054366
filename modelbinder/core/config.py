# modelbinder/core/config.py

"""
全局配置模块 (Global Configuration Module)

功能 (Function):
这个文件是 ModelBinder 服务的配置中心。它负责：
1. 定义所有配置项，例如 API 前缀、日志级别、日志目录，以及模型绑定的安全限制
   （集合最大长度、最大递归深度、最大错误数量）。
2. 使用 Pydantic Settings 库从环境变量和 `.env` 文件中加载配置值。
3. 对加载的配置进行类型检查和基本的验证。
4. 提供一个全局可访问的 `settings` 对象，供应用的其他模块导入和使用。

交互 (Interaction):
- 读取 (Reads): `.env` 文件 (如果存在) 和系统环境变量。
- 被导入 (Imported by):
    - `modelbinder.main`: 获取项目名称、API 前缀、日志级别等基本应用配置。
    - `modelbinder.core.lifespan`: 通过 `Settings.binding_options()` 构建 `ModelBindingOptions`。
    - `tests/*`: 测试代码直接实例化 `Settings`，并使用 `monkeypatch` 覆盖环境变量。
"""

import os
from typing import Literal, Optional

from loguru import logger
from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from modelbinder.models.binding import ModelBindingOptions

# --- 环境变量检查与路径计算 ---

IS_PYTEST = os.getenv("PYTEST_RUNNING") == "1"

# 项目根目录: modelbinder/core/ 向上两级
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
dotenv_path = os.path.join(project_root, ".env")

logger.debug(f"Calculated .env path for Pydantic Settings: {dotenv_path}")


class Settings(BaseSettings):
    """
    应用配置模型 (Application Settings Model)

    字段名与环境变量通过 `alias` 对应；模型绑定相关的字段最终由
    `binding_options()` 转换为 `ModelBindingOptions`。
    """

    model_config = SettingsConfigDict(
        env_file=dotenv_path if os.path.exists(dotenv_path) else None,
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # --- 常规配置 (General Settings) ---
    project_name: str = Field(default="ModelBinder", alias="PROJECT_NAME")
    api_v1_str: str = Field(default="/api/v1", alias="API_V1_STR")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", alias="LOG_LEVEL"
    )
    # 为 None 时只输出到控制台
    log_dir: Optional[str] = Field(default=None, alias="LOG_DIR")
    environment: str = Field(default="development", alias="ENVIRONMENT")

    # --- Uvicorn ---
    api_host: str = Field(default="0.0.0.0", alias="API_HOST")
    api_port: int = Field(default=8000, alias="API_PORT")
    api_reload: bool = Field(default=False, alias="API_RELOAD")

    # --- 模型绑定 (Model Binding) ---
    allow_validating_top_level_nodes: bool = Field(
        default=True, alias="ALLOW_VALIDATING_TOP_LEVEL_NODES"
    )
    max_model_binding_collection_size: int = Field(
        default=1024, alias="MAX_MODEL_BINDING_COLLECTION_SIZE"
    )
    max_model_binding_recursion_depth: int = Field(
        default=32, alias="MAX_MODEL_BINDING_RECURSION_DEPTH"
    )
    max_model_state_errors: int = Field(default=200, alias="MAX_MODEL_STATE_ERRORS")

    @field_validator("log_dir", mode="before")
    @classmethod
    def check_not_empty(
        cls, value: Optional[str], info: ValidationInfo
    ) -> Optional[str]:
        """
        环境变量被设置为空字符串 (e.g., LOG_DIR="") 时，将其视为未设置。
        """
        if value == "":
            logger.warning(
                f"Configuration field '{info.field_name}' was set to an empty string. "
                f"Treating as None (not set)."
            )
            return None
        return value

    @field_validator(
        "max_model_binding_collection_size",
        "max_model_binding_recursion_depth",
        "max_model_state_errors",
    )
    @classmethod
    def check_positive(cls, value: int, info: ValidationInfo) -> int:
        if value < 1:
            raise ValueError(f"{info.field_name} must be a positive integer, got {value}")
        return value

    def binding_options(self) -> ModelBindingOptions:
        """Builds the options object handed to binder providers."""
        return ModelBindingOptions(
            allow_validating_top_level_nodes=self.allow_validating_top_level_nodes,
            max_model_binding_collection_size=self.max_model_binding_collection_size,
            max_model_binding_recursion_depth=self.max_model_binding_recursion_depth,
            max_model_state_errors=self.max_model_state_errors,
        )


# --- 实例化配置对象 ---
# 配置无效时直接失败，不带着错误的限制值启动服务
try:
    settings = Settings()
    logger.info("Settings loaded successfully.")
    logger.debug(f"Project Name: {settings.project_name}")
    logger.debug(f"Environment: {settings.environment}")
    logger.debug(f"Log Level: {settings.log_level}")
    if IS_PYTEST:
        logger.info("Running in pytest environment.")
except Exception as e:
    logger.critical(f"Failed to load or validate settings: {e}")
    raise
