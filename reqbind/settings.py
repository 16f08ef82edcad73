"""reqbind - 统一配置读取与校验.

目标:
- 将绑定流水线的尺寸上限、JSON 严格度、响应封套等开关集中到单一入口.
- `HandlerOptions.from_settings(...)` 只消费 Settings,不再直接读取环境变量.

说明:
- Settings 使用 `pydantic-settings` 的 `BaseSettings` 从环境变量与本地 `.env`(可选)读取配置.
- 所有环境变量统一使用 `REQBIND_` 前缀.
"""

from __future__ import annotations

from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from reqbind.constants import DEFAULT_MAX_BODY_SIZE, DEFAULT_MULTIPART_MEMORY

DOTENV_PATH = Path.cwd() / ".env"

APP_NAME = "reqbind"
APP_VERSION = "0.3.0"


class Settings(BaseSettings):
    """绑定流水线运行时设置集合."""

    model_config = SettingsConfigDict(
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
        str_strip_whitespace=True,
        # 允许测试/调用方直接以字段名构造
        populate_by_name=True,
    )

    app_name: str = Field(default=APP_NAME, validation_alias="REQBIND_APP_NAME")
    app_version: str = APP_VERSION

    # 请求体硬上限, 0 表示不限制
    max_body_size: int = Field(default=DEFAULT_MAX_BODY_SIZE, validation_alias="REQBIND_MAX_BODY_SIZE")
    # multipart 解析时的内存上限, 超出部分写入临时文件
    multipart_memory: int = Field(default=DEFAULT_MULTIPART_MEMORY, validation_alias="REQBIND_MULTIPART_MEMORY")

    json_disallow_unknown_fields: bool = Field(
        default=True,
        validation_alias="REQBIND_JSON_DISALLOW_UNKNOWN_FIELDS",
    )
    json_disallow_trailing_data: bool = Field(
        default=True,
        validation_alias="REQBIND_JSON_DISALLOW_TRAILING_DATA",
    )

    safe_mode: bool = Field(default=False, validation_alias="REQBIND_SAFE_MODE")
    envelope: bool = Field(default=True, validation_alias="REQBIND_ENVELOPE")
    no_vary_search: bool = Field(default=True, validation_alias="REQBIND_NO_VARY_SEARCH")
    enable_debug_log: bool = Field(default=False, validation_alias="REQBIND_ENABLE_DEBUG_LOG")

    @classmethod
    def load(cls) -> Settings:
        """从环境变量加载 Settings 并执行必要校验."""
        load_dotenv(dotenv_path=DOTENV_PATH if DOTENV_PATH.exists() else None, override=False)
        return cls()

    @model_validator(mode="after")
    def _validate(self) -> Settings:
        errors: list[str] = []
        if self.max_body_size < 0:
            errors.append("REQBIND_MAX_BODY_SIZE 不能为负数")
        if self.multipart_memory < 0:
            errors.append("REQBIND_MULTIPART_MEMORY 不能为负数")
        if errors:
            joined = "; ".join(errors)
            raise ValueError(f"配置校验失败: {joined}")
        return self


__all__ = ["APP_NAME", "APP_VERSION", "Settings"]
