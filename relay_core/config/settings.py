"""配置管理模块。

支持从环境变量、.env 以及 config.yaml 加载配置。
"""

import os
import warnings
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from relay_core.domain.exceptions import ConfigurationError


def _load_config_from_yaml() -> Dict[str, Any]:
    """从 config.yaml 加载配置（若存在）。"""
    candidates = []
    explicit = os.getenv("RELAY_CONFIG_FILE")
    if explicit:
        candidates.append(Path(explicit).expanduser())
    candidates.extend([
        Path.cwd() / "config.yaml",
        Path(__file__).resolve().parents[2] / "config.yaml",
    ])

    seen: set[Path] = set()
    for path in candidates:
        if not path or path in seen:
            continue
        seen.add(path)
        try:
            if path.exists():
                data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
                if isinstance(data, dict):
                    return data
                warnings.warn(f"Config file {path} is not a mapping, ignored")
        except (OSError, yaml.YAMLError) as exc:
            warnings.warn(f"Failed to read config file {path}: {exc}")
    return {}


class RelaySettings(BaseSettings):
    """配置设置（使用 Pydantic）。"""

    # ---- Telegram ----
    bot_token: Optional[str] = Field(default=None, description="Telegram Bot Token，形如 <id>:<secret>")
    wake_word: str = Field(default="akeno", description="自由文本触发补全的唤醒词（不区分大小写）")
    source_url: str = Field(
        default="",
        description="/source 命令回复的源码地址，为空时回复固定提示",
    )

    # ---- 补全网关 ----
    gateway_base_url: Optional[str] = Field(default=None, description="补全网关基础URL")
    model_id: str = Field(default="gpt-3.5-turbo", description="随每次请求发送的固定模型标识")
    http_timeout: Optional[float] = Field(
        default=120.0,
        ge=1.0,
        description="网关 HTTP 超时时间（秒），为空表示不设超时",
    )

    # ---- 对话 ----
    persona_prompt: Optional[str] = Field(
        default=None,
        description="覆盖默认人设提示词，可包含 [name] 占位符",
    )
    name_placeholder: str = Field(default="[name]", description="提示词中替换为用户名的占位符")
    placeholder_text: str = Field(default="💭", description="等待补全时先发出的占位回复")
    failure_text: str = Field(
        default="Sorry, something went wrong. Please try again later.",
        description="网关失败时占位回复被替换成的提示",
    )

    # ---- 日志 ----
    log_dir: str = Field(default="logs", description="日志目录")
    log_level: str = Field(default="INFO", description="日志级别")
    log_redact_content: bool = Field(default=False, description="是否脱敏日志内容")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        protected_namespaces=("settings_",),
    )

    @staticmethod
    def _config_source() -> Dict[str, Any]:
        return _load_config_from_yaml()

    @field_validator("gateway_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: Optional[str]) -> Optional[str]:
        return v.rstrip("/") if v else v

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            cls._config_source,
            file_secret_settings,
        )

    @property
    def bot_id(self) -> Optional[int]:
        """机器人自身的用户 ID，即 token 冒号前的数字部分。"""
        if not _looks_like_bot_token(self.bot_token):
            return None
        return int(self.bot_token.split(":", 1)[0])


def require_runtime_settings(cfg: "RelaySettings") -> "RelaySettings":
    """启动前校验必需配置，缺失或格式错误时抛出 ConfigurationError。"""
    missing = [name for name in ("bot_token", "gateway_base_url") if not getattr(cfg, name, None)]
    if missing:
        raise ConfigurationError(
            code="MISSING_CONFIG",
            message=f"Required settings not set: {', '.join(m.upper() for m in missing)}",
        )
    if not _looks_like_bot_token(cfg.bot_token):
        raise ConfigurationError(
            code="INVALID_BOT_TOKEN",
            message="BOT_TOKEN must look like '<numeric id>:<secret>'",
        )
    return cfg


def _looks_like_bot_token(token: Optional[str]) -> bool:
    if not token or ":" not in token:
        return False
    return token.split(":", 1)[0].isdigit()


settings = RelaySettings()

Settings = RelaySettings
