"""配置模型定义（Pydantic v2）。"""
from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class AppConfig(BaseModel):
    """应用级基础信息。"""

    name: str = "sf-graphdb"
    env: Literal["dev", "test", "prod"] = "dev"


class AuthConfig(BaseModel):
    """Basic Auth 凭据，两者均非空时才启用。"""

    username: str | None = None
    password: str | None = None


class TimeoutConfig(BaseModel):
    """请求超时配置（秒）。"""

    default: int = Field(default=30, ge=1)
    max: int = Field(default=120, ge=1)

    @model_validator(mode="after")
    def _check_bounds(self) -> "TimeoutConfig":
        if self.max < self.default:
            raise ValueError("timeout.max 必须 >= timeout.default")
        return self


class StoreConfig(BaseModel):
    """GraphDB（RDF4J/Sesame HTTP 协议）存储连接配置。"""

    model_config = ConfigDict(populate_by_name=True)

    endpoint: str = "http://localhost:7200"
    repository: str = "default"
    repositories_prefix: str = Field(default="/repositories/", alias="repositoriesPrefix")
    query_path: str = Field(default="", alias="queryPath")
    transactions_path: str = Field(default="/transactions", alias="transactionsPath")
    auth: AuthConfig = AuthConfig()
    timeout: TimeoutConfig = TimeoutConfig()
    save_format: str = Field(default="application/n-triples", alias="saveFormat")
    infer: bool = False


class SecurityConfig(BaseModel):
    """安全相关配置。"""

    trace_header: str = "X-Trace-Id"


class LoggingConfig(BaseModel):
    """日志输出配置。"""

    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class Settings(BaseModel):
    """全局配置快照。"""

    app: AppConfig = AppConfig()
    store: StoreConfig = StoreConfig()
    security: SecurityConfig = SecurityConfig()
    logging: LoggingConfig = LoggingConfig()
