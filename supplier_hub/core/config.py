from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    应用配置
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    # 基础配置
    PROJECT_NAME: str = "AI Tools Supplier Hub"
    API_V1_STR: str = "/api/v1"

    # 数据库配置 (桌面端默认 SQLite)
    # 格式: sqlite+aiosqlite:///path/to/file.db
    DATABASE_URL: str = "sqlite+aiosqlite:///./supplier_hub.db"

    # 调试模式
    DEBUG: bool = False

    # 环境配置
    ENVIRONMENT: str = "development"  # development/production/test

    # 追踪
    TRACE_ID_HEADER: str = "X-Trace-Id"

    # 日志配置 (Loguru)
    LOG_LEVEL: str = "INFO"
    LOG_JSON_FORMAT: bool = False
    LOG_FILE_PATH: str = "logs/app.log"
    LOG_ROTATION: str = "50 MB"  # 日志文件大小轮转
    LOG_RETENTION: str = "10 days"  # 日志保留时间
    LOG_ASYNC: bool = True

    # CORS 配置（桌面壳通过本地 webview 访问）
    BACKEND_CORS_ORIGINS: list[str] = ["*"]

    # 健康探测
    HEALTH_PROBE_DEFAULT_TIMEOUT_MS: int = 30000  # 供应商未配置 timeout_ms 时使用
    HEALTH_PROBE_PATH: str = ""  # 追加到 base_url 后的探测路径
    # 非 2xx/3xx 但说明服务可达的状态码（路径不存在、方法不允许）
    HEALTH_PROBE_ALLOWED_STATUS: list[int] = [404, 405]
    HEALTH_HISTORY_LIMIT: int = 20  # 趋势分析使用的最近检查条数

    # 周期巡检（默认关闭，健康检查与故障转移按需触发）
    HEALTH_MONITOR_ENABLED: bool = False
    HEALTH_MONITOR_INTERVAL_SECONDS: float = 60.0


settings = Settings()
