"""AI 工具配置管理：供应商健康监测与自动故障转移后端"""

__version__ = "0.1.0"
