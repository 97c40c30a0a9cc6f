from .base import BaseRepository
from .config_history_repository import ConfigHistoryRepository
from .failover_config_repository import FailoverConfigRepository
from .supplier_repository import SupplierHealthCheckRepository, SupplierRepository

__all__ = [
    "BaseRepository",
    "ConfigHistoryRepository",
    "FailoverConfigRepository",
    "SupplierHealthCheckRepository",
    "SupplierRepository",
]
