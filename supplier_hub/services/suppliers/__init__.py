from .supplier_service import SupplierService, validate_fields

__all__ = ["SupplierService", "validate_fields"]
