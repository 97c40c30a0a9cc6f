from .errors import NotFoundError, StoreError, SupplierHubError, SupplierValidationError

__all__ = ["NotFoundError", "StoreError", "SupplierHubError", "SupplierValidationError"]
