from __future__ import annotations


class SupplierHubError(Exception):
    """业务异常基类，在路由边界转换为失败信封"""

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.message = message
        self.errors = errors or []


class NotFoundError(SupplierHubError):
    pass


class SupplierValidationError(SupplierHubError):
    pass


class StoreError(SupplierHubError):
    pass


__all__ = ["NotFoundError", "StoreError", "SupplierHubError", "SupplierValidationError"]
