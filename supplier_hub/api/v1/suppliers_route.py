"""
供应商管理 + 健康检查路由

静态路径（stats/export/validate/import/health）需注册在 /{supplier_id} 之前。
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query

from supplier_hub.deps import get_health_aggregator, get_supplier_service
from supplier_hub.models.supplier import SupplierCategory
from supplier_hub.schemas import (
    ActivateSupplierRequest,
    ApiResponse,
    ConnectionTestResult,
    PerformanceAnalysis,
    SupplierCreate,
    SupplierExport,
    SupplierHealth,
    SupplierResponse,
    SupplierStats,
    SupplierUpdate,
)
from supplier_hub.services.health import HealthAggregator
from supplier_hub.services.suppliers import SupplierService

router = APIRouter(prefix="/suppliers", tags=["Suppliers"])


@router.get("", response_model=ApiResponse[list[SupplierResponse]])
async def list_suppliers(
    category: SupplierCategory | None = Query(None),
    svc: SupplierService = Depends(get_supplier_service),
):
    suppliers = await svc.list_suppliers(category.value if category else None)
    return ApiResponse.ok([SupplierResponse.model_validate(s) for s in suppliers])


@router.post("", response_model=ApiResponse[SupplierResponse])
async def create_supplier(
    payload: SupplierCreate,
    svc: SupplierService = Depends(get_supplier_service),
):
    supplier = await svc.create_supplier(payload)
    return ApiResponse.ok(SupplierResponse.model_validate(supplier), message="供应商已创建")


@router.get("/stats", response_model=ApiResponse[SupplierStats])
async def supplier_stats(svc: SupplierService = Depends(get_supplier_service)):
    return ApiResponse.ok(await svc.get_stats())


@router.get("/export", response_model=ApiResponse[list[SupplierExport]])
async def export_suppliers(svc: SupplierService = Depends(get_supplier_service)):
    return ApiResponse.ok(await svc.export_suppliers())


@router.post("/validate", response_model=ApiResponse[bool])
async def validate_supplier(
    payload: SupplierCreate,
    svc: SupplierService = Depends(get_supplier_service),
):
    errors = await svc.validate_supplier(payload)
    if errors:
        return ApiResponse.error("; ".join(errors), data=False)
    return ApiResponse.ok(True)


@router.post("/import", response_model=ApiResponse[list[SupplierResponse]])
async def import_suppliers(
    payload: list[SupplierCreate],
    svc: SupplierService = Depends(get_supplier_service),
):
    created = await svc.import_suppliers(payload)
    return ApiResponse.ok(
        [SupplierResponse.model_validate(s) for s in created],
        message=f"已导入 {len(created)} 个供应商",
    )


@router.post("/health", response_model=ApiResponse[list[SupplierHealth]])
async def check_all_health(
    category: SupplierCategory | None = Query(None),
    aggregator: HealthAggregator = Depends(get_health_aggregator),
):
    return ApiResponse.ok(await aggregator.assess_all(category.value if category else None))


@router.get("/{supplier_id}", response_model=ApiResponse[SupplierResponse])
async def get_supplier(
    supplier_id: UUID,
    svc: SupplierService = Depends(get_supplier_service),
):
    supplier = await svc.get_supplier(supplier_id)
    return ApiResponse.ok(SupplierResponse.model_validate(supplier))


@router.patch("/{supplier_id}", response_model=ApiResponse[SupplierResponse])
async def update_supplier(
    supplier_id: UUID,
    payload: SupplierUpdate,
    svc: SupplierService = Depends(get_supplier_service),
):
    supplier = await svc.update_supplier(supplier_id, payload)
    return ApiResponse.ok(SupplierResponse.model_validate(supplier), message="供应商已更新")


@router.delete("/{supplier_id}", response_model=ApiResponse[bool])
async def delete_supplier(
    supplier_id: UUID,
    svc: SupplierService = Depends(get_supplier_service),
):
    return ApiResponse.ok(await svc.delete_supplier(supplier_id))


@router.post("/{supplier_id}/activate", response_model=ApiResponse[bool])
async def activate_supplier(
    supplier_id: UUID,
    payload: ActivateSupplierRequest | None = None,
    svc: SupplierService = Depends(get_supplier_service),
):
    is_active = payload.is_active if payload else True
    return ApiResponse.ok(await svc.set_active(supplier_id, is_active))


@router.post("/{supplier_id}/test", response_model=ApiResponse[ConnectionTestResult])
async def test_connection(
    supplier_id: UUID,
    svc: SupplierService = Depends(get_supplier_service),
):
    result = await svc.test_connection(supplier_id)
    return ApiResponse(success=result.success, data=result, message=result.error)


@router.post("/{supplier_id}/health", response_model=ApiResponse[SupplierHealth])
async def check_health(
    supplier_id: UUID,
    aggregator: HealthAggregator = Depends(get_health_aggregator),
):
    return ApiResponse.ok(await aggregator.assess_by_id(supplier_id))


@router.get("/{supplier_id}/trend", response_model=ApiResponse[PerformanceAnalysis])
async def performance_trend(
    supplier_id: UUID,
    aggregator: HealthAggregator = Depends(get_health_aggregator),
):
    analysis = await aggregator.trend(supplier_id)
    if analysis is None:
        return ApiResponse.ok(None, message="健康检查记录不足，暂无法分析")
    return ApiResponse.ok(analysis)
