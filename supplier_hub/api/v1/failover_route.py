from fastapi import APIRouter, Depends

from supplier_hub.deps import get_failover_config_service, get_switch_orchestrator
from supplier_hub.models.supplier import SupplierCategory
from supplier_hub.schemas import (
    ApiResponse,
    FailoverConfig,
    FailoverStatus,
    SupplierSwitchProgress,
    SupplierSwitchRequest,
    SupplierSwitchResult,
)
from supplier_hub.services.failover import FailoverConfigService, SwitchOrchestrator, switch_progress

router = APIRouter(prefix="/failover", tags=["Failover"])


def _switch_envelope(result: SupplierSwitchResult) -> ApiResponse[SupplierSwitchResult]:
    return ApiResponse(success=result.success, data=result, message=result.message)


@router.post("/switch", response_model=ApiResponse[SupplierSwitchResult])
async def switch_supplier(
    payload: SupplierSwitchRequest,
    orchestrator: SwitchOrchestrator = Depends(get_switch_orchestrator),
):
    return _switch_envelope(await orchestrator.switch(payload))


@router.get("/progress/{switch_id}", response_model=ApiResponse[SupplierSwitchProgress])
async def switch_progress_detail(switch_id: str):
    progress = switch_progress.get(switch_id)
    if progress is None:
        return ApiResponse.error("切换记录不存在")
    return ApiResponse.ok(progress)


@router.post("/{category}/auto", response_model=ApiResponse[SupplierSwitchResult])
async def auto_failover(
    category: SupplierCategory,
    orchestrator: SwitchOrchestrator = Depends(get_switch_orchestrator),
):
    return _switch_envelope(await orchestrator.auto_failover(category.value))


@router.get("/{category}/config", response_model=ApiResponse[FailoverConfig])
async def get_failover_config(
    category: SupplierCategory,
    svc: FailoverConfigService = Depends(get_failover_config_service),
):
    return ApiResponse.ok(await svc.get(category.value))


@router.put("/{category}/config", response_model=ApiResponse[FailoverConfig])
async def update_failover_config(
    category: SupplierCategory,
    payload: FailoverConfig,
    svc: FailoverConfigService = Depends(get_failover_config_service),
):
    return ApiResponse.ok(await svc.update(category.value, payload), message="故障转移配置已更新")


@router.get("/{category}/status", response_model=ApiResponse[FailoverStatus])
async def failover_status(
    category: SupplierCategory,
    orchestrator: SwitchOrchestrator = Depends(get_switch_orchestrator),
):
    return ApiResponse.ok(await orchestrator.status(category.value))
