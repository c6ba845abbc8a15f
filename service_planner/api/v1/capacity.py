"""/v1/services/{service_id}/capacity - monthly capacity plan"""

import time

from fastapi import APIRouter, Depends, Request

from service_planner.api.dependencies import get_request_id, get_service
from service_planner.api.v1.schemas import (
    CapacityEntrySchema,
    CapacityPlanResponse,
    CapacityUpdateRequest,
    GeneratePlanRequest,
    NormalizeRequest,
    RecomputePeriodRequest,
)
from service_planner.config import settings
from service_planner.domain.exceptions import InvalidArgumentError
from service_planner.domain.service import Service
from service_planner.infrastructure.observability.logging import log_service_event
from service_planner.infrastructure.observability.metrics import record_capacity_change

router = APIRouter()


@router.get("/services/{service_id}/capacity", response_model=CapacityPlanResponse)
def get_capacity_plan(service: Service = Depends(get_service)):
    return CapacityPlanResponse.from_service(service)


@router.post("/services/{service_id}/capacity/generate", response_model=CapacityPlanResponse)
def generate_capacity_plan(
    request_body: GeneratePlanRequest,
    request: Request,
    service: Service = Depends(get_service),
):
    """
    Replace the plan with consecutive months of compounding capacity.

    Month i gets round(amount * (1 + growth_rate) ** i).
    """
    start_time = time.time()

    service.generate_capacity_plan(
        months=request_body.months or settings.default_capacity_months,
        amount=request_body.amount,
        growth_rate=request_body.growth_rate,
        start=request_body.start,
    )

    record_capacity_change("generate", len(service.capacity))
    log_service_event(
        get_request_id(request),
        service.id,
        "capacity_generated",
        (time.time() - start_time) * 1000,
        {"total_capacity": service.total_capacity},
    )
    return CapacityPlanResponse.from_service(service)


@router.post("/services/{service_id}/capacity/recompute", response_model=CapacityPlanResponse)
def recompute_capacity_period(
    request_body: RecomputePeriodRequest,
    request: Request,
    service: Service = Depends(get_service),
):
    """
    Move the plan onto [start, end].

    Modes:
    - default: re-date old months by position, repeating the last one
    - distribute: spread the old total evenly, sum preserved exactly
    """
    start_time = time.time()

    service.recompute_capacity_period(request_body.start, request_body.end, request_body.mode)

    record_capacity_change("recompute", len(service.capacity), mode=request_body.mode.value)
    log_service_event(
        get_request_id(request),
        service.id,
        "capacity_recomputed",
        (time.time() - start_time) * 1000,
        {"mode": request_body.mode.value, "total_capacity": service.total_capacity},
    )
    return CapacityPlanResponse.from_service(service)


@router.post("/services/{service_id}/capacity/normalize", response_model=CapacityPlanResponse)
def normalize_capacity(request_body: NormalizeRequest, service: Service = Depends(get_service)):
    service.normalize_capacity_units(request_body.amount)
    record_capacity_change("normalize", len(service.capacity))
    return CapacityPlanResponse.from_service(service)


@router.post("/services/{service_id}/capacity", response_model=CapacityPlanResponse, status_code=201)
def add_capacity_month(request_body: CapacityEntrySchema, service: Service = Depends(get_service)):
    """Add a month; 409 if it is already planned"""
    service.add_capacity(request_body.month, request_body.capacity, request_body.adjustment)
    record_capacity_change("add", len(service.capacity))
    return CapacityPlanResponse.from_service(service)


@router.patch("/services/{service_id}/capacity/{month}", response_model=CapacityPlanResponse)
def update_capacity_month(
    month: str,
    request_body: CapacityUpdateRequest,
    service: Service = Depends(get_service),
):
    """Update units and/or adjustment of a planned month"""
    fields = request_body.model_fields_set
    if "capacity" in fields and request_body.capacity is None:
        raise InvalidArgumentError("Capacity cannot be null")
    if "capacity" in fields:
        service.update_capacity_units(month, request_body.capacity)
    if "adjustment" in fields:
        service.update_capacity_adjustment(month, request_body.adjustment)

    record_capacity_change("update", len(service.capacity))
    return CapacityPlanResponse.from_service(service)


@router.delete("/services/{service_id}/capacity/{month}", response_model=CapacityPlanResponse)
def remove_capacity_month(month: str, service: Service = Depends(get_service)):
    service.remove_capacity(month)
    record_capacity_change("remove", len(service.capacity))
    return CapacityPlanResponse.from_service(service)


@router.delete("/services/{service_id}/capacity", response_model=CapacityPlanResponse)
def clear_capacity(service: Service = Depends(get_service)):
    service.clear_capacity()
    record_capacity_change("clear", 0)
    return CapacityPlanResponse.from_service(service)
