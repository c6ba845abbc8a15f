"""/v1/services/{service_id}/cos - cost of service breakdown"""

from typing import List

from fastapi import APIRouter, Depends

from service_planner.api.v1.schemas import CostItemRequest, CostItemSchema
from service_planner.api.dependencies import get_service
from service_planner.domain.money import Money
from service_planner.domain.service import Service
from service_planner.infrastructure.observability.metrics import service_event_counter

router = APIRouter()


@router.get("/services/{service_id}/cos", response_model=List[CostItemSchema])
def list_cost_items(service: Service = Depends(get_service)):
    return [CostItemSchema.from_item(i) for i in service.cost_items]


@router.post("/services/{service_id}/cos", response_model=CostItemSchema, status_code=201)
def add_cost_item(request_body: CostItemRequest, service: Service = Depends(get_service)):
    """Add a per-unit cost line priced in the service rate currency"""
    item = service.add_cost(
        name=request_body.name,
        unit_cost=Money.from_major(request_body.unit_cost, service.rate.currency),
        quantity=request_body.quantity,
        unit=request_body.unit,
    )
    service_event_counter.labels(event="cost_added").inc()
    return CostItemSchema.from_item(item)


@router.delete("/services/{service_id}/cos/{item_id}", status_code=204)
def remove_cost_item(item_id: str, service: Service = Depends(get_service)):
    service.remove_cost(item_id)
    service_event_counter.labels(event="cost_removed").inc()


@router.delete("/services/{service_id}/cos", status_code=204)
def clear_cost_items(service: Service = Depends(get_service)):
    service.clear_cost_breakdown()
    service_event_counter.labels(event="cost_cleared").inc()
