"""/v1/services - create, read, export and import services"""

import time
from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, Query, Request

from service_planner.api.dependencies import get_request_id, get_service, get_service_repository
from service_planner.api.v1.schemas import RateUpdateRequest, ServiceCreateRequest, ServiceResponse
from service_planner.config import settings
from service_planner.domain.models import ServiceRate
from service_planner.domain.money import Money
from service_planner.domain.service import Service
from service_planner.infrastructure.observability.logging import log_service_event
from service_planner.infrastructure.observability.metrics import service_event_counter
from service_planner.infrastructure.repositories import ServiceRepository

router = APIRouter()


@router.post("/services", response_model=ServiceResponse, status_code=201)
def create_service(
    request_body: ServiceCreateRequest,
    request: Request,
    repo: ServiceRepository = Depends(get_service_repository),
):
    """Create an active, private service with an empty capacity plan"""
    start_time = time.time()

    rate = ServiceRate(
        amount=Money.from_major(request_body.rate_amount, request_body.currency or settings.default_currency),
        unit=request_body.rate_unit,
    )
    service = Service.initialize(
        name=request_body.name,
        rate=rate,
        type=request_body.type,
        category=request_body.category or settings.default_category,
        description_text=request_body.description,
        sku=request_body.sku,
    )
    repo.add(service)

    service_event_counter.labels(event="created").inc()
    log_service_event(get_request_id(request), service.id, "service_created", (time.time() - start_time) * 1000)

    return ServiceResponse.from_service(service)


@router.get("/services", response_model=List[ServiceResponse])
def list_services(
    limit: int = Query(50, gt=0, le=500),
    repo: ServiceRepository = Depends(get_service_repository),
):
    return [ServiceResponse.from_service(s) for s in repo.list(limit=limit)]


@router.get("/services/{service_id}", response_model=ServiceResponse)
def get_service_detail(service: Service = Depends(get_service)):
    return ServiceResponse.from_service(service)


@router.put("/services/{service_id}/rate", response_model=ServiceResponse)
def update_rate(
    request_body: RateUpdateRequest,
    request: Request,
    service: Service = Depends(get_service),
):
    """Change the rate amount (and optionally its unit) in the current currency"""
    start_time = time.time()

    service.set_rate(
        ServiceRate(
            amount=Money.from_major(request_body.amount, service.rate.currency),
            unit=request_body.unit or service.rate.unit,
        )
    )

    service_event_counter.labels(event="rate_updated").inc()
    log_service_event(get_request_id(request), service.id, "rate_updated", (time.time() - start_time) * 1000)

    return ServiceResponse.from_service(service)


@router.delete("/services/{service_id}", status_code=204)
def delete_service(service_id: str, repo: ServiceRepository = Depends(get_service_repository)):
    repo.delete(service_id)
    service_event_counter.labels(event="deleted").inc()


@router.get("/services/{service_id}/export")
def export_service(service: Service = Depends(get_service)) -> Dict[str, Any]:
    """Plain-object snapshot of the service (see Service.to_dict)"""
    return service.to_dict()


@router.post("/services/import", response_model=ServiceResponse, status_code=201)
def import_service(
    request: Request,
    payload: Dict[str, Any] = Body(...),
    repo: ServiceRepository = Depends(get_service_repository),
):
    """Register a service rebuilt from an export payload; 409 if the id is already registered"""
    start_time = time.time()

    service = repo.add(Service.parse_from_json(payload))

    service_event_counter.labels(event="imported").inc()
    log_service_event(get_request_id(request), service.id, "service_imported", (time.time() - start_time) * 1000)

    return ServiceResponse.from_service(service)
