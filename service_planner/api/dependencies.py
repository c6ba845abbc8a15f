"""Dependency injection for FastAPI endpoints"""

from typing import Iterator

from fastapi import Depends, Request

from service_planner.domain.service import Service
from service_planner.infrastructure.repositories import ServiceRepository

_repository = ServiceRepository()


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_service_repository() -> ServiceRepository:
    """Provide the process-wide service registry"""
    return _repository


def get_service(service_id: str, repo: ServiceRepository = Depends(get_service_repository)) -> Iterator[Service]:
    """
    Resolve the path's service_id; ServiceNotFoundError becomes a 404.

    The service's lock is held until the request finishes, so requests
    against one service run one at a time.
    """
    service = repo.get(service_id)
    lock = repo.lock(service_id)
    lock.acquire()
    try:
        yield service
    finally:
        lock.release()
