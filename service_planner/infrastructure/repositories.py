"""In-process registry of services (no persistence; state lives for the process lifetime)"""

import threading
from typing import Dict, List

from service_planner.domain.exceptions import DuplicateServiceError, ServiceNotFoundError
from service_planner.domain.service import Service


class ServiceRepository:
    """
    Repository for services, keyed by service id.

    Services are not thread-safe. Each one gets a lock that request
    handlers hold for the whole request, so sync routes running in the
    threadpool never mutate or read the same service concurrently.
    """

    def __init__(self):
        self._services: Dict[str, Service] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def add(self, service: Service) -> Service:
        with self._registry_lock:
            if service.id in self._services:
                raise DuplicateServiceError(f"Service {service.id} already exists")
            self._services[service.id] = service
            self._locks[service.id] = threading.Lock()
        return service

    def get(self, service_id: str) -> Service:
        """Fetch a service or raise ServiceNotFoundError"""
        service = self._services.get(service_id)
        if service is None:
            raise ServiceNotFoundError(f"Service {service_id} not found")
        return service

    def lock(self, service_id: str) -> threading.Lock:
        """Lock guarding one service's state"""
        lock = self._locks.get(service_id)
        if lock is None:
            raise ServiceNotFoundError(f"Service {service_id} not found")
        return lock

    def list(self, limit: int = 50) -> List[Service]:
        """Most recently updated first"""
        services = sorted(self._services.values(), key=lambda s: s.last_update, reverse=True)
        return services[:limit]

    def delete(self, service_id: str) -> None:
        with self._registry_lock:
            self.get(service_id)
            del self._services[service_id]
            del self._locks[service_id]
