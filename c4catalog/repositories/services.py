from __future__ import annotations

from typing import List

from c4catalog.domain.entities import ServiceModel
from c4catalog.domain.enums import ServiceLifecycle, ServiceType
from c4catalog.domain.specifications import FieldEquals, FieldEqualsIgnoreCase
from c4catalog.repositories.base import JsonRepository


class ServiceRepository(JsonRepository[ServiceModel]):
    collection = "services"
    model = ServiceModel
    label = "Service"

    def find_by_owner(self, owner: str) -> List[ServiceModel]:
        if not owner:
            return []
        return self.find(FieldEqualsIgnoreCase("owner", owner))

    def find_by_system(self, system: str) -> List[ServiceModel]:
        if not system:
            return []
        return self.find(FieldEqualsIgnoreCase("system", system))

    def find_by_lifecycle(self, lifecycle: ServiceLifecycle) -> List[ServiceModel]:
        return self.find(FieldEquals("lifecycle", lifecycle))

    def find_by_type(self, service_type: ServiceType) -> List[ServiceModel]:
        return self.find(FieldEquals("type", service_type))
