from __future__ import annotations

from typing import List

from c4catalog.domain.entities import PipelineConfiguration
from c4catalog.domain.specifications import FieldEqualsIgnoreCase
from c4catalog.repositories.base import JsonRepository


class PipelineRepository(JsonRepository[PipelineConfiguration]):
    collection = "pipelines"
    model = PipelineConfiguration
    label = "Pipeline"

    def find_by_service_id(self, service_id: str) -> List[PipelineConfiguration]:
        if not service_id:
            return []
        return self.find(FieldEqualsIgnoreCase("service_id", service_id))
