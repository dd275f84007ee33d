from __future__ import annotations

from abc import ABC, abstractmethod

from marketplace.domain.entities.attribute import AttributeBinding, AttributeDefinition, ServiceType


class AttributeStorePort(ABC):
    @abstractmethod
    async def get_service_type(self, service_type_id: str) -> ServiceType | None:
        raise NotImplementedError

    @abstractmethod
    async def list_definitions(self) -> list[AttributeDefinition]:
        """All registry rows, active or not."""
        raise NotImplementedError

    @abstractmethod
    async def get_definition(self, definition_id: str) -> AttributeDefinition | None:
        raise NotImplementedError

    @abstractmethod
    async def insert_definition(self, definition: AttributeDefinition) -> AttributeDefinition:
        """Insert a registry row. Raises ConflictError if the name is taken."""
        raise NotImplementedError

    @abstractmethod
    async def update_definition(self, definition: AttributeDefinition) -> AttributeDefinition:
        raise NotImplementedError

    @abstractmethod
    async def list_bindings(self, service_type_id: str) -> list[AttributeBinding]:
        """All bindings for the service type, in no guaranteed order."""
        raise NotImplementedError

    @abstractmethod
    async def get_binding(self, binding_id: str) -> AttributeBinding | None:
        raise NotImplementedError

    @abstractmethod
    async def count_bindings_for_definition(self, definition_id: str) -> int:
        raise NotImplementedError

    @abstractmethod
    async def insert_bindings(self, bindings: list[AttributeBinding]) -> list[AttributeBinding]:
        """
        Insert all rows or none.
        Raises ConflictError if any (service_type_id, attribute_id) pair already exists.
        """
        raise NotImplementedError

    @abstractmethod
    async def update_binding(self, binding: AttributeBinding) -> AttributeBinding:
        raise NotImplementedError

    @abstractmethod
    async def update_display_orders(self, bindings: list[AttributeBinding]) -> None:
        """Persist display_order for every given binding as one unit."""
        raise NotImplementedError

    @abstractmethod
    async def delete_bindings(self, service_type_id: str, attribute_ids: list[str]) -> int:
        """Hard delete. Returns number of rows removed."""
        raise NotImplementedError
