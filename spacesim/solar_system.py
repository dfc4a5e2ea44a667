"""Solar systems and the service that manages them."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Protocol

from .pagination import Pagination


class SolarSystemError(Exception):
    """Raised when a solar system operation fails."""


class SolarSystemNotFoundError(SolarSystemError, LookupError):
    """Raised when no solar system has the requested id."""

    def __init__(self, message: str = "solar system not found") -> None:
        super().__init__(message)


@dataclass
class SolarSystem:
    """A named solar system."""

    id: str = ""
    name: str = ""

    def to_dict(self) -> dict[str, Any]:
        """The JSON form of the solar system."""
        return {"ID": self.id, "Name": self.name}


class SolarSystemStore(Protocol):
    """Storage the solar system service needs."""

    def get_solar_system_by_id(self, solar_system_id: str) -> SolarSystem: ...

    def get_solar_systems_by_pagination(self, pagination: Pagination) -> list[SolarSystem]: ...

    def create_solar_system(self, solar_system: SolarSystem) -> SolarSystem: ...

    def remove_solar_system(self, solar_system_id: str) -> None: ...


class SolarSystemService:
    """Business operations on solar systems; store errors pass through unchanged."""

    def __init__(self, store: SolarSystemStore) -> None:
        self.store = store

    def find_solar_system(self, solar_system_id: str) -> SolarSystem:
        """Return the solar system with this id."""
        return self.store.get_solar_system_by_id(solar_system_id)

    def find_all_solar_systems(self, pagination: Pagination) -> list[SolarSystem]:
        """Return one page of solar systems."""
        return self.store.get_solar_systems_by_pagination(pagination)

    def create_solar_system(self, solar_system: SolarSystem) -> SolarSystem:
        """Store a new solar system and return it as stored."""
        return self.store.create_solar_system(replace(solar_system))

    def remove_solar_system(self, solar_system_id: str) -> None:
        """Delete the solar system with this id."""
        self.store.remove_solar_system(solar_system_id)