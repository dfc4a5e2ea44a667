"""Commodities and the service that manages them."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Protocol

from .pagination import Pagination


class CommodityError(Exception):
    """Raised when a commodity operation fails."""


class CommodityNotFoundError(CommodityError, LookupError):
    """Raised when no commodity has the requested id."""

    def __init__(self, message: str = "commodity not found") -> None:
        super().__init__(message)


@dataclass
class Commodity:
    """A tradable good with its mass and volume per unit."""

    id: str = ""
    name: str = ""
    unit_mass: float = 0.0
    unit_volume: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """The JSON form of the commodity."""
        return {
            "ID": self.id,
            "Name": self.name,
            "UnitMass": self.unit_mass,
            "UnitVolume": self.unit_volume,
        }


class CommodityStore(Protocol):
    """Storage the commodity service needs."""

    def get_commodity_by_id(self, commodity_id: str) -> Commodity: ...

    def get_commodities_by_pagination(self, pagination: Pagination) -> list[Commodity]: ...

    def create_commodity(self, commodity: Commodity) -> Commodity: ...

    def remove_commodity(self, commodity_id: str) -> None: ...


class CommodityService:
    """Business operations on commodities, backed by a store."""

    def __init__(self, store: CommodityStore) -> None:
        self.store = store

    def find_commodity(self, commodity_id: str) -> Commodity:
        """Return the commodity with this id; store errors pass through."""
        return self.store.get_commodity_by_id(commodity_id)

    def find_all_commodity(self, pagination: Pagination) -> list[Commodity]:
        """Return one page of commodities."""
        try:
            return self.store.get_commodities_by_pagination(pagination)
        except Exception as err:
            raise CommodityError(f"error getting commodities by pagination: {err}") from err

    def create_commodity(self, commodity: Commodity) -> Commodity:
        """Store a new commodity and return it as stored."""
        try:
            return self.store.create_commodity(replace(commodity))
        except Exception as err:
            raise CommodityError(f"error creating commodity: {err}") from err

    def remove_commodity(self, commodity_id: str) -> None:
        """Delete the commodity with this id."""
        try:
            self.store.remove_commodity(commodity_id)
        except Exception as err:
            raise CommodityError(f"error removing commodity: {err}") from err