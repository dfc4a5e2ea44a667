import pytest

from spacesim.pagination import Pagination
from spacesim.solar_system import (
    SolarSystem,
    SolarSystemError,
    SolarSystemNotFoundError,
    SolarSystemService,
)


class MemoryStore:
    def __init__(self):
        self.items = {}
        self.counter = 0
        self.last_pagination = None

    def get_solar_system_by_id(self, solar_system_id):
        try:
            return self.items[solar_system_id]
        except KeyError:
            raise SolarSystemNotFoundError() from None

    def get_solar_systems_by_pagination(self, pagination):
        self.last_pagination = pagination
        values = list(self.items.values())
        return values[pagination.offset(): pagination.offset() + pagination.limit()]

    def create_solar_system(self, solar_system):
        self.counter += 1
        solar_system.id = f"sys-{self.counter}"
        self.items[solar_system.id] = solar_system
        return solar_system

    def remove_solar_system(self, solar_system_id):
        self.items.pop(solar_system_id, None)


class BrokenStore:
    def get_solar_system_by_id(self, solar_system_id):
        raise RuntimeError("boom")

    def get_solar_systems_by_pagination(self, pagination):
        raise RuntimeError("boom")

    def create_solar_system(self, solar_system):
        raise RuntimeError("boom")

    def remove_solar_system(self, solar_system_id):
        raise RuntimeError("boom")


@pytest.fixture
def service():
    return SolarSystemService(MemoryStore())


def test_create_then_find(service):
    created = service.create_solar_system(SolarSystem(name="Sol"))
    assert created.id
    assert service.find_solar_system(created.id) == created


def test_create_does_not_mutate_input(service):
    original = SolarSystem(name="Vega")
    created = service.create_solar_system(original)
    assert original.id == ""
    assert created.name == original.name


def test_find_missing_raises_not_found(service):
    with pytest.raises(SolarSystemNotFoundError) as info:
        service.find_solar_system("missing")
    assert str(info.value) == "solar system not found"
    assert isinstance(info.value, SolarSystemError)


def test_find_all_uses_pagination(service):
    names = ["Sol", "Vega", "Sirius"]
    for name in names:
        service.create_solar_system(SolarSystem(name=name))
    pagination = Pagination(page=1, per_page=2)
    result = service.find_all_solar_systems(pagination)
    assert [s.name for s in result] == names[:2]
    assert service.store.last_pagination is pagination


def test_remove(service):
    created = service.create_solar_system(SolarSystem(name="Sol"))
    service.remove_solar_system(created.id)
    with pytest.raises(SolarSystemNotFoundError):
        service.find_solar_system(created.id)


@pytest.mark.parametrize(
    "call",
    [
        lambda s: s.find_solar_system("x"),
        lambda s: s.find_all_solar_systems(Pagination()),
        lambda s: s.create_solar_system(SolarSystem(name="x")),
        lambda s: s.remove_solar_system("x"),
    ],
)
def test_store_errors_pass_through_unchanged(call):
    with pytest.raises(RuntimeError, match="^boom$"):
        call(SolarSystemService(BrokenStore()))


def test_to_dict_round_trip():
    s = SolarSystem(id="abc", name="Sol")
    d = s.to_dict()
    assert d == {"ID": "abc", "Name": "Sol"}
    assert SolarSystem(id=d["ID"], name=d["Name"]) == s