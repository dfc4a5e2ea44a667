from urllib.parse import parse_qs

import pytest

from spacesim.pagination import (
    DEFAULT_PAGE,
    DEFAULT_PER_PAGE,
    MAX_PER_PAGE,
    Pagination,
    get_pagination,
)


def test_defaults_when_query_is_empty():
    p = get_pagination({})
    assert p == Pagination(page=DEFAULT_PAGE, per_page=DEFAULT_PER_PAGE, order_by="")


def test_empty_strings_fall_back_to_defaults():
    p = get_pagination({"page": "", "per_page": ""})
    assert p.page == DEFAULT_PAGE
    assert p.per_page == DEFAULT_PER_PAGE


def test_values_are_read():
    p = get_pagination({"page": "3", "per_page": "25", "order_by": "name,desc"})
    assert p == Pagination(page=3, per_page=25, order_by="name,desc")


def test_per_page_is_capped():
    p = get_pagination({"per_page": "500"})
    assert p.per_page == MAX_PER_PAGE


def test_per_page_at_limit_kept():
    assert get_pagination({"per_page": str(MAX_PER_PAGE)}).per_page == MAX_PER_PAGE


@pytest.mark.parametrize("bad", ["abc", "1.5", " 2", "2x"])
def test_malformed_numbers_become_zero(bad):
    p = get_pagination({"page": bad, "per_page": bad})
    assert p.page == 0
    assert p.per_page == 0


def test_signed_numbers_are_accepted():
    assert get_pagination({"page": "+4"}).page == 4
    assert get_pagination({"page": "-2"}).page == -2


def test_list_values_from_parse_qs():
    query = parse_qs("page=2&page=9&per_page=7&order_by=unitmass")
    p = get_pagination(query)
    assert p == Pagination(page=2, per_page=7, order_by="unitmass")


def test_offset_first_page_is_zero():
    assert Pagination(page=1, per_page=30).offset() == 0


def test_offset_second_page_skips_one_page():
    p = Pagination(page=2, per_page=30)
    assert p.offset() == p.per_page


def test_limit_is_per_page():
    assert Pagination(page=5, per_page=42).limit() == 42


def test_order_by_field_allowed_is_lowercased():
    p = Pagination(order_by="Name,desc")
    assert p.order_by_field(["name"], "createdat") == "name"


def test_order_by_field_not_allowed_uses_default():
    p = Pagination(order_by="password")
    assert p.order_by_field(["unitmass", "unitvolume", "name"], "createdat") == "createdat"


def test_order_by_field_empty_uses_default():
    assert Pagination().order_by_field(["name"], "createdat") == "createdat"


@pytest.mark.parametrize(
    "order_by, expected",
    [
        ("name,desc", "desc"),
        ("name,DESC", "asc"),
        ("name,asc", "asc"),
        ("name", "asc"),
        ("desc", "asc"),
        ("", "asc"),
        ("name,desc,extra", "desc"),
    ],
)
def test_order_by_direction(order_by, expected):
    assert Pagination(order_by=order_by).order_by_direction() == expected


def test_to_dict_round_trip():
    p = Pagination(page=2, per_page=15, order_by="name")
    d = p.to_dict()
    assert set(d) == {"Page", "PerPage", "OrderBy"}
    assert Pagination(page=d["Page"], per_page=d["PerPage"], order_by=d["OrderBy"]) == p