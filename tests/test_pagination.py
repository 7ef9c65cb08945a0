import pytest

from app.core.pagination import Page, PageParams


@pytest.mark.parametrize(
    "page, limit, expected",
    [
        (None, None, (1, 10)),
        ("0", "1000", (1, 50)),
        ("-3", "5", (1, 5)),
        ("2", "0", (2, 10)),
        ("abc", "xyz", (1, 10)),
        (3, 20, (3, 20)),
    ],
)
def test_page_params_are_clamped(page, limit, expected):
    params = PageParams.from_query(page, limit)
    assert (params.page, params.limit) == expected


def test_skip_follows_page_window():
    assert PageParams.from_query("3", "20").skip == 40


def test_page_counters():
    page = Page.build(["a", "b"], total=12, params=PageParams(page=2, limit=5))
    assert page.total_pages == 3
    assert page.has_next is True
    assert page.has_prev is True


def test_last_page_has_no_next():
    page = Page.build([], total=10, params=PageParams(page=2, limit=5))
    assert page.has_next is False


def test_meta_uses_camel_case():
    meta = Page.build([], total=0, params=PageParams()).to_dict()
    assert meta["totalPages"] == 0
    assert meta["hasNext"] is False
    assert meta["hasPrev"] is False
