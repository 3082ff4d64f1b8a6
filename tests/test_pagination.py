import math

import pytest

from marketplace_messaging.models.api.pagination import Pagination, page_offset


@pytest.mark.parametrize(
    "page,limit,total_count",
    [
        (1, 20, 0),
        (1, 20, 1),
        (1, 20, 20),
        (1, 20, 21),
        (2, 20, 21),
        (3, 20, 21),
        (1, 1, 100),
        (100, 1, 100),
        (4, 100, 250),
    ],
)
def test_pagination_arithmetic(page: int, limit: int, total_count: int) -> None:
    pagination = Pagination.build(page, limit, total_count)

    assert pagination.total_pages == math.ceil(total_count / limit)
    assert pagination.has_more == (page < pagination.total_pages)


def test_empty_result_has_no_pages() -> None:
    pagination = Pagination.build(1, 50, 0)

    assert pagination.total_pages == 0
    assert pagination.has_more is False


def test_serialized_with_camel_case_keys() -> None:
    payload = Pagination.build(2, 10, 35).model_dump(by_alias=True)

    assert payload == {
        "page": 2,
        "limit": 10,
        "totalCount": 35,
        "totalPages": 4,
        "hasMore": True,
    }


def test_page_offset() -> None:
    assert page_offset(1, 50) == 0
    assert page_offset(3, 20) == 40
