import pytest

from app.core.exceptions import ForbiddenError
from app.services.authorization import ensure_authorized, is_authorized


@pytest.mark.parametrize(
    "role, requester_id, owner_id, expected",
    [
        ("Admin", 1, 99, True),
        ("Admin", 1, None, True),
        ("RestaurantOwner", 5, 5, True),
        ("RestaurantOwner", 5, 6, False),
        ("Customer", 3, 3, True),
        ("Customer", 3, 4, False),
        ("Customer", 3, None, False),
        ("SuperAdmin", 3, 4, False),
    ],
)
def test_is_authorized(role, requester_id, owner_id, expected):
    assert is_authorized(role, requester_id, owner_id) is expected


def test_ensure_authorized_raises_forbidden():
    with pytest.raises(ForbiddenError) as exc_info:
        ensure_authorized("RestaurantOwner", 5, 6, "update this restaurant")
    assert exc_info.value.status_code == 403
    assert "update this restaurant" in exc_info.value.message


def test_ensure_authorized_allows_owner():
    ensure_authorized("RestaurantOwner", 5, 5)
