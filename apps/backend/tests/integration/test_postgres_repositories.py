"""
Name: PostgreSQL Repository Integration Tests

Responsibilities:
  - Exercise every repository against a real PostgreSQL
  - Verify multi-statement writes are all-or-nothing
  - Verify revenue aggregation and name filters
"""

import os

import pytest

# Skip BEFORE importing pizza_service.* to avoid env validation during collection
if os.getenv("RUN_INTEGRATION") != "1":
    pytest.skip(
        "Set RUN_INTEGRATION=1 to run integration tests", allow_module_level=True
    )

from contextlib import contextmanager

import psycopg

from pizza_service.crosscutting.exceptions import (
    ConflictError,
    DatabaseError,
    NotFoundError,
    UnauthorizedError,
)
from pizza_service.domain.entities import MenuItem, NewOrder, NewOrderItem
from pizza_service.identity.auth_users import create_access_token
from pizza_service.identity.users import Role, RoleAssignment, RoleRequest
from pizza_service.infrastructure.db.pool import get_pool
from pizza_service.infrastructure.db.transaction import TransactionCoordinator
from pizza_service.infrastructure.repositories import (
    PostgresFranchiseRepository,
    PostgresMenuRepository,
    PostgresOrderRepository,
    PostgresSessionRepository,
    PostgresUserRepository,
)

pytestmark = [pytest.mark.integration, pytest.mark.usefixtures("clean_db")]


def _count(table: str) -> int:
    with get_pool().connection() as conn:
        return conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]


def _diner(users: PostgresUserRepository, email: str = "d@jwt.com", name: str = "pizza diner"):
    return users.add_user(
        name=name, email=email, password="diner", roles=[RoleRequest(role=Role.DINER)]
    )


class _FailingConnection:
    """Delegates to a real connection but fails statements containing `fragment`."""

    def __init__(self, inner, fragment: str):
        self._inner = inner
        self._fragment = fragment

    def execute(self, query, params=None):
        if self._fragment in str(query):
            raise psycopg.OperationalError("connection lost")
        return self._inner.execute(query, params)

    def transaction(self):
        return self._inner.transaction()


class _FailingPool:
    def __init__(self, fragment: str):
        self._fragment = fragment

    @contextmanager
    def connection(self):
        with get_pool().connection() as conn:
            yield _FailingConnection(conn, self._fragment)


# =============================================================================
# Sessions / users
# =============================================================================


def test_session_lifecycle():
    users = PostgresUserRepository()
    sessions = PostgresSessionRepository()
    user = _diner(users)
    token = create_access_token(user)

    assert sessions.is_logged_in(token) is False
    sessions.login_user(user.id, token)
    sessions.login_user(user.id, token)
    assert sessions.is_logged_in(token) is True

    sessions.logout_user(token)
    assert sessions.is_logged_in(token) is False


def test_add_and_authenticate_user():
    users = PostgresUserRepository()
    created = _diner(users)

    fetched = users.get_user("d@jwt.com", "diner")

    assert fetched == created
    assert fetched.roles == [RoleAssignment(role=Role.DINER)]
    with pytest.raises(UnauthorizedError):
        users.get_user("d@jwt.com", "wrong")
    with pytest.raises(UnauthorizedError):
        users.get_user("nobody@jwt.com", "diner")


def test_duplicate_email_is_conflict():
    users = PostgresUserRepository()
    _diner(users)

    with pytest.raises(ConflictError):
        _diner(users, name="someone else")
    assert _count("users") == 1


def test_franchisee_role_resolves_franchise_name():
    users = PostgresUserRepository()
    franchises = PostgresFranchiseRepository()
    franchise = franchises.create_franchise("pizzaPocket", [])

    user = users.add_user(
        name="pizza franchisee",
        email="f@jwt.com",
        password="franchisee",
        roles=[RoleRequest(role=Role.FRANCHISEE, franchise_name="pizzaPocket")],
    )

    assert user.roles == [RoleAssignment(role=Role.FRANCHISEE, object_id=franchise.id)]


def test_update_user_changes_password():
    users = PostgresUserRepository()
    user = _diner(users)

    updated = users.update_user(user.id, name="renamed", password="new-pw")

    assert updated.name == "renamed"
    assert users.get_user("d@jwt.com", "new-pw").id == user.id


def test_list_users_filters_by_name():
    users = PostgresUserRepository()
    _diner(users, "a@jwt.com", "Kai Chen")
    _diner(users, "b@jwt.com", "Buddy")
    _diner(users, "c@jwt.com", "kailey")

    page = users.list_users(limit=10, name="kai")

    assert [u.email for u in page.users] == ["a@jwt.com", "c@jwt.com"]
    assert page.more is False
    assert users.list_users(limit=1).more is True


def test_delete_user_removes_roles_and_sessions():
    users = PostgresUserRepository()
    sessions = PostgresSessionRepository()
    user = _diner(users)
    token = create_access_token(user)
    sessions.login_user(user.id, token)

    users.delete_user(user.id)

    assert users.get_user_by_id(user.id) is None
    assert _count("user_roles") == 0
    assert sessions.is_logged_in(token) is False


# =============================================================================
# Menu / orders
# =============================================================================


def _menu_item(menu: PostgresMenuRepository, title: str = "Veggie", price: float = 0.05):
    return menu.add_menu_item(
        MenuItem(title=title, description="d", image="pizza1.png", price=price)
    )


def test_menu_round_trip():
    menu = PostgresMenuRepository()
    _menu_item(menu, "Veggie")
    _menu_item(menu, "Pepperoni")

    assert [m.title for m in menu.get_menu()] == ["Veggie", "Pepperoni"]


def test_order_with_items_and_pagination():
    users = PostgresUserRepository()
    menu = PostgresMenuRepository()
    orders = PostgresOrderRepository(list_per_page=2)
    diner = _diner(users)
    item = _menu_item(menu)

    for _ in range(3):
        orders.add_diner_order(
            diner.id,
            NewOrder(
                franchise_id=1,
                store_id=1,
                items=[NewOrderItem(menu_id=item.id, description="Veggie", price=0.05)],
            ),
        )

    first = orders.get_orders(diner.id, 1)
    second = orders.get_orders(diner.id, 2)

    assert len(first.orders) == 2
    assert len(second.orders) == 1
    assert first.orders[0].items[0].menu_id == item.id
    assert first.orders[0].date is not None


def test_unknown_menu_item_leaves_no_partial_order():
    users = PostgresUserRepository()
    menu = PostgresMenuRepository()
    orders = PostgresOrderRepository()
    diner = _diner(users)
    item = _menu_item(menu)

    with pytest.raises(NotFoundError):
        orders.add_diner_order(
            diner.id,
            NewOrder(
                franchise_id=1,
                store_id=1,
                items=[
                    NewOrderItem(menu_id=item.id, description="ok", price=1),
                    NewOrderItem(menu_id=item.id + 100, description="bad", price=1),
                ],
            ),
        )

    assert _count("orders") == 0
    assert _count("order_items") == 0


# =============================================================================
# Franchises / stores
# =============================================================================


def test_create_franchise_with_unknown_admin_writes_nothing():
    users = PostgresUserRepository()
    franchises = PostgresFranchiseRepository()
    _diner(users, "f@jwt.com")

    with pytest.raises(NotFoundError, match="missing@x.com"):
        franchises.create_franchise("pizzaPocket", ["f@jwt.com", "missing@x.com"])

    assert _count("franchises") == 0
    assert _count("user_roles") == 1


def test_duplicate_franchise_name_is_conflict():
    franchises = PostgresFranchiseRepository()
    franchises.create_franchise("pizzaPocket", [])

    with pytest.raises(ConflictError):
        franchises.create_franchise("pizzaPocket", [])


def test_delete_franchise_is_all_or_nothing():
    users = PostgresUserRepository()
    franchises = PostgresFranchiseRepository()
    _diner(users, "f@jwt.com")
    franchise = franchises.create_franchise("pizzaPocket", ["f@jwt.com"])
    franchises.create_store(franchise.id, "SLC")
    franchises.create_store(franchise.id, "Provo")

    failing = PostgresFranchiseRepository(
        coordinator=TransactionCoordinator(_FailingPool("DELETE FROM user_roles"))
    )
    with pytest.raises(DatabaseError):
        failing.delete_franchise(franchise.id)

    survivor = franchises.get_franchise(franchise.id)
    assert [s.name for s in survivor.stores] == ["SLC", "Provo"]
    assert [a.email for a in survivor.admins] == ["f@jwt.com"]

    franchises.delete_franchise(franchise.id)
    assert _count("franchises") == 0
    assert _count("stores") == 0
    assert _count("user_roles") == 1


def test_detailed_listing_reports_store_revenue():
    users = PostgresUserRepository()
    menu = PostgresMenuRepository()
    orders = PostgresOrderRepository()
    franchises = PostgresFranchiseRepository()
    diner = _diner(users)
    item = _menu_item(menu)
    franchise = franchises.create_franchise("pizzaPocket", [])
    store = franchises.create_store(franchise.id, "SLC")
    franchises.create_store(franchise.id, "Provo")
    orders.add_diner_order(
        diner.id,
        NewOrder(
            franchise_id=franchise.id,
            store_id=store.id,
            items=[
                NewOrderItem(menu_id=item.id, description="a", price=0.05),
                NewOrderItem(menu_id=item.id, description="b", price=0.02),
            ],
        ),
    )

    detailed = franchises.get_franchises(include_details=True).franchises[0]
    plain = franchises.get_franchises().franchises[0]

    revenue = {s.name: s.total_revenue for s in detailed.stores}
    assert revenue["SLC"] == pytest.approx(0.07)
    assert revenue["Provo"] == 0
    assert all(s.total_revenue is None for s in plain.stores)


def test_franchise_name_filter_and_more():
    franchises = PostgresFranchiseRepository()
    for name in ("pizzaPocket", "pizzaPlace", "burgerBarn"):
        franchises.create_franchise(name, [])

    page = franchises.get_franchises(limit=1, name_filter="pizza*")

    assert [f.name for f in page.franchises] == ["pizzaPocket"]
    assert page.more is True
    assert franchises.get_franchises(name_filter="burgerBarn").franchises[0].name == "burgerBarn"


def test_delete_store_is_scoped_to_its_franchise():
    franchises = PostgresFranchiseRepository()
    first = franchises.create_franchise("pizzaPocket", [])
    second = franchises.create_franchise("pizzaPlace", [])
    store = franchises.create_store(first.id, "SLC")

    franchises.delete_store(second.id, store.id)
    assert _count("stores") == 1

    franchises.delete_store(first.id, store.id)
    assert _count("stores") == 0


def test_create_store_for_unknown_franchise():
    with pytest.raises(NotFoundError):
        PostgresFranchiseRepository().create_store(999, "Nowhere")
