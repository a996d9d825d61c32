"""
Name: API Test Fixtures

Responsibilities:
  - In-memory repositories honoring the repository protocols
  - A TestClient over create_app() with the container overridden
  - Helpers to log a user in (token + active session)

Notes:
  - The TestClient is NOT used as a context manager: the lifespan (DB
    bootstrap + pool) never runs in unit tests.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from pizza_service.api.main import create_app
from pizza_service.container import (
    get_factory_client,
    get_franchise_repository,
    get_menu_repository,
    get_order_repository,
    get_session_repository,
    get_user_repository,
)
from pizza_service.crosscutting.exceptions import (
    ConflictError,
    FactoryError,
    NotFoundError,
    UnauthorizedError,
)
from pizza_service.domain.entities import (
    Franchise,
    FranchiseAdmin,
    FranchisePage,
    MenuItem,
    Order,
    OrderItem,
    OrderPage,
    Store,
    UserPage,
)
from pizza_service.identity.auth_users import create_access_token
from pizza_service.identity.users import Role, RoleAssignment, User
from pizza_service.infrastructure.repositories.postgres.session import (
    get_token_signature,
)
from pizza_service.infrastructure.services.factory_client import FactoryOrderResult


# ============================================================================
# In-memory repositories
# ============================================================================


class InMemorySessions:
    def __init__(self):
        self.signatures: dict[str, int] = {}

    def login_user(self, user_id, token):
        self.signatures.setdefault(get_token_signature(token), user_id)

    def is_logged_in(self, token):
        return get_token_signature(token) in self.signatures

    def logout_user(self, token):
        self.signatures.pop(get_token_signature(token), None)


class InMemoryUsers:
    def __init__(self, franchises: "InMemoryFranchises"):
        self._franchises = franchises
        self.users: dict[int, User] = {}
        self.passwords: dict[int, str] = {}

    def seed(self, user: User, password: str = "pw") -> User:
        self.users[user.id] = user
        self.passwords[user.id] = password
        return user

    def add_user(self, *, name, email, password, roles):
        if any(u.email == email for u in self.users.values()):
            raise ConflictError("user with that email already exists")
        assignments = []
        for request in roles:
            object_id = None
            if request.role == Role.FRANCHISEE:
                object_id = self._franchises.id_by_name(request.franchise_name)
            assignments.append(RoleAssignment(role=request.role, object_id=object_id))
        user = User(id=max(self.users, default=0) + 1, name=name, email=email, roles=assignments)
        return self.seed(user, password)

    def get_user(self, email, password):
        for user in self.users.values():
            if user.email == email and self.passwords[user.id] == password:
                return user
        raise UnauthorizedError("unknown user")

    def get_user_by_id(self, user_id):
        return self.users.get(user_id)

    def update_user(self, user_id, *, name=None, email=None, password=None):
        if user_id not in self.users:
            raise NotFoundError("unknown user")
        current = self.users[user_id]
        updated = replace(
            current, name=name or current.name, email=email or current.email
        )
        self.users[user_id] = updated
        if password:
            self.passwords[user_id] = password
        return updated

    def list_users(self, *, limit, offset=None, page=1, name=None):
        pattern = (name or "*").replace("*", "").lower()
        matching = [
            u for _, u in sorted(self.users.items()) if pattern in u.name.lower()
        ]
        start = offset if offset is not None else (page - 1) * limit
        window = matching[start : start + limit + 1]
        return UserPage(users=window[:limit], more=len(window) > limit)

    def delete_user(self, user_id):
        self.users.pop(user_id, None)
        self.passwords.pop(user_id, None)


class InMemoryMenu:
    def __init__(self):
        self.items: list[MenuItem] = [
            MenuItem(id=1, title="Veggie", description="A garden of delight", image="pizza1.png", price=0.0038),
            MenuItem(id=2, title="Pepperoni", description="Spicy treat", image="pizza2.png", price=0.0042),
        ]

    def get_menu(self):
        return list(self.items)

    def add_menu_item(self, item):
        created = replace(item, id=len(self.items) + 1)
        self.items.append(created)
        return created


class InMemoryOrders:
    def __init__(self, menu: InMemoryMenu, page_size: int = 10):
        self._menu = menu
        self._page_size = page_size
        self.orders: list[Order] = []

    def get_orders(self, user_id, page=1):
        mine = [o for o in self.orders if o.diner_id == user_id]
        start = (page - 1) * self._page_size
        return OrderPage(
            diner_id=user_id, orders=mine[start : start + self._page_size], page=page
        )

    def add_diner_order(self, user_id, order):
        menu_ids = {m.id for m in self._menu.items}
        if any(i.menu_id not in menu_ids for i in order.items):
            raise NotFoundError("unknown menu item")
        created = Order(
            id=len(self.orders) + 1,
            diner_id=user_id,
            franchise_id=order.franchise_id,
            store_id=order.store_id,
            date=datetime(2024, 6, 5, tzinfo=timezone.utc),
            items=[
                OrderItem(
                    id=index,
                    menu_id=i.menu_id,
                    description=i.description,
                    price=i.price,
                )
                for index, i in enumerate(order.items, start=1)
            ],
        )
        self.orders.append(created)
        return created


class InMemoryFranchises:
    def __init__(self):
        self.users: InMemoryUsers | None = None
        self.franchises: dict[int, Franchise] = {}
        self._next_store_id = 1

    def id_by_name(self, name):
        for franchise in self.franchises.values():
            if franchise.name == name:
                return franchise.id
        raise NotFoundError(f"unknown franchise {name}")

    def _view(self, franchise: Franchise, include_details: bool) -> Franchise:
        return replace(franchise, include_admins=include_details)

    def get_franchises(self, *, page=0, limit=10, name_filter="*", include_details=False):
        pattern = (name_filter or "*").replace("*", "")
        matching = [
            f for _, f in sorted(self.franchises.items()) if f.name.startswith(pattern)
        ]
        window = matching[page * limit : page * limit + limit + 1]
        return FranchisePage(
            franchises=[self._view(f, include_details) for f in window[:limit]],
            more=len(window) > limit,
        )

    def get_franchise(self, franchise_id):
        if franchise_id not in self.franchises:
            raise NotFoundError("unknown franchise")
        return self.franchises[franchise_id]

    def get_user_franchises(self, user_id):
        return [
            f
            for f in self.franchises.values()
            if any(a.id == user_id for a in f.admins)
        ]

    def create_franchise(self, name, admin_emails):
        if any(f.name == name for f in self.franchises.values()):
            raise ConflictError("franchise with that name already exists")
        admins = []
        for email in admin_emails:
            match = [u for u in self.users.users.values() if u.email == email]
            if not match:
                raise NotFoundError(f"unknown user for franchise admin {email} provided")
            admins.append(FranchiseAdmin(id=match[0].id, name=match[0].name, email=email))
        franchise = Franchise(
            id=max(self.franchises, default=0) + 1, name=name, admins=admins, stores=[]
        )
        self.franchises[franchise.id] = franchise
        return franchise

    def delete_franchise(self, franchise_id):
        self.franchises.pop(franchise_id, None)

    def create_store(self, franchise_id, name):
        franchise = self.get_franchise(franchise_id)
        store = Store(id=self._next_store_id, name=name, franchise_id=franchise_id)
        self._next_store_id += 1
        franchise.stores.append(Store(id=store.id, name=name))
        return store

    def delete_store(self, franchise_id, store_id):
        franchise = self.franchises.get(franchise_id)
        if franchise:
            franchise.stores = [s for s in franchise.stores if s.id != store_id]


class FakeFactory:
    def __init__(self):
        self.error: FactoryError | None = None
        self.calls: list[tuple[User, Order]] = []

    def create_order(self, diner, order):
        self.calls.append((diner, order))
        if self.error is not None:
            raise self.error
        return FactoryOrderResult(jwt="pizza.factory.jwt", report_url="https://factory.test/report/1")


class Backend:
    """Bundle of in-memory collaborators shared by one test."""

    def __init__(self):
        self.sessions = InMemorySessions()
        self.franchises = InMemoryFranchises()
        self.users = InMemoryUsers(self.franchises)
        self.franchises.users = self.users
        self.menu = InMemoryMenu()
        self.orders = InMemoryOrders(self.menu)
        self.factory = FakeFactory()

    def login(self, user: User) -> dict[str, str]:
        """Emite token + sesión activa; devuelve el header Authorization."""
        token = create_access_token(user)
        self.sessions.login_user(user.id, token)
        return {"Authorization": f"Bearer {token}"}


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def backend(admin_user, diner_user, franchisee_user) -> Backend:
    state = Backend()
    state.users.seed(admin_user, "admin")
    state.users.seed(diner_user, "diner")
    state.users.seed(franchisee_user, "franchisee")
    state.franchises.create_franchise("pizzaPocket", [franchisee_user.email])
    state.franchises.create_store(1, "SLC")
    return state


@pytest.fixture
def client(backend: Backend) -> TestClient:
    app = create_app()
    app.dependency_overrides.update(
        {
            get_session_repository: lambda: backend.sessions,
            get_user_repository: lambda: backend.users,
            get_menu_repository: lambda: backend.menu,
            get_order_repository: lambda: backend.orders,
            get_franchise_repository: lambda: backend.franchises,
            get_factory_client: lambda: backend.factory,
        }
    )
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def admin_headers(backend, admin_user):
    return backend.login(admin_user)


@pytest.fixture
def diner_headers(backend, diner_user):
    return backend.login(diner_user)


@pytest.fixture
def franchisee_headers(backend, franchisee_user):
    return backend.login(franchisee_user)
