"""
CRC — domain/repositories.py

Name
- Domain Repository Interfaces (Protocols)

Responsibilities
- Define persistence contracts for users, sessions, menu, orders and franchises.
- Keep routers independent from PostgreSQL (ports).
- Enable dependency inversion and straightforward unit testing (fake repositories).

Collaborators
- domain.entities: MenuItem, Franchise, Store, Order, NewOrder, pages
- identity.users: User, RoleRequest
- infrastructure.repositories.postgres: Postgres* implementations

Constraints
- Pure interfaces only: no side effects, no infrastructure imports, no SQL.
- Implementations MUST match method signatures exactly.
- Errors are domain errors (crosscutting.exceptions), never HTTP exceptions.
"""

from typing import List, Optional, Protocol, Sequence

from ..identity.users import RoleRequest, User
from .entities import (
    Franchise,
    FranchisePage,
    MenuItem,
    NewOrder,
    Order,
    OrderPage,
    Store,
    UserPage,
)


class SessionRepository(Protocol):
    """R: Active sessions keyed by token signature."""

    def login_user(self, user_id: int, token: str) -> None: ...

    def is_logged_in(self, token: str) -> bool: ...

    def logout_user(self, token: str) -> None: ...


class UserRepository(Protocol):
    """R: Users, credentials and role assignments."""

    def add_user(
        self,
        *,
        name: str,
        email: str,
        password: str,
        roles: Sequence[RoleRequest],
    ) -> User: ...

    def get_user(self, email: str, password: str) -> User: ...

    def get_user_by_id(self, user_id: int) -> Optional[User]: ...

    def update_user(
        self,
        user_id: int,
        *,
        name: Optional[str] = None,
        email: Optional[str] = None,
        password: Optional[str] = None,
    ) -> User: ...

    def list_users(
        self,
        *,
        limit: int,
        offset: Optional[int] = None,
        page: int = 1,
        name: Optional[str] = None,
    ) -> UserPage: ...

    def delete_user(self, user_id: int) -> None: ...


class MenuRepository(Protocol):
    """R: Menu items."""

    def get_menu(self) -> List[MenuItem]: ...

    def add_menu_item(self, item: MenuItem) -> MenuItem: ...


class OrderRepository(Protocol):
    """R: Diner orders and their item snapshots."""

    def get_orders(self, user_id: int, page: int = 1) -> OrderPage: ...

    def add_diner_order(self, user_id: int, order: NewOrder) -> Order: ...


class FranchiseRepository(Protocol):
    """R: Franchises, their admins and stores."""

    def get_franchises(
        self,
        *,
        page: int = 0,
        limit: int = 10,
        name_filter: str = "*",
        include_details: bool = False,
    ) -> FranchisePage: ...

    def get_franchise(self, franchise_id: int) -> Franchise: ...

    def get_user_franchises(self, user_id: int) -> List[Franchise]: ...

    def create_franchise(self, name: str, admin_emails: Sequence[str]) -> Franchise: ...

    def delete_franchise(self, franchise_id: int) -> None: ...

    def create_store(self, franchise_id: int, name: str) -> Store: ...

    def delete_store(self, franchise_id: int, store_id: int) -> None: ...
