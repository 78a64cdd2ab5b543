"""User service - lookups used when adding participants."""

from studio.domain import User
from studio.domain.errors import UserNotFoundError
from studio.stores.interfaces import StudioStore


class UserService:
    """Service for user lookups."""

    def __init__(self, store: StudioStore) -> None:
        self._store = store

    def get_user(self, user_id: str) -> User:
        """Return a user with their orders.

        Raises:
            UserNotFoundError: If the user does not exist.
        """
        user = self._store.get_user(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    def list_users(self) -> list[User]:
        return self._store.list_users()

    def search_users(self, query: str) -> list[User]:
        """Return users whose login, first name or surname starts with query."""
        prefix = query.strip().casefold()
        return [
            u
            for u in self._store.list_users()
            if u.id.casefold().startswith(prefix)
            or u.first_name.casefold().startswith(prefix)
            or u.surname.casefold().startswith(prefix)
        ]
