"""User accounts provider: a CreateUser tool and user resources."""

import itertools
import threading
from dataclasses import dataclass

from typedmcp.mcp.registry import Registry

URI_PREFIX = "users://"


@dataclass
class User:
    id: int
    handle: str


@dataclass
class CreateUserRequest:
    handle: str


@dataclass
class CreateUserResponse:
    id: int


class UserDirectory:
    """In-memory user accounts, keyed by id."""

    def __init__(self) -> None:
        self._users: dict[int, User] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    async def create_user(self, request: CreateUserRequest) -> CreateUserResponse:
        handle = request.handle.strip()
        if not handle:
            raise ValueError("handle must not be empty")
        with self._lock:
            if any(user.handle == handle for user in self._users.values()):
                raise ValueError(f"handle already taken: {handle}")
            user = User(id=next(self._ids), handle=handle)
            self._users[user.id] = user
        return CreateUserResponse(id=user.id)

    async def get_user(self, uri: str) -> User:
        raw_id = uri.removeprefix(URI_PREFIX)
        try:
            user_id = int(raw_id)
        except ValueError:
            raise ValueError(f"invalid user id: {raw_id!r}") from None
        with self._lock:
            user = self._users.get(user_id)
        if user is None:
            raise LookupError(f"user not found: {user_id}")
        return user


def register(registry: Registry) -> None:
    """Register the user tools and resources with the registry."""
    directory = UserDirectory()

    registry.register_tool(
        "CreateUser",
        directory.create_user,
        description="Create a new user account",
    )
    registry.register_resource("User", f"{URI_PREFIX}{{id}}", directory.get_user)
    registry.register_resource_template(
        "User",
        f"{URI_PREFIX}{{id}}",
        directory.get_user,
        description="user account by id",
    )
