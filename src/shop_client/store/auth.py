"""Auth slice: the signed-in user and the operations that change it.

Usage example:
    from shop_client.store.auth import login_user

    result = store.run(login_user(username="alice", password="secret"))
    assert store.state.auth.is_authenticated
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Literal, assert_never

from ..domain.models import User
from ..exceptions import user_message
from ..observability import get_logger
from .context import SLICE_ERRORS, Thunk, ThunkContext

logger = get_logger("shop_client.store.auth")

AuthOperation = Literal["restore", "login", "signup", "update_profile"]


@dataclass(frozen=True)
class AuthState:
    user: User | None = None
    is_authenticated: bool = False
    loading: bool = False
    error: str | None = None

    @property
    def user_id(self) -> int | None:
        return self.user.id if self.user is not None else None


@dataclass(frozen=True)
class AuthPending:
    operation: AuthOperation


@dataclass(frozen=True)
class AuthFulfilled:
    operation: AuthOperation
    user: User


@dataclass(frozen=True)
class AuthRejected:
    operation: AuthOperation
    error: str


@dataclass(frozen=True)
class LoggedOut:
    """Session ended; every slice holding per-user data resets on this."""


@dataclass(frozen=True)
class AuthErrorCleared:
    pass


AuthAction = AuthPending | AuthFulfilled | AuthRejected | LoggedOut | AuthErrorCleared


def reduce_auth(state: AuthState, action: AuthAction) -> AuthState:
    match action:
        case AuthPending():
            return replace(state, loading=True, error=None)
        case AuthFulfilled(user=user):
            return replace(state, user=user, is_authenticated=True, loading=False, error=None)
        case AuthRejected(operation="restore"):
            # A missing or stale stored token just means "signed out".
            return replace(state, user=None, is_authenticated=False, loading=False)
        case AuthRejected(error=error):
            return replace(state, loading=False, error=error)
        case LoggedOut():
            return AuthState()
        case AuthErrorCleared():
            return replace(state, error=None)
        case _:
            assert_never(action)


def restore_session() -> Thunk[AuthFulfilled | AuthRejected]:
    """Validate a stored token by fetching the profile; a failed check discards the token."""

    def thunk(ctx: ThunkContext) -> AuthFulfilled | AuthRejected:
        ctx.dispatch(AuthPending("restore"))
        token = ctx.token_store.get()
        if not token:
            logger.info("No token found in storage")
            rejected = AuthRejected("restore", "No token found")
            ctx.dispatch(rejected)
            return rejected
        try:
            user = ctx.api.auth.profile()
        except SLICE_ERRORS as exc:
            logger.warning("Token restore failed: %s", user_message(exc))
            ctx.token_store.clear()
            rejected = AuthRejected("restore", "Invalid token")
            ctx.dispatch(rejected)
            return rejected
        logger.info("Session restored for %s", user.username)
        fulfilled = AuthFulfilled("restore", user)
        ctx.dispatch(fulfilled)
        return fulfilled

    return thunk


def login_user(*, username: str, password: str) -> Thunk[AuthFulfilled | AuthRejected]:
    def thunk(ctx: ThunkContext) -> AuthFulfilled | AuthRejected:
        ctx.dispatch(AuthPending("login"))
        try:
            session = ctx.api.auth.login(username=username, password=password)
        except SLICE_ERRORS as exc:
            logger.warning("Login failed: %s", user_message(exc))
            rejected = AuthRejected("login", user_message(exc))
            ctx.dispatch(rejected)
            return rejected
        if session.token:
            ctx.token_store.set(session.token)
            logger.info("Token stored")
        fulfilled = AuthFulfilled("login", session.user)
        ctx.dispatch(fulfilled)
        return fulfilled

    return thunk


def signup_user(
    *,
    username: str,
    password: str,
    email: str,
    first_name: str = "",
    last_name: str = "",
    phone: str = "",
) -> Thunk[AuthFulfilled | AuthRejected]:
    def thunk(ctx: ThunkContext) -> AuthFulfilled | AuthRejected:
        ctx.dispatch(AuthPending("signup"))
        try:
            session = ctx.api.auth.signup(
                username=username,
                password=password,
                email=email,
                first_name=first_name,
                last_name=last_name,
                phone=phone,
            )
        except SLICE_ERRORS as exc:
            logger.warning("Signup failed: %s", user_message(exc))
            rejected = AuthRejected("signup", user_message(exc))
            ctx.dispatch(rejected)
            return rejected
        if session.token:
            ctx.token_store.set(session.token)
            logger.info("Token stored")
        fulfilled = AuthFulfilled("signup", session.user)
        ctx.dispatch(fulfilled)
        return fulfilled

    return thunk


def update_profile(changes: dict[str, object]) -> Thunk[AuthFulfilled | AuthRejected]:
    def thunk(ctx: ThunkContext) -> AuthFulfilled | AuthRejected:
        ctx.dispatch(AuthPending("update_profile"))
        user_id = ctx.get_state().auth.user_id
        if user_id is None:
            rejected = AuthRejected("update_profile", "You must be logged in to update your profile")
            ctx.dispatch(rejected)
            return rejected
        try:
            user = ctx.api.auth.update_user(user_id, changes)
        except SLICE_ERRORS as exc:
            rejected = AuthRejected("update_profile", user_message(exc))
            ctx.dispatch(rejected)
            return rejected
        fulfilled = AuthFulfilled("update_profile", user)
        ctx.dispatch(fulfilled)
        return fulfilled

    return thunk


def logout() -> Thunk[LoggedOut]:
    """End the session locally, telling the server first when a token is held.

    Local state and the stored token are cleared whatever the server says.
    """

    def thunk(ctx: ThunkContext) -> LoggedOut:
        action = LoggedOut()
        try:
            if ctx.token_store.get():
                ctx.api.auth.logout()
        except SLICE_ERRORS as exc:
            logger.warning("Server logout failed: %s", user_message(exc))
        finally:
            ctx.token_store.clear()
            ctx.dispatch(action)
        return action

    return thunk


def clear_error() -> AuthErrorCleared:
    return AuthErrorCleared()
