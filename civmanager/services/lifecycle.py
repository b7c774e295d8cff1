"""Which screen a session is on, and the transitions between screens.

``resolve_state`` answers the question statelessly for a single request
(used by ``GET /session``). ``SessionLifecycle`` drives one session through
its transitions explicitly:

    login          --sign_in-->          setup | game
    login          --switch_to_register-> register
    register       --sign_up-->          setup
    register       --switch_to_login-->  login
    <any>          --recovery_detected-> reset-password
    reset-password --update_password-->  login
    setup          --found-->            game
    game           --sign_out-->         login
"""

import enum
import logging
from contextlib import asynccontextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from civmanager.errors import (
    ActionInProgress,
    AlreadyFounded,
    AuthError,
    InvalidOperation,
    InvalidTransition,
    NotFound,
    TransientStoreFailure,
)
from civmanager.models.civilization import Civilization
from civmanager.models.user import User
from civmanager.services.auth_service import (
    RECOVERY,
    authenticate_user,
    create_access_token,
    create_user,
    get_user_by_email,
    get_user_by_username,
    get_user_for_token,
    update_password,
)
from civmanager.services.civilization_service import found_civilization, get_civilization_for_user
from civmanager.services.resource_service import get_resources

logger = logging.getLogger(__name__)


class AppState(str, enum.Enum):
    login = "login"
    register = "register"
    reset_password = "reset-password"
    setup = "setup"
    game = "game"


async def lookup_civilization(db: AsyncSession, user: User) -> Civilization | None:
    """Existence check run once per authentication event.

    A store failure is treated as "no civilization" so the session lands on
    setup, where founding can be retried, instead of hanging. The session is
    rolled back on failure, which expires loaded instances.
    """
    user_id = user.id
    try:
        civilization = await get_civilization_for_user(db, user_id)
        if civilization is not None and await get_resources(civilization.id, db) is None:
            # Founding never completed; setup re-attempts it
            logger.warning("Civilization %s has no resources; routing to setup", civilization.id)
            return None
    except (TransientStoreFailure, NotFound):
        logger.warning("Civilization lookup failed for user %s; falling back to setup", user_id)
        return None
    except SQLAlchemyError:
        await db.rollback()
        logger.warning("Civilization lookup failed for user %s; falling back to setup", user_id)
        return None
    return civilization


async def resolve_state(
    db: AsyncSession, user: User | None, recovering: bool = False
) -> tuple[AppState, Civilization | None]:
    if recovering:
        return AppState.reset_password, None
    if user is None:
        return AppState.login, None
    civilization = await lookup_civilization(db, user)
    if civilization is None:
        return AppState.setup, None
    return AppState.game, civilization


class SessionLifecycle:
    """Finite-state machine for a single player session.

    Only one action may be outstanding at a time; a second one raises
    ``ActionInProgress``. A recovery link pre-empts whatever is running: a
    routing result that lands after it is discarded.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.state = AppState.login
        self.user: User | None = None
        self.civilization: Civilization | None = None
        self.access_token: str | None = None
        self._recovery_token: str | None = None
        self._busy = False
        # Bumped by every event that invalidates in-flight routing
        self._generation = 0

    @property
    def busy(self) -> bool:
        return self._busy

    def _require(self, event: str, *states: AppState) -> None:
        if self.state not in states:
            raise InvalidTransition(self.state, event)
        if self._busy:
            raise ActionInProgress(event)

    @asynccontextmanager
    async def _action(self, event: str, *states: AppState):
        self._require(event, *states)
        self._busy = True
        try:
            yield
        finally:
            self._busy = False

    def _clear_session(self) -> None:
        self._generation += 1
        self.user = None
        self.civilization = None
        self.access_token = None
        self._recovery_token = None

    def _authenticated(self, user: User) -> None:
        self._generation += 1
        self.user = user
        self.access_token = create_access_token(user)

    async def _reload_user(self) -> None:
        # A rollback during the post-auth lookup leaves the user expired
        try:
            await self.db.refresh(self.user)
        except SQLAlchemyError as exc:
            await self.db.rollback()
            raise TransientStoreFailure("Could not load account, please retry") from exc

    async def _route_after_auth(self, user: User) -> None:
        generation = self._generation
        user_id = user.id
        civilization = await lookup_civilization(self.db, user)
        if generation != self._generation:
            logger.debug("Discarding stale routing result for user %s", user_id)
            return
        self.civilization = civilization
        self.state = AppState.game if civilization is not None else AppState.setup

    async def sign_in(self, email: str, password: str) -> AppState:
        async with self._action("sign in", AppState.login):
            generation = self._generation
            user = await authenticate_user(self.db, email, password)
            if generation != self._generation:
                return self.state
            if user is None:
                raise AuthError("Invalid email or password")
            self._authenticated(user)
            await self._route_after_auth(user)
        return self.state

    def switch_to_register(self) -> AppState:
        self._require("switch to register", AppState.login)
        self.state = AppState.register
        return self.state

    def switch_to_login(self) -> AppState:
        self._require("switch to login", AppState.register)
        self.state = AppState.login
        return self.state

    async def sign_up(self, email: str, username: str, password: str) -> AppState:
        async with self._action("sign up", AppState.register):
            if await get_user_by_email(self.db, email):
                raise InvalidOperation("Email already registered")
            if await get_user_by_username(self.db, username):
                raise InvalidOperation("Username already taken")
            user = await create_user(self.db, email=email, username=username, password=password)
            self._authenticated(user)
            # A brand-new account cannot own a civilization yet
            self.civilization = None
            self.state = AppState.setup
        return self.state

    async def recovery_detected(self, token: str) -> AppState:
        """Enter password recovery from any state."""
        user = await get_user_for_token(self.db, token, RECOVERY)
        if user is None:
            raise AuthError("Invalid or expired password reset link")
        self._clear_session()
        self.user = user
        self._recovery_token = token
        self.state = AppState.reset_password
        return self.state

    async def update_password(self, new_password: str) -> AppState:
        async with self._action("update password", AppState.reset_password):
            user = await get_user_for_token(self.db, self._recovery_token, RECOVERY)
            if user is None:
                raise AuthError("Invalid or expired password reset link")
            await update_password(self.db, user, new_password)
            # The reset revoked every token; the player must sign in again
            self._clear_session()
            self.state = AppState.login
        return self.state

    async def found(self, name: str) -> AppState:
        async with self._action("found a civilization", AppState.setup):
            await self._reload_user()
            user_id = self.user.id
            try:
                civilization, _ = await found_civilization(self.db, self.user, name)
            except AlreadyFounded:
                # Reached setup through the lookup fallback; the civilization is there
                civilization = await get_civilization_for_user(self.db, user_id)
                if civilization is None:
                    raise
            self.civilization = civilization
            self.state = AppState.game
        return self.state

    def sign_out(self) -> AppState:
        self._require("sign out", AppState.game)
        self._clear_session()
        self.state = AppState.login
        return self.state
