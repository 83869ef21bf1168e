"""
Dashboard session.
"""
from typing import Any, Optional

from starlette.concurrency import run_in_threadpool

from studio.exceptions.handlers import ExternalServiceError, SupabaseConfigError
from studio.logging.config import get_structured_logger
from studio.repositories.supabase import SupabaseRepository

logger = get_structured_logger(__name__)

INVALID_CREDENTIAL_STATUSES = (400, 401)


def _field(obj: Any, name: str) -> Any:
    """Attribute of a Supabase auth object, or key of its dict form."""
    if obj is None:
        return None
    value = getattr(obj, name, None)
    if value is None and isinstance(obj, dict):
        value = obj.get(name)
    return value


def _is_invalid_credentials(error: Exception) -> bool:
    status = getattr(error, "status", None)
    return status in INVALID_CREDENTIAL_STATUSES or "invalid login credentials" in str(error).lower()


class SessionService:
    """Holds the signed-in session; created once and passed to whoever needs it."""

    def __init__(self, repository=SupabaseRepository):
        self.repository = repository
        self.session: Any = None
        self.user: Any = None

    @property
    def is_authenticated(self) -> bool:
        return self.session is not None

    @property
    def access_token(self) -> Optional[str]:
        return _field(self.session, "access_token")

    @property
    def refresh_token(self) -> Optional[str]:
        return _field(self.session, "refresh_token")

    @property
    def user_id(self) -> Optional[str]:
        return _field(self.user, "id")

    @property
    def email(self) -> Optional[str]:
        return _field(self.user, "email")

    async def initialize(self) -> bool:
        """Restore a persisted session, if the auth client has one."""
        try:
            session = await run_in_threadpool(self.repository.get_session)
        except SupabaseConfigError:
            raise
        except Exception as e:
            logger.error("Session restore failed err=%s", str(e))
            raise ExternalServiceError(f"Session restore failed: {str(e)}", "SESSION_RESTORE_FAILED")
        self.session = session
        self.user = _field(session, "user")
        return self.is_authenticated

    async def login(self, email: str, password: str) -> bool:
        """Password sign-in; False on wrong credentials."""
        try:
            resp = await run_in_threadpool(self.repository.sign_in, email, password)
        except SupabaseConfigError:
            raise
        except Exception as e:
            if _is_invalid_credentials(e):
                logger.warning("Login rejected email=%s", email)
                return False
            logger.error("Login failed email=%s err=%s", email, str(e))
            raise ExternalServiceError(f"Login failed: {str(e)}", "LOGIN_FAILED")

        session = _field(resp, "session")
        if session is None or not _field(session, "access_token"):
            logger.warning("Login returned no session email=%s", email)
            return False
        self.session = session
        self.user = _field(resp, "user")
        logger.info("Login successful user_id=%s", self.user_id)
        return True

    async def logout(self) -> None:
        """Sign out and forget the session."""
        try:
            await run_in_threadpool(self.repository.sign_out)
        except SupabaseConfigError:
            raise
        except Exception as e:
            logger.error("Logout failed err=%s", str(e))
            raise ExternalServiceError(f"Logout failed: {str(e)}", "LOGOUT_FAILED")
        finally:
            self.session = None
            self.user = None
