from dataclasses import dataclass, field
from typing import List, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlmodel import Session, select

from app.database import get_session
from app.models.profile import Profile
from app.models.user import User
from app.models.user_role import AppRole, UserRole
from app.utils.token import decode_access_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


@dataclass
class SessionContext:
    """Who is calling: the signed-in user with their profile and roles."""

    user: User
    profile: Optional[Profile] = None
    roles: List[str] = field(default_factory=list)

    @property
    def user_id(self) -> str:
        return self.user.id

    @property
    def is_admin(self) -> bool:
        return AppRole.admin.value in self.roles

    @property
    def is_seller(self) -> bool:
        # admins can do everything sellers can
        return self.is_admin or AppRole.seller.value in self.roles

    def has_role(self, *roles: str) -> bool:
        return any(r in self.roles for r in roles)


def load_session_context(session: Session, user: User) -> SessionContext:
    profile = session.get(Profile, user.id)
    roles = session.exec(
        select(UserRole.role).where(UserRole.user_id == user.id)
    ).all()
    return SessionContext(user=user, profile=profile, roles=list(roles))


def _context_from_token(token: str, session: Session) -> SessionContext:
    user_id = decode_access_token(token)
    user = session.get(User, user_id) if user_id else None
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.can_login:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is disabled"
        )

    return load_session_context(session, user)


def get_session_context(
    token: Optional[str] = Depends(oauth2_scheme),
    session: Session = Depends(get_session),
) -> SessionContext:
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No authorization header",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return _context_from_token(token, session)


def get_optional_session_context(
    token: Optional[str] = Depends(oauth2_scheme),
    session: Session = Depends(get_session),
) -> Optional[SessionContext]:
    """Guest checkout and chat work without a token; a bad token is still rejected."""
    if not token:
        return None
    return _context_from_token(token, session)
