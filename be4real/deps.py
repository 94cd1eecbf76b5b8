from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from be4real.core import security
from be4real.core.errors import ForbiddenError, UnauthenticatedError
from be4real.db.session import get_db
from be4real.modules.user_management.models.user import User
from be4real.modules.user_management.services.user import get_user

# Bearer token scheme; missing headers are reported by the dependencies below
bearer_scheme = HTTPBearer(auto_error=False)

def _resolve_user(db: Session, credentials: Optional[HTTPAuthorizationCredentials]) -> User:
    if credentials is None or not credentials.credentials:
        raise UnauthenticatedError("Missing authorization header")

    user_id = security.verify_access_token(credentials.credentials)
    if not user_id:
        raise UnauthenticatedError("Invalid token or token expired")

    user = get_user(db, user_id=user_id)
    if not user:
        raise UnauthenticatedError("User not found")
    return user

def get_current_user(
    db: Session = Depends(get_db),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> User:
    """
    Dependency for getting current authenticated user
    """
    return _resolve_user(db, credentials)

def get_current_active_verified_user(
    current_user: User = Depends(get_current_user),
) -> User:
    """
    Dependency for getting current verified user
    """
    # Federated accounts are verified by their provider
    if current_user.login_method == "google":
        return current_user

    if not current_user.is_verified:
        raise ForbiddenError("Email not verified")

    return current_user

def get_optional_user(
    db: Session = Depends(get_db),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[User]:
    """
    Dependency for endpoints that accept but do not require a credential.
    A credential that is present must still be valid.
    """
    if credentials is None:
        return None
    return _resolve_user(db, credentials)
