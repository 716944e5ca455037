"""
Admin authentication.

Passwords are bcrypt hashed through passlib; sessions are stateless HS256
JWTs carrying the admin id in `sub`. Routers depend on `get_current_admin`
or on `require_permission(...)` for a per-endpoint permission gate.
"""

from datetime import datetime, timedelta
from typing import Optional

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from statusmaker.core.config import settings
from statusmaker.core.database import get_db
from statusmaker.models.admin import Admin, AdminContext, AdminPermission

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# auto_error off so a missing header becomes our 401 instead of FastAPI's 403
security = HTTPBearer(auto_error=False)

TOKEN_TYPE = "access"


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(admin_id: int, expires_delta: Optional[timedelta] = None) -> str:
    """
    Issue a signed token for `admin_id`.

    Lifetime defaults to ACCESS_TOKEN_EXPIRE_HOURS.
    """
    issued_at = datetime.utcnow()
    lifetime = expires_delta or timedelta(hours=settings.ACCESS_TOKEN_EXPIRE_HOURS)
    claims = {
        "sub": str(admin_id),
        "iat": issued_at,
        "exp": issued_at + lifetime,
        "type": TOKEN_TYPE,
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> Optional[int]:
    """Admin id from a valid token; None for expired, forged or malformed ones"""
    try:
        claims = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.PyJWTError:
        return None

    if claims.get("type") != TOKEN_TYPE:
        return None
    try:
        return int(claims["sub"])
    except (KeyError, TypeError, ValueError):
        return None


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid authentication credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> AdminContext:
    """
    Resolve the active admin behind the Bearer token.

    Raises:
        HTTPException: 401 when the header is missing, the token does not
            verify, or the admin no longer exists or was deactivated
    """
    admin_id = decode_access_token(credentials.credentials) if credentials else None
    if admin_id is None:
        raise _unauthorized()

    admin = db.query(Admin).filter(Admin.id == admin_id, Admin.is_active == True).first()
    if admin is None:
        raise _unauthorized()

    return AdminContext.from_admin(admin)


def require_permission(permission: AdminPermission):
    """
    Dependency factory gating an endpoint on one permission.

        admin: AdminContext = Depends(require_permission(AdminPermission.MANAGE_ASSETS))

    super_admin passes every check (see AdminContext.has_permission).
    """
    async def check(admin: AdminContext = Depends(get_current_admin)) -> AdminContext:
        if not admin.has_permission(permission):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Permission '{permission.value}' required",
            )
        return admin

    return check
