"""
Admin Authentication API

POST /api/admin/auth/login exchanges email + password for a JWT bearer
token; GET /api/admin/auth/me returns the admin behind a token.
"""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, EmailStr
from sqlalchemy.orm import Session

from statusmaker.core.auth import create_access_token, get_current_admin, verify_password
from statusmaker.core.database import commit_or_rollback, get_db
from statusmaker.core.exceptions import AuthenticationError, PermissionDeniedError
from statusmaker.models.admin import Admin, AdminContext

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/admin/auth", tags=["Authentication"])


# ====================
# Request/Response Models
# ====================

class LoginRequest(BaseModel):
    """Login credentials"""
    email: EmailStr
    password: str


class LoginResponse(BaseModel):
    """Login response with JWT token"""
    access_token: str
    token_type: str = "bearer"
    admin: dict


# ====================
# Authentication Endpoints
# ====================

@router.post("/login", response_model=LoginResponse)
def login(
    credentials: LoginRequest,
    request: Request,
    db: Session = Depends(get_db)
):
    """
    Login with email and password

    Returns a JWT access token. Token expires after
    ACCESS_TOKEN_EXPIRE_HOURS (24 by default).
    """
    admin = db.query(Admin).filter(Admin.email == credentials.email).first()

    if not admin or not verify_password(credentials.password, admin.password_hash):
        logger.warning(f"Failed admin login for {credentials.email}")
        raise AuthenticationError("Incorrect email or password")

    if not admin.is_active:
        raise PermissionDeniedError("Account is deactivated")

    # Update last login
    admin.last_login_at = datetime.utcnow()
    admin.last_login_ip = request.client.host if request.client else None
    commit_or_rollback(db)

    logger.info(f"Admin {admin.id} logged in from {admin.last_login_ip}")

    return LoginResponse(
        access_token=create_access_token(admin.id),
        token_type="bearer",
        admin=admin.to_dict()
    )


@router.get("/me")
def get_me(
    admin: AdminContext = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    """Get the authenticated admin's profile"""
    record = db.query(Admin).filter(Admin.id == admin.id).first()
    return record.to_dict()
