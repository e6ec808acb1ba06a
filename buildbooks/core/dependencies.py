from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from buildbooks.core.database import SessionLocal
from buildbooks.core.identity import ActingUser
from buildbooks.core.security import decode_access_token
from buildbooks.models.user import UserRole


def get_db():
    """Dependency to get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# Use HTTPBearer so Swagger automatically asks for a token
bearer_scheme = HTTPBearer(auto_error=True)


def get_acting_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> ActingUser:
    """
    Build the acting user from the bearer token.
    Raises 401 if the token is invalid or carries no usable identity.
    """
    payload = decode_access_token(credentials.credentials)

    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token payload missing subject",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        role = UserRole(payload.get("role"))
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid role in token",
        )

    return ActingUser(id=str(user_id), role=role)
