import logging
from datetime import datetime, timedelta
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlmodel import Session

from bazarika.config import settings
from bazarika.constants import roles
from bazarika.database import get_session
from bazarika.models.profile import Profile

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    """
    Sign a token the same way the auth provider does.
    Used by local tooling and tests; production tokens come from the provider.
    """
    to_encode = data.copy()

    expire = datetime.utcnow() + (
        expires_delta
        if expires_delta
        else timedelta(minutes=settings.access_token_expire_minutes)
    )

    to_encode.update({"exp": expire})
    if settings.jwt_audience:
        to_encode.setdefault("aud", settings.jwt_audience)

    return jwt.encode(
        to_encode,
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm
    )


def decode_access_token(token: str):
    try:
        return jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            options={"verify_aud": bool(settings.jwt_audience)},
        )
    except JWTError as e:
        logger.info("Rejected bearer token: %s", e)
        return None


def _profile_from_claims(session: Session, payload: dict) -> Profile:
    user_id = payload.get("sub")

    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload"
        )

    profile = session.get(Profile, str(user_id))
    if profile is None:
        metadata = payload.get("user_metadata") or {}
        profile = Profile(
            id=str(user_id),
            email=payload.get("email"),
            full_name=metadata.get("full_name"),
        )
        session.add(profile)
        session.commit()
        session.refresh(profile)
        logger.info("Created profile %s on first sign-in", profile.id)

    return profile


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    session: Session = Depends(get_session)
) -> Profile:
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = decode_access_token(credentials.credentials)

    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return _profile_from_claims(session, payload)


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    session: Session = Depends(get_session)
) -> Optional[Profile]:
    # anonymous shoppers still get a cart, so a bad or missing token is not an error here
    if credentials is None:
        return None

    payload = decode_access_token(credentials.credentials)
    if payload is None or payload.get("sub") is None:
        return None

    return _profile_from_claims(session, payload)


def is_admin(profile: Profile) -> bool:
    if profile.role == roles.ADMIN:
        return True
    return bool(profile.email) and profile.email.lower() in {
        e.lower() for e in settings.ADMIN_EMAILS
    }
