"""Password hashing and access token helpers.

Passwords are hashed with bcrypt. Access tokens are HS256 JWTs signed with
python-jose; their claims are checked for expiry by ``decode_access_token``
against the caller-supplied clock rather than by the library.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

import bcrypt
import pytz
from jose import JWTError, jwt
from pydantic import ValidationError as PydanticValidationError

import config
from core.exceptions import TokenExpired, Unauthorized
from schemas.user import TokenClaims, User

logger = logging.getLogger(__name__)

# bcrypt ignores everything after the first 72 bytes
BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    """Hash a password using bcrypt.

    Args:
        password: Plain text password.

    Returns:
        Hashed password (bcrypt hash string).
    """
    salt = bcrypt.gensalt(rounds=config.BCRYPT_ROUNDS)
    return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a bcrypt hash.

    bcrypt.checkpw compares digests in constant time.

    Args:
        plain_password: Plain text password to verify.
        hashed_password: Bcrypt hash string to verify against.

    Returns:
        True if password matches, False otherwise.
    """
    try:
        return bcrypt.checkpw(
            _password_bytes(plain_password), hashed_password.encode("utf-8")
        )
    except ValueError as e:
        logger.error("Password verification error: %s", e)
        return False


# Hashed once at import so no login pays for building it
DUMMY_PASSWORD_HASH = hash_password("school-portal-dummy-password")


def burn_password_check(plain_password: str) -> None:
    """Spend the same time as a real check when no account was found."""
    verify_password(plain_password, DUMMY_PASSWORD_HASH)


def create_access_token(user: User, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token for ``user``.

    Args:
        user: Account the token is issued for.
        expires_delta: Optional expiration time delta (default one day).

    Returns:
        Encoded JWT token string.
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES)
    expire = datetime.now(pytz.utc) + expires_delta
    to_encode = {
        "sub": user.user_id,
        "username": user.username,
        "role": user.role.value,
        "exp": int(expire.timestamp()),
    }
    return jwt.encode(to_encode, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def decode_access_token(token: str, now: Optional[datetime] = None) -> TokenClaims:
    """Decode a token and check its expiry claim.

    Args:
        token: Encoded JWT.
        now: Request time (defaults to the current UTC time).

    Returns:
        The token's claims.

    Raises:
        Unauthorized: If the token is malformed, tampered with or lacks claims.
        TokenExpired: If the expiry claim lies before ``now``.
    """
    try:
        payload = jwt.decode(
            token,
            config.JWT_SECRET_KEY,
            algorithms=[config.JWT_ALGORITHM],
            options={"verify_exp": False},
        )
    except JWTError:
        raise Unauthorized("Invalid token")

    try:
        claims = TokenClaims(
            user_id=payload.get("sub"),
            username=payload.get("username"),
            role=payload.get("role"),
            exp=payload.get("exp"),
        )
    except PydanticValidationError:
        raise Unauthorized("Invalid token")

    now = now or datetime.now(pytz.utc)
    if claims.exp < now.timestamp():
        raise TokenExpired()
    return claims
