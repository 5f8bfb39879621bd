"""
Auth Service - password hashing, JWT tokens and FastAPI auth dependencies
"""
import binascii
import hashlib
import hmac
import logging
import os
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from app.core import get_settings, UserRole, DuplicateError
from database.connection import get_db
from database.models import User, Customer

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

# Stored format: "pbkdf2_sha256$<iterations>$<salt_hex>$<hash_hex>"
_PBKDF2_ALGO_PREFIX = "pbkdf2_sha256"
_PBKDF2_ITERATIONS = 100_000
_PBKDF2_SALT_BYTES = 16


def hash_password(password: str) -> str:
    """Return a PBKDF2-SHA256 hash string for the given password"""
    if not isinstance(password, str):
        raise TypeError("password must be a string")

    salt = os.urandom(_PBKDF2_SALT_BYTES)
    dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, _PBKDF2_ITERATIONS)
    salt_hex = binascii.hexlify(salt).decode("ascii")
    hash_hex = binascii.hexlify(dk).decode("ascii")
    return f"{_PBKDF2_ALGO_PREFIX}${_PBKDF2_ITERATIONS}${salt_hex}${hash_hex}"


def verify_password(password: str, encoded: Optional[str]) -> bool:
    """
    Verify a password against a stored hash.

    Returns False for empty or malformed hashes.
    """
    if not encoded:
        return False
    try:
        prefix, iter_str, salt_hex, hash_hex = encoded.split("$", 3)
        if prefix != _PBKDF2_ALGO_PREFIX:
            return False
        iterations = int(iter_str)
        salt = binascii.unhexlify(salt_hex.encode("ascii"))
        expected = binascii.unhexlify(hash_hex.encode("ascii"))
    except (ValueError, binascii.Error):
        return False

    dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    return hmac.compare_digest(dk, expected)


def create_access_token(user: User, expires_delta: Optional[timedelta] = None) -> str:
    settings = get_settings()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    payload = {
        "sub": str(user.id),
        "role": user.role,
        "exp": expire,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    """Check credentials and stamp last_login; None when they don't match

    Inactive accounts are returned unstamped so the caller can refuse them.
    """
    user = db.query(User).filter(User.email == email.strip().lower()).first()
    if not user:
        logger.warning(f"Authentication failed: user not found - {email}")
        return None

    if not verify_password(password, user.password_hash):
        logger.warning(f"Authentication failed: invalid password - {email}")
        return None

    if not user.is_active:
        logger.warning(f"Authentication refused: inactive account - {email}")
        return user

    user.last_login = datetime.now(timezone.utc)
    db.commit()
    db.refresh(user)

    logger.info(f"User authenticated: {email} ({user.role})")
    return user


def create_user(
    db: Session,
    email: str,
    password: str,
    name: Optional[str] = None,
    role: UserRole = UserRole.CONSIGNOR,
    customer_id: Optional[int] = None,
) -> User:
    """Create a login account; caller commits"""
    email = email.strip().lower()
    if db.query(User).filter(User.email == email).first():
        raise DuplicateError(f"An account with email {email} already exists")

    user = User(
        email=email,
        password_hash=hash_password(password),
        name=name,
        role=UserRole(role).value,
        customer_id=customer_id,
        is_active=True,
    )
    db.add(user)
    db.flush()
    return user


def register_consignor(
    db: Session,
    email: str,
    password: str,
    name: str,
    phone: Optional[str] = None,
) -> User:
    """
    Consignor sign-up: user account plus linked customer record.

    An existing customer with the same email (e.g. created by an admin
    intake) is linked instead of duplicated.
    """
    email = email.strip().lower()

    customer = db.query(Customer).filter(Customer.email == email).first()
    if customer is None:
        customer = Customer(name=name, email=email, phone=phone)
        db.add(customer)
        db.flush()

    try:
        user = create_user(
            db, email, password, name=name,
            role=UserRole.CONSIGNOR, customer_id=customer.id,
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(user)
    logger.info(f"Consignor registered: {email} (customer {customer.id})")
    return user


def ensure_admin(db: Session, email: str, password: str) -> User:
    """Create the bootstrap admin account if it is missing"""
    existing = db.query(User).filter(User.email == email.strip().lower()).first()
    if existing:
        return existing

    user = create_user(db, email, password, name="Admin", role=UserRole.ADMIN)
    db.commit()
    logger.info(f"Bootstrap admin created: {email}")
    return user


# ============================================================================
# DEPENDENCIES
# ============================================================================

def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None:
        raise credentials_exception

    settings = get_settings()
    try:
        payload = jwt.decode(
            credentials.credentials,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
        )
        user_id = int(payload.get("sub"))
    except (JWTError, TypeError, ValueError) as e:
        logger.warning(f"JWT validation error: {e}")
        raise credentials_exception

    user = db.get(User, user_id)
    if user is None:
        logger.warning(f"User not found for token: {user_id}")
        raise credentials_exception

    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is inactive")

    return user


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role != UserRole.ADMIN.value:
        logger.warning(f"Non-admin user attempted admin action: {current_user.email}")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return current_user


def require_consignor(current_user: User = Depends(get_current_user)) -> User:
    """Consignor endpoints need a linked customer record"""
    if current_user.customer_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User is not linked to a customer account",
        )
    return current_user
