import hmac
from datetime import datetime, timedelta, timezone
from passlib.context import CryptContext
import jwt
from app.core.config import settings

ADMIN_SCOPE = "admin"

pwd_ctx = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

def hash_password(plain: str) -> str:
    return pwd_ctx.hash(plain)

def verify_password(plain: str, hashed: str) -> bool:
    if not hashed:
        return False
    return pwd_ctx.verify(plain, hashed)

def authenticate_admin(email: str, password: str) -> bool:
    """Single administrator account configured through the environment."""
    same_email = hmac.compare_digest(
        email.strip().lower().encode("utf-8"),
        settings.ADMIN_EMAIL.strip().lower().encode("utf-8"),
    )
    return same_email and verify_password(password, settings.ADMIN_PASSWORD_HASH)

def create_admin_session(email: str) -> str:
    exp = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRES_MIN)
    payload = {"sub": email, "scope": ADMIN_SCOPE, "exp": exp}
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALG)

def decode_admin_session(token: str) -> dict:
    payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALG])
    if payload.get("scope") != ADMIN_SCOPE:
        raise jwt.InvalidTokenError("Token is not an admin session")
    return payload
