from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from bson import ObjectId
from bson.errors import InvalidId
from agrimart.core.config import settings
from agrimart.core.database import get_database

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
security = HTTPBearer()
optional_security = HTTPBearer(auto_error=False)


def _truncate(password: str) -> str:
    # bcrypt ignore tout au-delà de 72 octets
    password_bytes = password.encode('utf-8')
    if len(password_bytes) > 72:
        return password_bytes[:72].decode('utf-8', errors='ignore')
    return password


def hash_password(password: str) -> str:
    """Hasher un mot de passe avec bcrypt"""
    return pwd_context.hash(_truncate(password))


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Vérifier un mot de passe contre son hash"""
    if not hashed_password:
        return False
    return pwd_context.verify(_truncate(plain_password), hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    """Crée un token JWT"""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> str:
    """Retourne l'id utilisateur contenu dans le token"""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token")

    user_id = payload.get("id")
    if user_id is None:
        raise HTTPException(status_code=401, detail="Invalid token")
    return user_id


async def _load_profile(user_id: str) -> dict:
    db = get_database()
    try:
        profile = await db.profiles.find_one({"_id": ObjectId(user_id)})
    except InvalidId:
        raise HTTPException(status_code=401, detail="Invalid token")

    if profile is None:
        raise HTTPException(status_code=404, detail="User not found")
    return profile


async def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(security)):
    """Récupère le profil de l'utilisateur actuel depuis le token JWT"""
    return await _load_profile(decode_access_token(credentials.credentials))


async def get_optional_user(
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_security)
):
    """Comme get_current_user, mais None pour un visiteur sans token"""
    if credentials is None:
        return None
    return await _load_profile(decode_access_token(credentials.credentials))


async def get_current_admin(current_user: dict = Depends(get_current_user)):
    """Vérifie que l'utilisateur actuel est un admin"""
    if not current_user.get("is_admin"):
        raise HTTPException(status_code=403, detail="Admin access required")
    return current_user
