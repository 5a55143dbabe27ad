"""
agrimart/services/otp.py - Codes de vérification à usage unique

Les codes vivent dans la collection ``otps`` (un document par email).
L'envoi d'email est simulé: le code est écrit dans les logs.
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone

from fastapi import HTTPException

from agrimart.core.config import settings

logger = logging.getLogger(__name__)


def generate_otp(length: int = None) -> str:
    """Code numérique sans zéro en tête (ex: 6 chiffres → 100000..999999)"""
    length = length or settings.OTP_LENGTH
    low = 10 ** (length - 1)
    return str(low + secrets.randbelow(9 * low))


def is_expired(expires_at: datetime, now: datetime = None) -> bool:
    now = now or datetime.now(timezone.utc)
    # pymongo renvoie des datetimes naïfs (UTC)
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    return expires_at <= now


async def send_otp(db, email: str) -> str:
    otp = generate_otp()
    expires_at = datetime.now(timezone.utc) + timedelta(minutes=settings.OTP_EXPIRE_MINUTES)

    await db.otps.update_one(
        {"_id": email},
        {"$set": {"code": otp, "expires_at": expires_at}},
        upsert=True
    )

    logger.info("📧 OTP for %s: %s", email, otp)
    return otp


async def verify_otp(db, email: str, otp: str) -> bool:
    """Vérifie le code; il est supprimé après un succès"""
    stored = await db.otps.find_one({"_id": email})

    if not stored or is_expired(stored["expires_at"]):
        raise HTTPException(status_code=400, detail="OTP expired. Please request a new OTP")

    if not secrets.compare_digest(stored["code"].encode(), otp.strip().encode()):
        raise HTTPException(status_code=400, detail="The OTP you entered is incorrect")

    await db.otps.delete_one({"_id": email})
    return True
