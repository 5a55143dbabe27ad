"""Tests des codes de vérification."""

import asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest
from fastapi import HTTPException

from agrimart.services import otp as otp_service


def test_generated_code_has_six_digits_without_leading_zero():
    for _ in range(50):
        code = otp_service.generate_otp()
        assert len(code) == 6
        assert code.isdigit()
        assert code[0] != "0"


def test_is_expired_handles_naive_datetimes():
    now = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    assert otp_service.is_expired(datetime(2024, 5, 1, 11, 59), now)
    assert not otp_service.is_expired(datetime(2024, 5, 1, 12, 5), now)


def test_send_stores_code_for_email(db):
    code = asyncio.run(otp_service.send_otp(db, "r@example.com"))

    args, kwargs = db.otps.update_one.call_args
    assert args[0] == {"_id": "r@example.com"}
    assert args[1]["$set"]["code"] == code
    assert kwargs == {"upsert": True}


def test_verify_consumes_code(db):
    expires = datetime.now(timezone.utc) + timedelta(minutes=5)
    db.otps.find_one = AsyncMock(return_value={"_id": "r@example.com", "code": "123456", "expires_at": expires})

    assert asyncio.run(otp_service.verify_otp(db, "r@example.com", " 123456 ")) is True
    db.otps.delete_one.assert_awaited_once_with({"_id": "r@example.com"})


def test_verify_wrong_code(db):
    expires = datetime.now(timezone.utc) + timedelta(minutes=5)
    db.otps.find_one = AsyncMock(return_value={"_id": "r@example.com", "code": "123456", "expires_at": expires})

    with pytest.raises(HTTPException) as exc:
        asyncio.run(otp_service.verify_otp(db, "r@example.com", "654321"))

    assert exc.value.detail == "The OTP you entered is incorrect"
    db.otps.delete_one.assert_not_awaited()


def test_verify_without_code_or_expired(db):
    with pytest.raises(HTTPException) as exc:
        asyncio.run(otp_service.verify_otp(db, "r@example.com", "123456"))
    assert "expired" in exc.value.detail

    expired = datetime.now(timezone.utc) - timedelta(seconds=1)
    db.otps.find_one = AsyncMock(return_value={"_id": "r@example.com", "code": "123456", "expires_at": expired})
    with pytest.raises(HTTPException):
        asyncio.run(otp_service.verify_otp(db, "r@example.com", "123456"))


def test_verify_non_ascii_code_is_incorrect(db):
    expires = datetime.now(timezone.utc) + timedelta(minutes=5)
    db.otps.find_one = AsyncMock(return_value={"_id": "r@example.com", "code": "123456", "expires_at": expires})

    with pytest.raises(HTTPException) as exc:
        asyncio.run(otp_service.verify_otp(db, "r@example.com", "１２３４５６"))

    assert exc.value.status_code == 400
    assert exc.value.detail == "The OTP you entered is incorrect"
