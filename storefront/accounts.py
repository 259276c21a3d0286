"""Storefront accounts: signup and login against locally registered users.

This stands in for a real identity provider. It is not a hardened
credential system.
"""

import base64
import logging
import os
from dataclasses import dataclass
from typing import Optional

from cryptography.exceptions import InvalidKey
from cryptography.hazmat.primitives import constant_time, hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.config import settings
from storefront.db.models import Account

logger = logging.getLogger(__name__)

RESET_SENT_MESSAGE = "If this email is registered, a reset link has been sent."


class AccountError(ValueError):
    """Signup or login rejected; the message is shown to the user."""


@dataclass
class UserProfile:
    """The logged-in user as the client stores it."""

    name: str
    email: str
    is_admin: bool = False


def _kdf(salt: bytes, iterations: int) -> PBKDF2HMAC:
    return PBKDF2HMAC(algorithm=hashes.SHA256(), length=32, salt=salt, iterations=iterations)


def hash_password(password: str, salt: bytes, iterations: int) -> str:
    """Derive a PBKDF2-SHA256 key; returned as urlsafe base64."""
    key = _kdf(salt, iterations).derive(password.encode("utf-8"))
    return base64.urlsafe_b64encode(key).decode()


def set_password(account: Account, password: str):
    """Store a freshly salted hash of the password on the account."""
    salt = os.urandom(16)
    account.password_salt = base64.urlsafe_b64encode(salt).decode()
    account.password_iterations = settings.password_hash_iterations
    account.password_hash = hash_password(password, salt, account.password_iterations)


def verify_password(account: Account, password: str) -> bool:
    salt = base64.urlsafe_b64decode(account.password_salt.encode())
    expected = base64.urlsafe_b64decode(account.password_hash.encode())
    try:
        _kdf(salt, account.password_iterations).verify(password.encode("utf-8"), expected)
    except InvalidKey:
        return False
    return True


class AccountService:
    """Registers and authenticates storefront users."""

    async def signup(self, db: AsyncSession, name: str, email: str, password: str) -> UserProfile:
        name, email = (name or "").strip(), (email or "").strip().lower()
        if not name or not email or not password:
            raise AccountError("Please fill all fields.")

        existing = await db.execute(select(Account).where(Account.email == email))
        if existing.scalar_one_or_none() or email == settings.admin_email.lower():
            raise AccountError("Email already registered.")

        account = Account(name=name, email=email)
        set_password(account, password)
        db.add(account)
        await db.commit()
        logger.info(f"Account registered: {email}")
        return UserProfile(name=name, email=email)

    async def login(self, db: AsyncSession, email: str, password: str) -> UserProfile:
        email = (email or "").strip().lower()

        result = await db.execute(select(Account).where(Account.email == email))
        account = result.scalar_one_or_none()
        if account and verify_password(account, password or ""):
            return UserProfile(name=account.name, email=account.email)

        if email == settings.admin_email.lower() and constant_time.bytes_eq(
            (password or "").encode("utf-8"), settings.admin_password.encode("utf-8")
        ):
            return UserProfile(name="Admin", email=settings.admin_email, is_admin=True)

        logger.warning(f"Failed login for {email}")
        raise AccountError("Invalid email or password.")

    async def forgot_password(self, email: str) -> str:
        # No mail delivery; the answer never reveals whether the email exists
        logger.info(f"Password reset requested for {(email or '').strip().lower()}")
        return RESET_SENT_MESSAGE


# Global account service instance
account_service = AccountService()
