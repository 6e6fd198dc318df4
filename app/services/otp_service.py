"""
One-time codes for registration and password reset.

Codes live in the `otp_codes` table rather than in process memory, so they
survive restarts and are shared by every worker. Only a bcrypt hash of the
code is stored. A key holds at most one code: the last put wins.
"""

import logging
import secrets
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, NamedTuple, Optional

from sqlalchemy.orm import Session

from app.core.security import hash_code, verify_code
from app.models.otp_code import OtpCode

logger = logging.getLogger(__name__)


class OtpState(str, Enum):
    VALID = "valid"
    INVALID = "invalid"
    EXPIRED = "expired"
    ABSENT = "absent"


class OtpLookup(NamedTuple):
    state: OtpState
    code_hash: Optional[str] = None


def generate_code() -> str:
    return str(secrets.randbelow(1000000)).zfill(6)


def registration_key(email: str) -> str:
    return f"register:{email.lower()}"


def reset_key(email: str) -> str:
    return f"reset:{email.lower()}"


class OtpStore:
    def __init__(self, db: Session, clock: Callable[[], datetime] = datetime.utcnow):
        self.db = db
        self.clock = clock

    def put(self, key: str, code: str, ttl: timedelta):
        entry = self.db.get(OtpCode, key)
        if entry is None:
            entry = OtpCode(key=key)
            self.db.add(entry)
        entry.code_hash = hash_code(code)
        entry.expires_at = self.clock() + ttl
        entry.created_at = self.clock()
        self.db.commit()
        logger.info("OTP issued for %s", key)

    def get(self, key: str) -> OtpLookup:
        entry = self.db.get(OtpCode, key)
        if entry is None:
            return OtpLookup(OtpState.ABSENT)
        if entry.expires_at < self.clock():
            return OtpLookup(OtpState.EXPIRED, entry.code_hash)
        return OtpLookup(OtpState.VALID, entry.code_hash)

    def verify(self, key: str, code: str) -> OtpState:
        lookup = self.get(key)
        if lookup.state == OtpState.EXPIRED:
            self.remove(key)
            return OtpState.EXPIRED
        if lookup.state == OtpState.ABSENT:
            return OtpState.ABSENT
        if not verify_code(code, lookup.code_hash):
            return OtpState.INVALID
        return OtpState.VALID

    def remove(self, key: str):
        deleted = self.db.query(OtpCode).filter(OtpCode.key == key).delete()
        self.db.commit()
        if deleted:
            logger.info("OTP consumed for %s", key)
