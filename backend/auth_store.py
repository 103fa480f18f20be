# auth_store.py
from __future__ import annotations
import logging
from typing import Optional, Dict, Any

from passlib.hash import pbkdf2_sha256
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from errors import Conflict
from helpers import _now, _oid

logger = logging.getLogger(__name__)

# -------- Users --------
def find_user_by_email(db: Database, email: str) -> Optional[Dict[str, Any]]:
    return db.users.find_one({"email": (email or "").lower().strip()})

def find_user_by_id(db: Database, user_id) -> Optional[Dict[str, Any]]:
    oid = _oid(user_id)
    if oid is None:
        return None
    return db.users.find_one({"_id": oid})

def _hash_password(pw: str) -> str:
    # salted, 29000+ rounds by default
    return pbkdf2_sha256.hash(pw)

def verify_password(pw: str, pw_hash: str) -> bool:
    try:
        return pbkdf2_sha256.verify(pw, pw_hash)
    except (ValueError, TypeError):
        # malformed or missing hash
        return False

def create_user(db: Database, name: str, email: str, password: str,
                profile_image_url: Optional[str] = None) -> Dict[str, Any]:
    email_n = (email or "").lower().strip()
    if find_user_by_email(db, email_n):
        raise Conflict()
    now = _now()
    doc = {
        "name": (name or "").strip(),
        "email": email_n,
        "password": _hash_password(password),
        "profileImageUrl": profile_image_url or None,
        "createdAt": now,
        "updatedAt": now,
    }
    try:
        db.users.insert_one(doc)
    except DuplicateKeyError:
        # lost a race with a concurrent register; unique index wins
        raise Conflict()
    logger.info("registered user %s", email_n)
    return doc

def public_user(doc: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in doc.items() if k != "password"}
