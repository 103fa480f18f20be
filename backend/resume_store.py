# resume_store.py
from __future__ import annotations
from datetime import datetime
from typing import Any, Dict, List, Optional

from pymongo import DESCENDING, ReturnDocument
from pymongo.database import Database

from helpers import _now, _oid
from schemas import default_resume_content

# Every query below is scoped by {_id, userId}: a resume owned by someone
# else looks exactly like one that does not exist.

def _owned(user_id, resume_id) -> Optional[Dict[str, Any]]:
    rid, uid = _oid(resume_id), _oid(user_id)
    if rid is None or uid is None:
        return None
    return {"_id": rid, "userId": uid}

def create_resume(db: Database, user_id, title: str, now: Optional[datetime] = None) -> Dict[str, Any]:
    uid = _oid(user_id)
    if uid is None:
        raise ValueError(f"invalid user id: {user_id!r}")
    now = now or _now()
    doc = {"userId": uid, **default_resume_content(title), "createdAt": now, "updatedAt": now}
    res = db.resumes.insert_one(doc)
    doc["_id"] = res.inserted_id
    return doc

def list_resumes(db: Database, user_id) -> List[Dict[str, Any]]:
    uid = _oid(user_id)
    if uid is None:
        return []
    # updatedAt is millisecond-precise; writes in the same ms fall back to newest-created first
    cur = db.resumes.find({"userId": uid}).sort([("updatedAt", DESCENDING), ("_id", DESCENDING)])
    return list(cur)

def get_resume(db: Database, user_id, resume_id) -> Optional[Dict[str, Any]]:
    query = _owned(user_id, resume_id)
    if query is None:
        return None
    return db.resumes.find_one(query)

def update_resume(db: Database, user_id, resume_id, fields: Dict[str, Any],
                  now: Optional[datetime] = None) -> Optional[Dict[str, Any]]:
    """Overwrite the given top-level fields. No merge, last write wins."""
    query = _owned(user_id, resume_id)
    if query is None:
        return None
    # owner, id and creation time are never client-writable
    fields = {k: v for k, v in fields.items() if k not in ("_id", "userId", "createdAt", "updatedAt")}
    return db.resumes.find_one_and_update(
        query,
        {"$set": {**fields, "updatedAt": now or _now()}},
        return_document=ReturnDocument.AFTER,
    )

def delete_resume(db: Database, user_id, resume_id) -> Optional[Dict[str, Any]]:
    query = _owned(user_id, resume_id)
    if query is None:
        return None
    return db.resumes.find_one_and_delete(query)

def update_image_links(db: Database, user_id, resume_id,
                       thumbnail_link: Optional[str] = None,
                       profile_preview_url: Optional[str] = None,
                       now: Optional[datetime] = None) -> Optional[Dict[str, Any]]:
    """Touch only the thumbnail and profile-preview links; empty values are skipped."""
    query = _owned(user_id, resume_id)
    if query is None:
        return None
    update: Dict[str, Any] = {"updatedAt": now or _now()}
    if thumbnail_link:
        update["thumbnailLink"] = thumbnail_link
    if profile_preview_url:
        update["profileInfo.profilePreviewUrl"] = profile_preview_url
    return db.resumes.find_one_and_update(query, {"$set": update}, return_document=ReturnDocument.AFTER)
