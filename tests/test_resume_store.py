from datetime import datetime, timedelta, timezone

import mongomock
import pytest
from bson import ObjectId

import resume_store
from auth_store import create_user, find_user_by_id, public_user, verify_password
from errors import Conflict
from schemas import ResumeUpdate
from storage import MongoStorage

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def db():
    storage = MongoStorage("mongodb://unused", "store_test", client=mongomock.MongoClient())
    yield storage.connect()
    storage.close()


def test_storage_requires_connect():
    storage = MongoStorage("mongodb://unused", "x", client=mongomock.MongoClient())
    with pytest.raises(RuntimeError):
        storage.db


def test_create_user_hashes_and_conflicts(db):
    user = create_user(db, " Ann ", "Ann@X.com", "pw1")
    assert user["email"] == "ann@x.com"
    assert user["name"] == "Ann"
    assert verify_password("pw1", user["password"])
    assert not verify_password("pw2", user["password"])
    assert not verify_password("pw1", "garbage")
    assert "password" not in public_user(find_user_by_id(db, user["_id"]))

    with pytest.raises(Conflict):
        create_user(db, "Ann", "ann@x.com", "other")
    assert db.users.count_documents({}) == 1


def test_find_user_by_bad_id(db):
    assert find_user_by_id(db, "nope") is None
    assert find_user_by_id(db, None) is None


def test_list_orders_by_updated_at(db):
    uid = ObjectId()
    r1 = resume_store.create_resume(db, uid, "R1", now=T0)["_id"]
    r2 = resume_store.create_resume(db, uid, "R2", now=T0)["_id"]
    r3 = resume_store.create_resume(db, uid, "R3", now=T0)["_id"]
    for i, rid in enumerate((r1, r2, r3), start=1):
        resume_store.update_resume(db, uid, rid, {"title": f"R{i}!"}, now=T0 + timedelta(seconds=i))

    assert [d["_id"] for d in resume_store.list_resumes(db, uid)] == [r3, r2, r1]


def test_owner_scoping(db):
    owner, other = ObjectId(), ObjectId()
    rid = resume_store.create_resume(db, owner, "Mine")["_id"]

    assert resume_store.get_resume(db, other, rid) is None
    assert resume_store.update_resume(db, other, rid, {"title": "x"}) is None
    assert resume_store.update_image_links(db, other, rid, thumbnail_link="x") is None
    assert resume_store.delete_resume(db, other, rid) is None
    assert resume_store.get_resume(db, owner, rid)["title"] == "Mine"
    assert resume_store.list_resumes(db, other) == []


def test_update_ignores_identity_fields(db):
    owner = ObjectId()
    created = resume_store.create_resume(db, owner, "Mine", now=T0)
    doc = resume_store.update_resume(db, owner, created["_id"], {
        "userId": ObjectId(), "createdAt": T0 + timedelta(days=1), "title": "Renamed",
    })
    assert doc["userId"] == owner
    assert doc["title"] == "Renamed"


def test_resume_update_dump_only_sent_fields():
    patch = ResumeUpdate.model_validate({
        "contactInfo": {"email": "ann@x.com", "phone": None},
        "languages": [{"name": "French", "progress": 60}],
        "__v": 3,
    })
    assert patch.to_update() == {
        "contactInfo": {
            "email": "ann@x.com", "phone": "", "location": "", "linkedin": "", "github": "", "website": "",
        },
        "languages": [{"name": "French", "progress": 60}],
    }


def test_same_millisecond_updates_list_newest_created_first(db):
    uid = ObjectId()
    r1, r2, r3 = (resume_store.create_resume(db, uid, t, now=T0)["_id"] for t in ("R1", "R2", "R3"))
    for rid in (r3, r2, r1):
        resume_store.update_resume(db, uid, rid, {"title": "same ms"}, now=T0 + timedelta(seconds=1))

    assert [d["_id"] for d in resume_store.list_resumes(db, uid)] == [r3, r2, r1]


def test_close_releases_exit_hook(monkeypatch):
    import atexit
    from flask import Flask

    calls = []
    monkeypatch.setattr(atexit, "register", lambda fn: calls.append(("register", fn)))
    monkeypatch.setattr(atexit, "unregister", lambda fn: calls.append(("unregister", fn)))

    app = Flask(__name__)
    storage = MongoStorage("mongodb://unused", "hooks", client=mongomock.MongoClient())
    storage.init_app(app)
    assert app.extensions["mongo"] is storage
    assert calls == [("register", storage.close)]

    storage.close()
    assert calls[-1] == ("unregister", storage.close)
    with pytest.raises(RuntimeError):
        storage.db
