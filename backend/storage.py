# storage.py
from __future__ import annotations
import atexit
import logging
from typing import Optional

from flask import current_app
from pymongo import MongoClient, ASCENDING, DESCENDING
from pymongo.database import Database

logger = logging.getLogger(__name__)


class MongoStorage:
    """Owns the MongoClient for the life of the process.

    Created once by the app factory, connected at startup and closed at exit.
    Handlers reach it through ``get_db()``; nothing else holds the client.
    """

    def __init__(self, uri: str, db_name: str, client: Optional[MongoClient] = None):
        self.uri = uri
        self.db_name = db_name
        self._client = client
        self._db: Optional[Database] = None

    def init_app(self, app):
        app.extensions["mongo"] = self
        self.connect()
        atexit.register(self.close)

    def connect(self) -> Database:
        if self._client is None:
            self._client = MongoClient(self.uri, serverSelectionTimeoutMS=5000, tz_aware=True)
        self._db = self._client[self.db_name]
        self._ensure_indexes()
        logger.info("MongoDB connected (db=%s)", self.db_name)
        return self._db

    def _ensure_indexes(self):
        db = self._db
        db.users.create_index([("email", ASCENDING)], unique=True, name="uniq_email")
        db.resumes.create_index([("userId", ASCENDING)], name="resumes_user")
        db.resumes.create_index([("userId", ASCENDING), ("updatedAt", DESCENDING)], name="resumes_user_updated")

    @property
    def db(self) -> Database:
        if self._db is None:
            raise RuntimeError("MongoStorage used before connect()")
        return self._db

    def close(self):
        atexit.unregister(self.close)
        if self._client is not None:
            self._client.close()
            logger.info("MongoDB connection closed")
        self._client = None
        self._db = None


def get_db() -> Database:
    return current_app.extensions["mongo"].db
