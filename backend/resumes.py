# resumes.py
from __future__ import annotations
import logging

from flask import Blueprint, g, jsonify
from pydantic import ValidationError
from pymongo.errors import PyMongoError

import resume_store
from errors import Internal, NotFound, ValidationFailed
from pipeline import PROTECTED_STAGES, install_stages
from schemas import CreateResumeRequest, ImageLinks, ResumeUpdate
from storage import get_db

logger = logging.getLogger(__name__)

resume_bp = install_stages(Blueprint("resume", __name__), PROTECTED_STAGES)

def _validate(model, data):
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ValidationFailed.from_pydantic(e)

def _found(doc):
    if doc is None:
        raise NotFound("Resume not found")
    return doc

# ------------------------------
# Create / List
# ------------------------------
@resume_bp.route("", methods=["POST"], strict_slashes=False)
def create_resume():
    body = _validate(CreateResumeRequest, g.body)
    try:
        doc = resume_store.create_resume(get_db(), g.user_id, body.title)
    except PyMongoError as e:
        raise Internal("Error creating resume", e)
    logger.info("user %s created resume %s", g.user_id, doc["_id"])
    return jsonify(doc), 201

@resume_bp.route("", methods=["GET"], strict_slashes=False)
def list_resumes():
    try:
        docs = resume_store.list_resumes(get_db(), g.user_id)
    except PyMongoError as e:
        raise Internal("Error fetching resumes", e)
    return jsonify(docs), 200

# ------------------------------
# Single resume (owner-scoped)
# ------------------------------
@resume_bp.get("/<resume_id>")
def get_resume(resume_id: str):
    try:
        doc = resume_store.get_resume(get_db(), g.user_id, resume_id)
    except PyMongoError as e:
        raise Internal("Error fetching resume", e)
    return jsonify(_found(doc)), 200

@resume_bp.put("/<resume_id>")
def update_resume(resume_id: str):
    """Whole-field replace of whatever top-level sections the client sent."""
    patch = _validate(ResumeUpdate, g.body)
    try:
        doc = resume_store.update_resume(get_db(), g.user_id, resume_id, patch.to_update())
    except PyMongoError as e:
        raise Internal("Error updating resume", e)
    return jsonify(_found(doc)), 200

@resume_bp.delete("/<resume_id>")
def delete_resume(resume_id: str):
    try:
        doc = resume_store.delete_resume(get_db(), g.user_id, resume_id)
    except PyMongoError as e:
        raise Internal("Error deleting resume", e)
    _found(doc)
    logger.info("user %s deleted resume %s", g.user_id, resume_id)
    return jsonify({"message": "Resume deleted successfully"}), 200

@resume_bp.put("/<resume_id>/upload-images")
def upload_images(resume_id: str):
    links = _validate(ImageLinks, g.body)
    try:
        doc = resume_store.update_image_links(
            get_db(), g.user_id, resume_id,
            thumbnail_link=links.thumbnail_link,
            profile_preview_url=links.profile_preview_url,
        )
    except PyMongoError as e:
        raise Internal("Error uploading images", e)
    return jsonify(_found(doc)), 200
