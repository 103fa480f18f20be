"""Request schemas for the auth and resume endpoints.

Each nested resume section is its own model so a PUT is validated section
by section before anything reaches Mongo. Field names are snake_case in
Python and camelCase on the wire and in storage (``by_alias=True``).
"""
from __future__ import annotations
import re
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class _Section(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    @field_validator("*", mode="before")
    @classmethod
    def _null_to_default(cls, v, info):
        # clients send null for cleared inputs; store the empty default instead
        field = cls.model_fields[info.field_name]
        if v is None and not field.is_required():
            return field.get_default(call_default_factory=True)
        return v


# ---- auth ----
class RegisterRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str = Field(..., min_length=1, max_length=100)
    email: str
    password: str = Field(..., min_length=1)
    profileImageUrl: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name is required")
        return v

    @field_validator("email")
    @classmethod
    def _check_email(cls, v: str) -> str:
        v = v.strip().lower()
        if not EMAIL_RE.match(v):
            raise ValueError("invalid email format")
        return v


class LoginRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    email: str
    password: str

    @field_validator("email")
    @classmethod
    def _norm_email(cls, v: str) -> str:
        return v.strip().lower()


# ---- resume sections ----
class Template(_Section):
    theme: str = ""
    color_palette: str = ""


class ProfileInfo(_Section):
    profile_img: str = ""
    profile_preview_url: str = ""
    full_name: str = ""
    designation: str = ""
    summary: str = ""


class ContactInfo(_Section):
    email: str = ""
    phone: str = ""
    location: str = ""
    linkedin: str = ""
    github: str = ""
    website: str = ""


class WorkExperience(_Section):
    company: str = ""
    role: str = ""
    start_date: str = ""
    end_date: str = ""
    description: str = ""


class Education(_Section):
    degree: str = ""
    institution: str = ""
    start_date: str = ""
    end_date: str = ""


class Skill(_Section):
    name: str = ""
    progress: int = Field(0, ge=0, le=100)


class Project(_Section):
    title: str = ""
    description: str = ""
    github: str = ""
    live_demo: str = ""


class Certification(_Section):
    title: str = ""
    issuer: str = ""
    year: str = ""


class Language(_Section):
    name: str = ""
    progress: int = Field(0, ge=0, le=100)


class ResumeContent(_Section):
    """Everything a resume holds apart from identity, owner and timestamps."""
    title: str = ""
    thumbnail_link: str = ""
    template: Template = Field(default_factory=Template)
    profile_info: ProfileInfo = Field(default_factory=ProfileInfo)
    contact_info: ContactInfo = Field(default_factory=ContactInfo)
    work_experience: List[WorkExperience] = Field(default_factory=list)
    education: List[Education] = Field(default_factory=list)
    skills: List[Skill] = Field(default_factory=list)
    projects: List[Project] = Field(default_factory=list)
    certifications: List[Certification] = Field(default_factory=list)
    languages: List[Language] = Field(default_factory=list)
    interests: List[str] = Field(default_factory=list)

    @field_validator("interests")
    @classmethod
    def _drop_blank_interests(cls, v: List[str]) -> List[str]:
        return [i.strip() for i in v if i and i.strip()]


class CreateResumeRequest(_Section):
    title: str

    @field_validator("title")
    @classmethod
    def _title_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title is required")
        return v


class ResumeUpdate(ResumeContent):
    """PUT body. Only keys the client sent are written (whole-field replace)."""

    def to_update(self) -> dict:
        # sent sections are dumped whole, defaults included, so they replace
        return self.model_dump(by_alias=True, include=set(self.model_fields_set))


class ImageLinks(_Section):
    thumbnail_link: Optional[str] = None
    profile_preview_url: Optional[str] = None


def default_resume_content(title: str) -> dict:
    return ResumeContent(title=title).model_dump(by_alias=True)
