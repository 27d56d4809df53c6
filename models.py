import uuid

from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, Text, JSON, UniqueConstraint
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()

def new_id() -> str:
    return str(uuid.uuid4())

GUEST_EMAIL_PREFIX = "guest-"

# Models
class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    email = Column(String(255), unique=True, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    @property
    def is_guest(self) -> bool:
        return self.email.startswith(GUEST_EMAIL_PREFIX)

class StudentProfile(Base):
    __tablename__ = "student_profiles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    target_major = Column(String(255), nullable=False)
    target_term = Column(String(100))
    college = Column(String(255), nullable=False)
    undergrad_major = Column(String(255))
    cgpa = Column(Float)
    gre_quant_score = Column(Integer)
    gre_verbal_score = Column(Integer)
    gre_awa_score = Column(Float)
    toefl_score = Column(Integer)
    ielts = Column(Float)
    work_exp_months = Column(Integer)
    publications = Column(Integer)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

class ProgramFieldsMixin:
    """Program attributes shared by saved and public programs."""

    program_name = Column(String(255), nullable=False)
    university_name = Column(String(255), nullable=False)
    overview = Column(Text)
    gpa_requirement = Column(String(255))
    gre_requirement = Column(String(255))
    toefl_requirement = Column(String(255))
    ielts_requirement = Column(String(255))
    requirements_summary = Column(Text)
    deadline_hint = Column(String(255))
    duration = Column(String(100))
    cost_hint = Column(String(255))
    highlight1 = Column(Text)
    highlight2 = Column(Text)
    highlight3 = Column(Text)
    official_link = Column(String(1024))
    image_urls = Column(JSON, default=list)

class SavedProgram(ProgramFieldsMixin, Base):
    __tablename__ = "saved_programs"
    __table_args__ = (
        UniqueConstraint("user_id", "program_name", "university_name", name="uq_saved_program_per_user"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    match_score = Column(Integer)
    choice_type = Column(String(50))  # safe | target | ambitious
    created_at = Column(DateTime(timezone=True), server_default=func.now())

class PublicProgram(ProgramFieldsMixin, Base):
    __tablename__ = "public_programs"
    __table_args__ = (
        UniqueConstraint("program_name", "university_name", name="uq_public_program"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
