"""
CRUD operations for database models.
"""

import logging
import uuid

from sqlalchemy import and_, func
from sqlalchemy.orm import Session
from models import User, StudentProfile, SavedProgram, PublicProgram, GUEST_EMAIL_PREFIX
from typing import List, Optional, Dict, Tuple

logger = logging.getLogger(__name__)

PROGRAM_FIELDS = [
    "program_name",
    "university_name",
    "overview",
    "gpa_requirement",
    "gre_requirement",
    "toefl_requirement",
    "ielts_requirement",
    "requirements_summary",
    "deadline_hint",
    "duration",
    "cost_hint",
    "highlight1",
    "highlight2",
    "highlight3",
    "official_link",
    "image_urls",
]

def _program_columns(program: Dict) -> Dict:
    values = {key: program.get(key) for key in PROGRAM_FIELDS if key in program}
    values["image_urls"] = list(program.get("image_urls") or [])
    return values

# User operations
def get_user(db: Session, user_id: str) -> Optional[User]:
    """Get user by ID."""
    return db.query(User).filter(User.id == user_id).first()

def create_guest_user(db: Session) -> User:
    """Create an anonymous guest user."""
    user = User(email=f"{GUEST_EMAIL_PREFIX}{uuid.uuid4().hex}@guest.local")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user

# Student Profile operations
def get_student_profile_by_user_id(db: Session, user_id: str) -> Optional[StudentProfile]:
    """Get the student profile for a user."""
    return db.query(StudentProfile).filter(StudentProfile.user_id == user_id).first()

def create_or_update_student_profile(db: Session, user_id: str, profile_data: Dict) -> StudentProfile:
    """
    Create or update a student profile (UPSERT pattern).
    If profile exists -> UPDATE the given fields
    If new -> INSERT
    """
    try:
        profile = get_student_profile_by_user_id(db, user_id)
        if profile:
            logger.info(f"[LOGIC] Updating existing profile for user {user_id}")
            for key, value in profile_data.items():
                if hasattr(profile, key):
                    setattr(profile, key, value)
        else:
            logger.info(f"[LOGIC] Creating new profile for user {user_id}")
            profile = StudentProfile(user_id=user_id, **profile_data)
            db.add(profile)

        db.commit()
        db.refresh(profile)
        return profile
    except Exception as e:
        logger.error(f"[ERROR] create_or_update_student_profile failed: {str(e)}")
        db.rollback()
        raise

def is_student_profile_complete(db: Session, user_id: str) -> bool:
    """A profile is complete once its required onboarding fields are filled."""
    profile = get_student_profile_by_user_id(db, user_id)
    if not profile:
        return False
    return bool(profile.target_major and profile.college)

# Saved Program operations
def save_user_program(
    db: Session,
    user_id: str,
    program: Dict,
    match_score: Optional[int] = None,
    choice_type: Optional[str] = None
) -> SavedProgram:
    """Save a program for a user (UPSERT on user + program + university)."""
    try:
        values = _program_columns(program)
        existing = db.query(SavedProgram).filter(
            and_(
                SavedProgram.user_id == user_id,
                SavedProgram.program_name == values["program_name"],
                SavedProgram.university_name == values["university_name"]
            )
        ).first()

        if existing:
            logger.info(f"[LOGIC] Program already saved, updating {existing.id}")
            for key, value in values.items():
                setattr(existing, key, value)
            existing.match_score = match_score
            existing.choice_type = choice_type
            saved = existing
        else:
            saved = SavedProgram(
                user_id=user_id,
                match_score=match_score,
                choice_type=choice_type,
                **values
            )
            db.add(saved)

        db.commit()
        db.refresh(saved)
        return saved
    except Exception as e:
        logger.error(f"[ERROR] save_user_program failed: {str(e)}")
        db.rollback()
        raise

def get_saved_programs_by_user_id(db: Session, user_id: str) -> List[SavedProgram]:
    """Get all saved programs for a user, newest first."""
    return db.query(SavedProgram).filter(
        SavedProgram.user_id == user_id
    ).order_by(SavedProgram.created_at.desc()).all()

def get_saved_program_by_id(db: Session, program_id: str, user_id: str) -> Optional[SavedProgram]:
    """Get one of the user's saved programs. Programs of other users are invisible."""
    return db.query(SavedProgram).filter(
        and_(
            SavedProgram.id == program_id,
            SavedProgram.user_id == user_id
        )
    ).first()

def delete_saved_program(db: Session, program_id: str, user_id: str) -> bool:
    """Delete a saved program. Returns whether a row was removed."""
    try:
        deleted_count = db.query(SavedProgram).filter(
            and_(
                SavedProgram.id == program_id,
                SavedProgram.user_id == user_id
            )
        ).delete()
        db.commit()
        logger.info(f"[LOGIC] Deleted {deleted_count} saved program(s) for user {user_id}")
        return deleted_count > 0
    except Exception as e:
        logger.error(f"[ERROR] delete_saved_program failed: {str(e)}")
        db.rollback()
        raise

def find_saved_program(db: Session, user_id: str, university_name: str, program_name: str) -> Optional[SavedProgram]:
    """Look up a saved program by names, ignoring case and surrounding whitespace."""
    return db.query(SavedProgram).filter(
        and_(
            SavedProgram.user_id == user_id,
            func.lower(SavedProgram.university_name) == university_name.strip().lower(),
            func.lower(SavedProgram.program_name) == program_name.strip().lower()
        )
    ).first()

def get_two_saved_programs(
    db: Session,
    user_id: str,
    program1university: str,
    program1name: str,
    program2university: str,
    program2name: str
) -> Tuple[Optional[SavedProgram], Optional[SavedProgram]]:
    """Fetch the two saved programs a comparison refers to."""
    program1 = find_saved_program(db, user_id, program1university, program1name)
    program2 = find_saved_program(db, user_id, program2university, program2name)
    return program1, program2

# Public Program operations
def get_public_program(db: Session, program_name: str, university_name: str) -> Optional[PublicProgram]:
    """Get a cached research result for a program."""
    return db.query(PublicProgram).filter(
        and_(
            func.lower(PublicProgram.program_name) == program_name.strip().lower(),
            func.lower(PublicProgram.university_name) == university_name.strip().lower()
        )
    ).first()

def upsert_public_program(db: Session, program: Dict) -> PublicProgram:
    """Store a program research result, replacing an earlier one for the same program."""
    try:
        values = _program_columns(program)
        existing = get_public_program(db, values["program_name"], values["university_name"])
        if existing:
            for key, value in values.items():
                setattr(existing, key, value)
            public_program = existing
        else:
            public_program = PublicProgram(**values)
            db.add(public_program)

        db.commit()
        db.refresh(public_program)
        return public_program
    except Exception as e:
        logger.error(f"[ERROR] upsert_public_program failed: {str(e)}")
        db.rollback()
        raise
