"""
Create one test login per portal role
Usage: SEED_PASSWORD=... python scripts/seed_portal_users.py

Existing auth users are reused, so the script can be run repeatedly.
"""
import asyncio
import logging
import os
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from academy.codes import unique_student_number
from academy.database import Base, SessionLocal, engine
from academy.models import Parent, Profile, Student, Teacher
from academy.supabase_auth import SupabaseAuthClient, SupabaseAuthError

logging.basicConfig(level=logging.INFO, format='%(message)s')
logger = logging.getLogger(__name__)

SEED_USERS = [
    {"email": "admin_test@vigyanitacademy.com", "role": "admin", "full_name": "Admin Test"},
    {"email": "teacher_test@vigyanitacademy.com", "role": "teacher", "full_name": "Teacher Test", "department": "Mathematics"},
    {"email": "parent_test@vigyanitacademy.com", "role": "parent", "full_name": "Parent Test"},
    {"email": "student_test@vigyanitacademy.com", "role": "student", "full_name": "Student Test"},
]


async def ensure_auth_user(client: SupabaseAuthClient, email: str, password: str, role: str) -> str:
    """Return the auth user id for email, creating the user if needed"""
    try:
        user = await client.admin_create_user(
            email=email, password=password, email_confirm=True, user_metadata={"role": role}
        )
        return user["id"]
    except SupabaseAuthError as e:
        existing = await client.admin_find_user_by_email(email)
        if not existing:
            raise
        logger.info(f"{email} already exists in auth ({e.message}); reusing it")
        return existing["id"]


def upsert_profile(db, user_id: str, seed: dict):
    profile = db.query(Profile).filter(Profile.id == user_id).first()
    if profile is None:
        profile = Profile(id=user_id)
        db.add(profile)
    profile.email = seed["email"]
    profile.full_name = seed["full_name"]
    profile.role = seed["role"]

    role = seed["role"]
    if role == "teacher" and profile.teacher is None:
        profile.teacher = Teacher(department=seed.get("department", "General"))
    elif role == "parent" and profile.parent is None:
        profile.parent = Parent(
            phone="0400000000", address="123 Test St", suburb="Sydney", postcode="2000", state="NSW"
        )
    elif role == "student" and profile.student is None:
        student_number = unique_student_number(
            lambda candidate: db.query(Student.id).filter(Student.student_number == candidate).first() is not None
        )
        profile.student = Student(
            student_number=student_number, student_email=seed["email"], grade_level=10
        )
    db.commit()


async def seed(password: str):
    Base.metadata.create_all(bind=engine, checkfirst=True)
    client = SupabaseAuthClient()
    db = SessionLocal()
    try:
        for user in SEED_USERS:
            logger.info(f"Setting up {user['role']}: {user['email']}...")
            user_id = await ensure_auth_user(client, user["email"], password, user["role"])
            upsert_profile(db, user_id, user)
            logger.info(f"✅ {user['role']} ready: {user['email']}")
    finally:
        db.close()


if __name__ == "__main__":
    password = os.getenv("SEED_PASSWORD")
    if not password:
        logger.error("Set SEED_PASSWORD to the password the test users should share")
        sys.exit(1)

    try:
        asyncio.run(seed(password))
    except Exception as e:
        logger.error(f"❌ Seeding failed: {e}")
        sys.exit(1)
