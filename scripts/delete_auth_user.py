"""
Delete a Supabase auth user by email, along with their local profile
Usage: python scripts/delete_auth_user.py <email>
"""
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from academy.database import SessionLocal
from academy.models import Profile
from academy.supabase_auth import SupabaseAuthClient

logging.basicConfig(level=logging.INFO, format='%(message)s')
logger = logging.getLogger(__name__)


async def delete_auth_user(email: str, client: Optional[SupabaseAuthClient] = None) -> bool:
    client = client or SupabaseAuthClient()
    user = await client.admin_find_user_by_email(email)
    if not user:
        logger.info(f"No auth user found with email: {email}")
        return False

    logger.info(f"Found user ID: {user['id']}")
    await client.admin_delete_user(user["id"])
    logger.info(f"✅ Deleted auth user: {email}")

    # profiles.id has no foreign key to auth.users, so remove it here
    db = SessionLocal()
    try:
        profile = db.query(Profile).filter(Profile.id == user["id"]).first()
        if profile:
            db.delete(profile)
            db.commit()
            logger.info(f"✅ Deleted profile: {user['id']}")
    finally:
        db.close()
    return True


if __name__ == "__main__":
    if len(sys.argv) < 2:
        logger.error("Usage: python scripts/delete_auth_user.py <email>")
        sys.exit(1)

    try:
        asyncio.run(delete_auth_user(sys.argv[1].strip().lower()))
    except Exception as e:
        logger.error(f"❌ Delete failed: {e}")
        sys.exit(1)
