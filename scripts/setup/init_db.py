# scripts/setup/init_db.py
"""
Initialize database: creates all tables and, optionally, an admin account.
Run once before first launch, or after adding new models.
Usage: python scripts/setup/init_db.py
       python scripts/setup/init_db.py --admin-username admin --admin-email admin@example.org
"""

import sys
import os
import argparse
import getpass
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from app.database import SessionLocal, create_tables, engine
from app.config import settings
from app.errors import ValidationError
from app.models.user import UserRole
from app.services.auth_service import create_user
from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError


def create_admin(username: str, email: str):
    password = os.environ.get("ADMIN_PASSWORD") or getpass.getpass(f"Password for {username}: ")
    if len(password) < 8:
        print("❌ Admin password must be at least 8 characters")
        sys.exit(1)

    db = SessionLocal()
    try:
        user = create_user(db, username, password, email, UserRole.ADMIN)
        print(f"✅ Admin account created: {user.username} (id={user.id})")
    except ValidationError as e:
        print(f"⚠️  {e.message}; admin account not created")
    finally:
        db.close()


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--admin-username", help="Create an ADMIN account with this username")
    parser.add_argument("--admin-email", default="admin@localhost", help="Email for the ADMIN account")
    args = parser.parse_args()

    print("🗄️  Roadside Compliance DB Initialization")
    print("=" * 40)
    print(f"📡 Database: {settings.DATABASE_URL}")

    # Test connection
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("✅ Database connection OK")
    except SQLAlchemyError as e:
        print(f"❌ Cannot connect to database: {e}")
        print("\nMake sure PostgreSQL is running:")
        print("  docker-compose up -d db")
        print("  # or: sudo systemctl start postgresql")
        sys.exit(1)

    print("\n📋 Creating tables...")
    create_tables()

    tables = sorted(inspect(engine).get_table_names())
    print(f"\n📊 Tables in database ({len(tables)} total):")
    for t in tables:
        print(f"   ✓ {t}")

    if args.admin_username:
        print()
        create_admin(args.admin_username, args.admin_email)

    print("\n🎉 Database ready! You can now start the backend:")
    print("   uvicorn app.main:app --host 0.0.0.0 --port 8080 --reload")


if __name__ == "__main__":
    main()
