"""
Database initialization script

Usage:
    python -m database.init_db
    python -m database.init_db --admin-email admin@dutchthrift.nl --admin-password ...
"""
import argparse
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from database.connection import engine, Base, session_scope
from database import models  # noqa: F401  (registers tables)


def init_database():
    """Create all database tables"""
    print("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    print("✅ Database tables created successfully!")
    print("\nTables created:")
    for table in Base.metadata.sorted_tables:
        print(f"  - {table.name}")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Create tables and (optionally) an admin account")
    parser.add_argument("--admin-email")
    parser.add_argument("--admin-password")
    args = parser.parse_args(argv)

    init_database()

    if args.admin_email and args.admin_password:
        from services.auth import ensure_admin

        with session_scope() as db:
            user = ensure_admin(db, args.admin_email, args.admin_password)
            print(f"✅ Admin account ready: {user.email}")


if __name__ == "__main__":
    main()
