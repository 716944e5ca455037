#!/usr/bin/env python3
"""Create (or reset) an admin account"""

import argparse
import sys
from pathlib import Path

# Add backend to path
backend_dir = Path(__file__).parent
sys.path.insert(0, str(backend_dir))

from statusmaker import models  # noqa: E402,F401
from statusmaker.core.auth import hash_password  # noqa: E402
from statusmaker.core.database import Base, SessionLocal, engine  # noqa: E402
from statusmaker.models.admin import Admin, AdminPermission, AdminRole  # noqa: E402


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--email", default="admin@statusmaker.dev")
    parser.add_argument("--password", default="admin")
    parser.add_argument("--name", default="Admin User")
    parser.add_argument(
        "--role",
        choices=[r.value for r in AdminRole],
        default=AdminRole.SUPER_ADMIN.value,
    )
    parser.add_argument(
        "--permission",
        dest="permissions",
        action="append",
        choices=[p.value for p in AdminPermission],
        help="Grant a permission (repeatable; ignored for super_admin)",
    )
    return parser.parse_args(argv)


def create_admin(args):
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()

    try:
        admin = db.query(Admin).filter(Admin.email == args.email).first()
        created = admin is None
        if created:
            admin = Admin(email=args.email)
            db.add(admin)

        admin.name = args.name
        admin.password_hash = hash_password(args.password)
        admin.role = args.role
        admin.permissions = sorted(set(args.permissions or []))
        admin.is_active = True

        db.commit()
        db.refresh(admin)

        print("=" * 60)
        print(f"✅ Admin {'created' if created else 'updated'} successfully!")
        print("=" * 60)
        print(f"Email:       {admin.email}")
        print(f"Password:    {args.password}")
        print(f"ID:          {admin.id}")
        print(f"Role:        {admin.role}")
        print(f"Permissions: {', '.join(admin.permissions) or '-'}")
        print("=" * 60)
        print("\nLog in with: POST /api/admin/auth/login")

    except Exception as e:
        print(f"❌ Error: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    create_admin(parse_args())
