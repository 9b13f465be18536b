"""
Seed one account per role and a demo project.

Usage:
    python seed_users.py

Environment variables (optional):
    SEED_PASSWORD_SUFFIX: appended to each role name to form the password (default: 123!)
    DEMO_PROJECT_CODE: code of the demo project (default: DEMO-001)
"""
import uuid
import sys
import os

# Add the current directory to the system path so Python can find your files
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from core.database import SessionLocal, engine, Base
from services.auth_service import AuthService
from models.user import User
from models.project import Project, ProjectStatus
# Import remaining models to initialize mappers
from models.load import Load, Skid  # noqa: F401
from models.audit_log import AuditLog  # noqa: F401

SEED_ACCOUNTS = [
    ("admin@loadbuilder.co.za", "site_admin_01", "ADMIN"),
    ("loader@loadbuilder.co.za", "site_loader_01", "LOADER"),
    ("viewer@loadbuilder.co.za", "office_viewer_01", "VIEWER"),
]


def seed_test_accounts():
    print("📋 Creating database tables...")
    Base.metadata.create_all(bind=engine)

    suffix = os.getenv("SEED_PASSWORD_SUFFIX", "123!")
    project_code = os.getenv("DEMO_PROJECT_CODE", "DEMO-001")

    db = SessionLocal()
    try:
        admin_id = None
        for email, username, role in SEED_ACCOUNTS:
            user = db.query(User).filter(User.email == email).first()
            if not user:
                user = User(
                    id=uuid.uuid4(),
                    email=email,
                    username=username,
                    hashed_password=AuthService.get_password_hash(f"{role.capitalize()}{suffix}"),
                    role=role,
                    is_active=True
                )
                db.add(user)
                print(f"✅ Created {role}: {email}")
            if role == "ADMIN":
                admin_id = user.id

        if not db.query(Project).filter(Project.code == project_code).first():
            db.add(Project(
                id=uuid.uuid4(),
                code=project_code,
                name="Demo Project",
                address="1 Site Road",
                description="Sample project for trying out inventory staging and truck loads",
                status=ProjectStatus.ACTIVE,
                created_by=admin_id
            ))
            print(f"✅ Created Project: {project_code}")

        db.commit()
    except Exception as e:
        print(f"❌ Error seeding data: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    seed_test_accounts()
