"""
Initialize the auth database
Creates the tables and reports whether the superadmin account exists.
The superadmin itself is created through POST /api/auth/register/superadmin.
"""
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from gnet_auth.database import SessionLocal, engine, Base
from gnet_auth.models import User

def init_database():
    """Create tables and report provisioning state"""

    print("=" * 60)
    print("Gnet E-commerce Auth - Database Initialization")
    print("=" * 60)

    print("\n📦 Creating database tables...")
    try:
        Base.metadata.create_all(bind=engine)
        print("✅ Database tables created successfully!")
    except Exception as e:
        print(f"❌ Error creating tables: {str(e)}")
        return 1

    db = SessionLocal()
    try:
        superadmin = db.query(User).filter(User.role == "superadmin").first()
        total = db.query(User).count()

        print(f"\n👥 Users: {total}")
        if superadmin:
            print(f"👤 Superadmin: {superadmin.email} (ID {superadmin.custom_id})")
        else:
            print("⚠️  No superadmin yet. Register one with:")
            print("   POST /api/auth/register/superadmin")
        print("\n🚀 Start the server with:")
        print("   uvicorn gnet_auth.main:app --reload\n")
        return 0
    finally:
        db.close()

if __name__ == "__main__":
    sys.exit(init_database())
