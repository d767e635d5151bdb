"""Set a user's role by email, e.g. to promote the first admin."""
from database import get_db_session, init_db
from models_orm import UserORM
import sys

ROLES = ("member", "trainer", "admin")


def change_role(email, new_role):
    if new_role not in ROLES:
        print(f"Unknown role '{new_role}'. Choose one of: {', '.join(ROLES)}")
        return False

    init_db()
    db = get_db_session()
    try:
        user = db.query(UserORM).filter(UserORM.email == email.lower()).first()
        if not user:
            print(f"User '{email}' not found.")
            return False

        print(f"Found user: {user.email}, Current Role: {user.role}")
        user.role = new_role
        db.commit()
        print(f"Successfully changed role to '{new_role}'.")
        return True
    except Exception as e:
        db.rollback()
        print(f"Error: {e}")
        return False
    finally:
        db.close()


if __name__ == "__main__":
    if len(sys.argv) < 3:
        print("Usage: python change_role.py <email> <new_role>")
        sys.exit(1)
    sys.exit(0 if change_role(sys.argv[1], sys.argv[2]) else 1)
