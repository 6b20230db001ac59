import logging
import os
import sys

from models import db
from models.users import User

logger = logging.getLogger(__name__)


def create_admin(username, email, password):
    """Create an admin account, or promote and reset an existing one."""
    user = User.query.filter((User.username == username) | (User.email == email)).first()
    if user:
        user.role = "admin"
    else:
        user = User(username=username, email=email, role="admin")
        db.session.add(user)
    user.set_password(password)
    db.session.commit()
    logger.info("Admin account ready: %s", user.username)
    return user


if __name__ == "__main__":
    from app import app

    if len(sys.argv) != 3:
        print("Usage: python create_admin.py <username> <email>  (password from ADMIN_PASSWORD)")
        sys.exit(1)

    password = os.getenv("ADMIN_PASSWORD")
    if not password:
        print("ADMIN_PASSWORD is not set")
        sys.exit(1)

    with app.app_context():
        create_admin(sys.argv[1], sys.argv[2], password)
        print("Admin account created successfully!")
