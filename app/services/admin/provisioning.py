import logging

from sqlalchemy.orm import Session

from app import models
from app.core.security import SUPERADMIN_ROLE, get_password_hash

logger = logging.getLogger(__name__)


def create_admin(db: Session, email: str, password: str, first_name: str) -> models.Admin:
    """create or update the superadmin keyed by email; running it twice gives the same account."""
    email = email.strip().lower()
    if not email or not password:
        raise ValueError("email and password are required")

    password_hash = get_password_hash(password)

    admin = db.query(models.Admin).filter(models.Admin.email == email).first()
    if admin:
        logger.info(f"Updating existing admin {email}")
        admin.first_name = first_name
        admin.password_hash = password_hash
        admin.role = SUPERADMIN_ROLE
        admin.is_active = True
    else:
        logger.info(f"Creating admin {email}")
        admin = models.Admin(
            email=email,
            first_name=first_name,
            password_hash=password_hash,
            role=SUPERADMIN_ROLE,
            is_active=True,
        )

    db.add(admin)
    db.commit()
    db.refresh(admin)
    return admin
