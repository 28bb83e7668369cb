import logging
from siamleave.core.config import settings
from siamleave.database import SessionLocal
from siamleave.models.user import User, UserRole
from siamleave.services import auth as auth_service

logger = logging.getLogger(__name__)

def init_system_data():
    """
    Creates the first superadmin from BOOTSTRAP_ADMIN_EMAIL / BOOTSTRAP_ADMIN_PASSWORD
    when both are set and no superadmin exists yet.
    """
    if not settings.bootstrap_admin_email or not settings.bootstrap_admin_password:
        logger.info("System initialization skipped: no bootstrap admin configured.")
        return

    db = SessionLocal()
    try:
        superadmins = db.query(User).filter(User.role == UserRole.SUPERADMIN).count()
        if superadmins == 0:
            admin_user = User(
                email=settings.bootstrap_admin_email,
                hashed_password=auth_service.get_password_hash(settings.bootstrap_admin_password),
                full_name="System Administrator",
                role=UserRole.SUPERADMIN,
                is_active=True
            )
            db.add(admin_user)
            db.commit()
            logger.info(f"✓ Created bootstrap superadmin: {settings.bootstrap_admin_email}")
        else:
            logger.info(f"System initialization check: {superadmins} superadmin(s) found.")

    except Exception as e:
        db.rollback()
        logger.error(f"Error during system initialization check: {str(e)}", exc_info=True)
    finally:
        db.close()
