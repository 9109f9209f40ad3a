import logging
from app.core.config import settings
from app.database import SessionLocal
from app.models.user import User, UserRole
from app.services import auth as auth_service

logger = logging.getLogger(__name__)


def init_system_data():
    """
    Creates the first HR account when the user table is empty and
    BOOTSTRAP_ADMIN_EMAIL / BOOTSTRAP_ADMIN_PASSWORD are set.
    """
    if not settings.bootstrap_admin_email or not settings.bootstrap_admin_password:
        logger.info("System initialization check: no bootstrap admin configured, skipping.")
        return

    db = SessionLocal()
    try:
        user_count = db.query(User).count()
        if user_count == 0:
            logger.info("Running startup initialization...")
            admin = User(
                email=settings.bootstrap_admin_email,
                hashed_password=auth_service.get_password_hash(settings.bootstrap_admin_password),
                name="Administrator",
                role=UserRole.HR,
                vacation_days_balance=settings.leave.default_vacation_days,
                sick_days_balance=settings.leave.default_sick_days,
                is_active=True,
            )
            db.add(admin)
            db.commit()
            logger.info(f"Created bootstrap HR account: {settings.bootstrap_admin_email}")
        else:
            logger.info(f"System initialization check: {user_count} user(s) found.")

    except Exception as e:
        db.rollback()
        logger.error(f"Error during system initialization check: {str(e)}", exc_info=True)
    finally:
        db.close()
