"""Email subscription persistence."""

from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from common.base.logging_config import get_logger
from common.errors import ConflictError, NotFoundError, PersistenceError
from common.validation import validate_email, validate_object_id
from models.models import EmailSubscription

logger = get_logger(__name__)

ALREADY_SUBSCRIBED = "Email already subscribed"

def subscribe(db_session: Session, email: Optional[str]) -> EmailSubscription:
    """
    Add a subscription.

    The lookup before the insert only gives a friendlier fast path; the
    unique index on email is what actually prevents duplicates, so a racing
    insert surfaces as IntegrityError and is reported the same way.

    :raises: ValidationError for a missing or malformed address
    :raises: ConflictError if the address is already subscribed
    """
    email = validate_email(email)

    existing = db_session.query(EmailSubscription).filter_by(email=email).first()
    if existing is not None:
        raise ConflictError(ALREADY_SUBSCRIBED)

    subscription = EmailSubscription(email=email)
    try:
        db_session.add(subscription)
        db_session.commit()
    except IntegrityError as e:
        db_session.rollback()
        logger.info(f"Duplicate subscription rejected by the database: {email}")
        raise ConflictError(ALREADY_SUBSCRIBED, details=str(e)) from e
    except SQLAlchemyError as e:
        db_session.rollback()
        logger.error(f"Failed to save subscription {email}: {e}")
        raise PersistenceError("Failed to subscribe", details=str(e)) from e

    logger.info(f"New subscription {subscription.id}: {email}")
    return subscription

def list_subscriptions(db_session: Session) -> List[EmailSubscription]:
    """List subscriptions, newest first."""
    return db_session.query(EmailSubscription).order_by(
        EmailSubscription.date.desc(),
        EmailSubscription.id.desc()
    ).all()

def unsubscribe(db_session: Session, subscription_id: Optional[str]) -> None:
    """
    Delete a subscription by id.

    :raises: ValidationError if the id is missing or malformed
    :raises: NotFoundError if no subscription has this id
    """
    subscription_id = validate_object_id(subscription_id, 'subscription ID')
    subscription = db_session.get(EmailSubscription, subscription_id)
    if subscription is None:
        raise NotFoundError("Email not found")

    try:
        db_session.delete(subscription)
        db_session.commit()
    except SQLAlchemyError as e:
        db_session.rollback()
        logger.error(f"Failed to delete subscription {subscription_id}: {e}")
        raise PersistenceError("Failed to delete email", details=str(e)) from e

    logger.info(f"Deleted subscription {subscription_id}")
