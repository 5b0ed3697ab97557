"""
Registration Service
Creates the registrant record and mints its pass.
"""

import logging

from flask import current_app
from sqlalchemy.exc import IntegrityError

from pass_service.errors import DuplicateEntity, ValidationError
from pass_service.extensions import db
from pass_service.models.registrant import Registrant
from pass_service.services.credential_service import encode_pass
from pass_service.services.serial_service import generate_serial
from pass_service.utils.validation import validate_registration, normalize_registration

logger = logging.getLogger(__name__)


def register(data):
    """
    Validate the form, store the registrant and return the signed pass
    token (the QR payload). The plain serial is never stored.

    Raises:
        ValidationError: missing or malformed fields
        DuplicateEntity: email or roll number already registered
    """
    errors = validate_registration(data, current_app.config['ALLOWED_EMAIL_DOMAIN'])
    if errors:
        raise ValidationError(errors)

    fields = normalize_registration(data)

    if Registrant.query.filter_by(email=fields['email']).first():
        raise DuplicateEntity('This email is already registered!')
    if Registrant.query.filter_by(roll_number=fields['roll_number']).first():
        raise DuplicateEntity('This roll number is already registered!')

    serial = generate_serial(current_app.config['SERIAL_PREFIX'])
    secret, token = encode_pass(serial)

    registrant = Registrant(serial_hash=secret, entry_count=0, **fields)
    try:
        db.session.add(registrant)
        db.session.commit()
    except IntegrityError as e:
        # Lost a race with a concurrent registration for the same email/roll
        db.session.rollback()
        raise DuplicateEntity('This email or roll number is already registered!') from e
    except Exception:
        db.session.rollback()
        raise

    logger.info("Registered %s as %s", registrant.registrant_id, registrant.purpose)
    return token
