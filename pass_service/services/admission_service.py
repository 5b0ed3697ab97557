"""
Admission Service
Gate-side entry counting: one conditional UPDATE per scan, so duplicate
scans racing each other can never push a pass past its cap.
"""

import logging

from sqlalchemy import update

from pass_service.errors import LimitReached, NotFound
from pass_service.extensions import db
from pass_service.models.registrant import Registrant, ENTRY_CAP

logger = logging.getLogger(__name__)


def get_registrant_by_secret(secret):
    return Registrant.query.filter_by(serial_hash=secret).first()


def admit(secret):
    """
    Record one entry for the pass holding `secret`.

    Returns:
        Display fields of the registrant with the new entry count.

    Raises:
        NotFound: no registrant holds this secret
        LimitReached: the pass is already at ENTRY_CAP (nothing is changed)
    """
    stmt = (
        update(Registrant)
        .where(Registrant.serial_hash == secret, Registrant.entry_count < ENTRY_CAP)
        .values(entry_count=Registrant.entry_count + 1)
        .returning(Registrant.name, Registrant.purpose, Registrant.roll_number, Registrant.entry_count)
        .execution_options(synchronize_session=False)
    )

    try:
        row = db.session.execute(stmt).one_or_none()
        if row is not None:
            db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    if row is None:
        db.session.rollback()
        registrant = get_registrant_by_secret(secret)
        if registrant is None:
            logger.info("Scan rejected: no pass matches")
            raise NotFound()
        logger.info("Scan rejected: roll %s already at %d entries", registrant.roll_number, registrant.entry_count)
        raise LimitReached(payload={'entryCount': registrant.entry_count})

    logger.info("Admitted roll %s (entry %d of %d)", row.roll_number, row.entry_count, ENTRY_CAP)
    return {
        'name': row.name,
        'purpose': row.purpose,
        'rollNumber': row.roll_number,
        'entryCount': row.entry_count
    }
