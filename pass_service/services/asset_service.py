"""
Asset Service
Pushes rendered pass PDFs to the asset store and links them to the
registrant record.
"""

import logging

import requests
from flask import current_app
from sqlalchemy import update

from pass_service.errors import DuplicateEntity, NotFound, UpstreamFailure
from pass_service.extensions import db
from pass_service.models.registrant import Registrant
from pass_service.utils.retry import retry_call

logger = logging.getLogger(__name__)


class AssetStore:
    """Thin HTTP client for the object store: POST {base_url}/files -> {"id": ...}"""

    def __init__(self, base_url, folder_id=None, timeout=10.0):
        self.base_url = base_url.rstrip('/')
        self.folder_id = folder_id
        self.timeout = timeout

    def upload(self, filename, content, mimetype='application/pdf'):
        data = {'parent': self.folder_id} if self.folder_id else {}
        response = requests.post(
            f"{self.base_url}/files",
            files={'file': (filename, content, mimetype)},
            data=data,
            timeout=self.timeout
        )
        response.raise_for_status()
        try:
            return response.json()['id']
        except (ValueError, KeyError) as e:
            raise requests.RequestException(f"Unexpected asset store response: {response.text[:200]}") from e


def get_asset_store():
    config = current_app.config
    return AssetStore(
        config['ASSET_STORE_URL'],
        folder_id=config.get('ASSET_FOLDER_ID'),
        timeout=config['UPLOAD_TIMEOUT']
    )


def pass_filename(roll_number):
    return f"aurora25-{roll_number}-pass.pdf"


def attach_pass_pdf(email, roll_number, content, store=None):
    """
    Upload a registrant's pass PDF and remember its file id.

    The registrant record is never rolled back if the upload fails;
    the caller may simply try again.

    Raises:
        NotFound: no registrant with this email and roll number
        DuplicateEntity: a PDF is already attached
        UpstreamFailure: the store kept failing after all retries
    """
    registrant = Registrant.query.filter_by(email=email, roll_number=roll_number).first()
    if registrant is None:
        raise NotFound('Registrant not found')
    if registrant.file_id:
        raise DuplicateEntity('Pass already uploaded')
    registrant_id = registrant.registrant_id

    store = store or get_asset_store()
    filename = pass_filename(roll_number)
    max_attempts = current_app.config['UPLOAD_MAX_RETRIES']

    try:
        file_id = retry_call(
            lambda: store.upload(filename, content),
            max_attempts=max_attempts,
            delay=current_app.config['UPLOAD_RETRY_DELAY'],
            exceptions=(requests.RequestException,)
        )
    except requests.RequestException as e:
        logger.error("Upload of %s failed after %d attempts: %s", filename, max_attempts, e)
        raise UpstreamFailure() from e

    # Set-once: a concurrent upload that committed first wins
    stmt = (
        update(Registrant)
        .where(Registrant.registrant_id == registrant_id, Registrant.file_id.is_(None))
        .values(file_id=file_id)
        .execution_options(synchronize_session=False)
    )
    try:
        updated = db.session.execute(stmt).rowcount
        if updated:
            db.session.commit()
        else:
            db.session.rollback()
    except Exception:
        db.session.rollback()
        raise

    if not updated:
        logger.warning("Pass PDF %s for roll %s lost a concurrent upload; already attached", file_id, roll_number)
        raise DuplicateEntity('Pass already uploaded')

    logger.info("Pass PDF for roll %s stored as %s", roll_number, file_id)
    return file_id
