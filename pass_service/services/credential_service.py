"""
Credential Service
Turns a serial into the stored secret and the signed pass token, and
recovers the secret from a scanned token.

    serial --bcrypt--> secret --JWT (HS256, no exp)--> token (QR payload)
"""

import logging

import bcrypt
from flask import current_app
from flask_jwt_extended import create_access_token, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import InvalidTokenError

from pass_service.errors import InvalidCredential

logger = logging.getLogger(__name__)

PASS_SCOPE = 'entry-pass'


def derive_secret(serial, rounds=10):
    return bcrypt.hashpw(serial.encode('utf-8'), bcrypt.gensalt(rounds=rounds)).decode('utf-8')


def issue_credential(secret):
    # Passes live as long as the event; no expiry claim
    return create_access_token(
        identity=secret,
        expires_delta=False,
        additional_claims={'scope': PASS_SCOPE}
    )


def encode_pass(serial):
    """
    Derive the secret for a fresh serial and sign it.

    Returns:
        Tuple of (secret, token). The secret goes to the database,
        the token goes back to the registrant.
    """
    secret = derive_secret(serial, rounds=current_app.config['BCRYPT_ROUNDS'])
    return secret, issue_credential(secret)


def verify_credential(token):
    """
    Check a scanned token against the server key.

    Returns:
        The embedded secret.

    Raises:
        InvalidCredential: token missing, malformed, forged, or not a pass.
    """
    if not token or not isinstance(token, str):
        raise InvalidCredential()

    try:
        claims = decode_token(token)
    except (InvalidTokenError, JWTExtendedException) as e:
        logger.info("Rejected pass token: %s", type(e).__name__)
        raise InvalidCredential() from e

    secret = claims.get(current_app.config['JWT_IDENTITY_CLAIM'])
    if claims.get('scope') != PASS_SCOPE or not secret:
        logger.info("Rejected token without pass scope")
        raise InvalidCredential()

    return secret
