"""
Verification Routes
Handles POST /api/verify-entry (staff QR scan at the gate).
"""

from flask import Blueprint, request, jsonify
from pass_service.errors import ValidationError
from pass_service.services.admission_service import admit
from pass_service.services.credential_service import verify_credential

verification_bp = Blueprint('verification', __name__)


@verification_bp.route('/verify-entry', methods=['POST'])
def verify_entry():
    """
    Verify a scanned pass and record one entry
    ---
    tags:
      - Verification
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - serial
          properties:
            serial:
              type: string
              description: Token read from the QR code
    responses:
      200:
        description: Entry recorded; returns name, purpose, rollNumber, entryCount
      400:
        description: Missing serial
      401:
        description: Invalid token
      403:
        description: Entry limit reached
      404:
        description: No pass matches this QR code
    """
    data = request.get_json(silent=True)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValidationError([{'field': 'body', 'message': "Request body must be a JSON object."}])
    token = data.get('serial')
    if not token:
        raise ValidationError([{'field': 'serial', 'message': "QR code serial number is required."}])

    secret = verify_credential(token)
    return jsonify(admit(secret)), 200
