from flask import Blueprint, request, jsonify
from pass_service.services.registration_service import register

registration_bp = Blueprint('registration', __name__)


@registration_bp.route('/register', methods=['POST'])
def register_route():
    """
    Register for an event pass
    ---
    tags:
      - Registration
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - name
            - rollNumber
            - email
            - purpose
          properties:
            name:
              type: string
            rollNumber:
              type: string
            email:
              type: string
              description: Must end with @bitmesra.ac.in
            purpose:
              type: string
              enum: [Volunteer, Participant, Visitor]
    responses:
      201:
        description: Pass issued; `serial` is the signed QR payload
      400:
        description: Validation failed
      409:
        description: Email or roll number already registered
    """
    data = request.get_json(silent=True)
    token = register(data)
    return jsonify({'serial': token}), 201
