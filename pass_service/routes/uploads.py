from flask import Blueprint, request, jsonify
from pass_service.errors import ValidationError
from pass_service.services.asset_service import attach_pass_pdf

uploads_bp = Blueprint('uploads', __name__)


@uploads_bp.route('/uploadPdf', methods=['POST'])
def upload_pdf():
    """
    Upload the rendered pass PDF for a registrant
    ---
    tags:
      - Uploads
    consumes:
      - multipart/form-data
    parameters:
      - in: formData
        name: pdf
        type: file
        required: true
      - in: formData
        name: email
        type: string
        required: true
      - in: formData
        name: rollNumber
        type: string
        required: true
    responses:
      200:
        description: Pass stored
      400:
        description: Missing file or fields
      404:
        description: Registrant not found
      409:
        description: Pass already uploaded
      500:
        description: Upload failed after multiple attempts
    """
    pdf = request.files.get('pdf')
    if pdf is None:
        raise ValidationError([{'field': 'pdf', 'message': "No PDF file uploaded."}], message="No PDF file uploaded.")

    email = (request.form.get('email') or '').strip().lower()
    roll_number = (request.form.get('rollNumber') or '').strip()
    missing = [field for field, value in (('email', email), ('rollNumber', roll_number)) if not value]
    if missing:
        raise ValidationError([{'field': field, 'message': f"{field} is required."} for field in missing])

    file_id = attach_pass_pdf(email, roll_number, pdf.read())
    return jsonify({'message': 'pass generated!', 'file_id': file_id}), 200
