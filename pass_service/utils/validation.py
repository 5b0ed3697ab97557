"""Request field validation for pass registration."""
import re

from pass_service.models.registrant import (
    PURPOSES,
    NAME_MAX_LENGTH,
    ROLL_NUMBER_MAX_LENGTH,
    EMAIL_MAX_LENGTH,
)

EMAIL_LOCAL_RE = r'[^\s@]+'


def _clean(value):
    return value.strip() if isinstance(value, str) else ''


def validate_email(email, domain):
    """
    Returns:
        None if valid, otherwise the error message
    """
    if not email:
        return "A valid email is required."
    if len(email) > EMAIL_MAX_LENGTH:
        return f"Email cannot exceed {EMAIL_MAX_LENGTH} characters."
    if not re.fullmatch(rf"{EMAIL_LOCAL_RE}@{re.escape(domain)}", email, re.IGNORECASE):
        return f"Email must end with {domain}"
    return None


def validate_registration(data, domain):
    """
    Check a registration payload.

    Args:
        data: Parsed JSON body
        domain: Institutional email domain, e.g. "bitmesra.ac.in"

    Returns:
        List of {"field", "message"} dicts; empty when the payload is valid
    """
    if not isinstance(data, dict):
        return [{'field': 'body', 'message': "Request body must be a JSON object."}]

    errors = []
    name = _clean(data.get('name'))
    if not name:
        errors.append({'field': 'name', 'message': "Name is required."})
    elif len(name) > NAME_MAX_LENGTH:
        errors.append({'field': 'name', 'message': f"Name cannot exceed {NAME_MAX_LENGTH} characters."})

    roll_number = _clean(data.get('rollNumber'))
    if not roll_number:
        errors.append({'field': 'rollNumber', 'message': "Roll number is required."})
    elif len(roll_number) > ROLL_NUMBER_MAX_LENGTH:
        errors.append({
            'field': 'rollNumber',
            'message': f"Roll number cannot exceed {ROLL_NUMBER_MAX_LENGTH} characters."
        })

    email_error = validate_email(_clean(data.get('email')), domain)
    if email_error:
        errors.append({'field': 'email', 'message': email_error})

    purpose = _clean(data.get('purpose'))
    if not purpose:
        errors.append({'field': 'purpose', 'message': "Purpose is required."})
    elif purpose not in PURPOSES:
        errors.append({'field': 'purpose', 'message': f"Purpose must be one of: {', '.join(PURPOSES)}."})

    return errors


def normalize_registration(data):
    """Trimmed field values; email lowercased for uniqueness checks."""
    return {
        'name': _clean(data.get('name')),
        'roll_number': _clean(data.get('rollNumber')),
        'email': _clean(data.get('email')).lower(),
        'purpose': _clean(data.get('purpose'))
    }
