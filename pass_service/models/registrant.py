import uuid
from pass_service.extensions import db

PURPOSES = ('Volunteer', 'Participant', 'Visitor')
ENTRY_CAP = 3
NAME_MAX_LENGTH = 255
ROLL_NUMBER_MAX_LENGTH = 50
EMAIL_MAX_LENGTH = 255


class Registrant(db.Model):
    __tablename__ = 'registrants'
    __table_args__ = (
        db.CheckConstraint(
            f'entry_count >= 0 AND entry_count <= {ENTRY_CAP}',
            name='ck_registrants_entry_count'
        ),
    )

    registrant_id = db.Column(db.Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = db.Column(db.String(NAME_MAX_LENGTH), nullable=False)
    roll_number = db.Column(db.String(ROLL_NUMBER_MAX_LENGTH), unique=True, nullable=False)
    email = db.Column(db.String(EMAIL_MAX_LENGTH), unique=True, nullable=False)
    purpose = db.Column(db.Enum(*PURPOSES, name='registrant_purpose'), nullable=False)
    entry_count = db.Column(db.Integer, nullable=False, default=0)
    # bcrypt digest of the serial; the signed pass carries this value
    serial_hash = db.Column(db.Text, unique=True, index=True, nullable=False)
    file_id = db.Column(db.Text)
    created_at = db.Column(db.DateTime, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, server_default=db.func.now(), onupdate=db.func.now())
