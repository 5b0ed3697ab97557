import io
import unittest
from unittest.mock import patch, MagicMock

import jwt as pyjwt
import requests
from sqlalchemy import update

from pass_service.extensions import db
from pass_service.models.registrant import Registrant
from pass_service.services.credential_service import verify_credential
from tests.base import PassServiceTestCase


class TestPassService(PassServiceTestCase):
    def setUp(self):
        super().setUp()
        resp = self.register()
        self.assertEqual(resp.status_code, 201)
        self.token = resp.get_json()['serial']

    def test_register_then_three_entries_then_limit(self):
        registrant = Registrant.query.filter_by(roll_number="R1").one()
        self.assertEqual(verify_credential(self.token), registrant.serial_hash)

        for expected in (1, 2, 3):
            resp = self.scan(self.token)
            self.assertEqual(resp.status_code, 200)
            self.assertEqual(resp.get_json(), {
                "name": "A",
                "purpose": "Participant",
                "rollNumber": "R1",
                "entryCount": expected
            })

        resp = self.scan(self.token)
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.get_json()['error'], 'Entry limit reached!')

        db.session.expire_all()
        self.assertEqual(Registrant.query.filter_by(roll_number="R1").one().entry_count, 3)

    def test_scan_response_never_contains_secret(self):
        body = self.scan(self.token).get_json()
        registrant = Registrant.query.filter_by(roll_number="R1").one()
        self.assertNotIn(registrant.serial_hash, body.values())
        self.assertEqual(set(body), {"name", "purpose", "rollNumber", "entryCount"})

    def test_forged_token_is_rejected_without_touching_records(self):
        registrant = Registrant.query.filter_by(roll_number="R1").one()
        forged = pyjwt.encode(
            {"sub": registrant.serial_hash, "scope": "entry-pass"},
            "someone-elses-key-long-enough-for-hs256",
            algorithm="HS256"
        )

        resp = self.scan(forged)
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.get_json()['error'], 'Invalid token!')

        db.session.expire_all()
        self.assertEqual(Registrant.query.filter_by(roll_number="R1").one().entry_count, 0)

    def test_garbage_token(self):
        resp = self.scan("definitely-not-a-token")
        self.assertEqual(resp.status_code, 401)

    def test_missing_serial(self):
        resp = self.client.post("/api/verify-entry", json={})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.get_json()['fields'][0]['field'], 'serial')

    def test_body_that_is_not_an_object(self):
        for body in (["x"], "abc", 42):
            resp = self.client.post("/api/verify-entry", json=body)
            self.assertEqual(resp.status_code, 400)
            self.assertEqual(resp.get_json()['fields'][0]['field'], 'body')

    def test_valid_token_for_deleted_record(self):
        Registrant.query.filter_by(roll_number="R1").delete()
        db.session.commit()

        resp = self.scan(self.token)
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.get_json()['error'], 'Invalid QR code!')

    def test_duplicate_email(self):
        resp = self.register(roll="R2")
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.get_json()['error'], 'This email is already registered!')

    def test_duplicate_email_differs_only_in_case(self):
        resp = self.register(roll="R2", email="A@BITMESRA.AC.IN")
        self.assertEqual(resp.status_code, 409)

    def test_duplicate_roll_number(self):
        resp = self.register(email="other@bitmesra.ac.in")
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.get_json()['error'], 'This roll number is already registered!')

    def test_gmail_rejected(self):
        resp = self.register(roll="R2", email="user@gmail.com")
        self.assertEqual(resp.status_code, 400)
        fields = resp.get_json()['fields']
        self.assertEqual([f['field'] for f in fields], ['email'])
        self.assertEqual(Registrant.query.count(), 1)

    def test_each_registration_gets_its_own_pass(self):
        resp = self.register(name="B", roll="R2", email="b@bitmesra.ac.in", purpose="Visitor")
        self.assertEqual(resp.status_code, 201)
        other = resp.get_json()['serial']
        self.assertNotEqual(other, self.token)
        self.assertNotEqual(verify_credential(other), verify_credential(self.token))

    def test_over_length_roll_number_is_a_validation_error(self):
        resp = self.register(roll="R" * 51, email="long@bitmesra.ac.in")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual([f['field'] for f in resp.get_json()['fields']], ['rollNumber'])
        self.assertEqual(Registrant.query.count(), 1)

    def test_non_json_body(self):
        resp = self.client.post("/api/register", data="name=A", content_type="text/plain")
        self.assertEqual(resp.status_code, 400)

    def test_health(self):
        resp = self.client.get("/health")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json()['status'], 'healthy')

    def test_unexpected_error_hides_details(self):
        with patch('pass_service.routes.verification.admit', side_effect=RuntimeError("db password is hunter2")):
            resp = self.scan(self.token)
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.get_json(), {'error': 'Something went wrong. Please try again later.'})


class TestPdfUpload(PassServiceTestCase):
    def setUp(self):
        super().setUp()
        self.assertEqual(self.register().status_code, 201)

    def upload(self, email="a@bitmesra.ac.in", roll="R1"):
        return self.client.post("/api/uploadPdf", data={
            "pdf": (io.BytesIO(b"%PDF-1.4 pass"), "Aurora25_Pass.pdf"),
            "email": email,
            "rollNumber": roll
        }, content_type="multipart/form-data")

    @patch('pass_service.services.asset_service.requests.post')
    def test_upload_stores_file_id(self, mock_post):
        response = MagicMock()
        response.json.return_value = {"id": "drive-file-1"}
        mock_post.return_value = response

        resp = self.upload()
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json(), {"message": "pass generated!", "file_id": "drive-file-1"})

        args, kwargs = mock_post.call_args
        self.assertEqual(args[0], "http://asset-store.test/files")
        self.assertEqual(kwargs['files']['file'][0], "aurora25-R1-pass.pdf")
        self.assertEqual(kwargs['data'], {'parent': 'folder-123'})

        db.session.expire_all()
        self.assertEqual(Registrant.query.filter_by(roll_number="R1").one().file_id, "drive-file-1")

    @patch('pass_service.services.asset_service.requests.post')
    def test_upload_retries_then_fails_without_rolling_back(self, mock_post):
        mock_post.side_effect = requests.ConnectionError("drive unreachable")

        resp = self.upload()
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.get_json()['error'], 'Network error: Failed to upload PDF after multiple attempts.')
        self.assertEqual(mock_post.call_count, 5)

        db.session.expire_all()
        registrant = Registrant.query.filter_by(roll_number="R1").one()
        self.assertIsNone(registrant.file_id)

    @patch('pass_service.services.asset_service.requests.post')
    def test_upload_recovers_after_transient_failure(self, mock_post):
        response = MagicMock()
        response.json.return_value = {"id": "drive-file-2"}
        mock_post.side_effect = [requests.Timeout("slow"), response]

        resp = self.upload()
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(mock_post.call_count, 2)

    @patch('pass_service.services.asset_service.requests.post')
    def test_second_upload_rejected(self, mock_post):
        response = MagicMock()
        response.json.return_value = {"id": "drive-file-1"}
        mock_post.return_value = response

        self.assertEqual(self.upload().status_code, 200)
        resp = self.upload()
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(mock_post.call_count, 1)

    @patch('pass_service.services.asset_service.requests.post')
    def test_concurrent_upload_keeps_first_file_id(self, mock_post):
        response = MagicMock()
        response.json.return_value = {"id": "drive-file-late"}

        def other_request_commits_first(*args, **kwargs):
            db.session.execute(
                update(Registrant)
                .where(Registrant.roll_number == "R1")
                .values(file_id="drive-file-first")
            )
            db.session.commit()
            return response

        mock_post.side_effect = other_request_commits_first

        resp = self.upload()
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.get_json()['error'], 'Pass already uploaded')

        db.session.expire_all()
        self.assertEqual(Registrant.query.filter_by(roll_number="R1").one().file_id, "drive-file-first")

    def test_upload_unknown_registrant(self):
        resp = self.upload(email="ghost@bitmesra.ac.in", roll="R9")
        self.assertEqual(resp.status_code, 404)

    def test_upload_without_file(self):
        resp = self.client.post("/api/uploadPdf", data={
            "email": "a@bitmesra.ac.in",
            "rollNumber": "R1"
        }, content_type="multipart/form-data")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.get_json()['error'], 'No PDF file uploaded.')


if __name__ == '__main__':
    unittest.main()
