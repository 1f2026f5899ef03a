"""
Tests for the submission lifecycle: upload, assign, review and the
single-submission view.
"""
import os

import pytest

from subtrack.config import get_settings
from subtrack.main import app
from subtrack.models import Review, Submission


class TestUpload:

    def test_upload_creates_submitted_record(self, client, student, upload):
        submission = upload(student, title='Compiler Project', type='project',
                            domain='Systems', companyOrGuide='Dr. Rao')['submission']

        assert submission['status'] == 'Submitted'
        assert submission['assignedFacultyId'] is None
        assert submission['version'] == 1
        assert submission['studentId'] == student.id
        assert submission['title'] == 'Compiler Project'
        assert submission['type'] == 'project'
        assert submission['domain'] == 'Systems'
        assert submission['companyOrGuide'] == 'Dr. Rao'

    def test_owner_cannot_be_spoofed(self, student, other_student, upload):
        """A studentId in the form is ignored in favour of the token"""
        submission = upload(student, studentId=other_student.id)['submission']

        assert submission['studentId'] == student.id

    def test_stored_name_is_unique_and_whitespace_free(self, student, upload, upload_root):
        first = upload(student, filename='final  report v2.pdf')['submission']['filePath']
        second = upload(student, filename='final  report v2.pdf')['submission']['filePath']

        assert first != second
        assert first.startswith('/uploads/')
        assert first.endswith('-final_report_v2.pdf')
        assert ' ' not in first
        assert os.path.exists(os.path.join(upload_root, first[len('/uploads/'):]))

    def test_very_long_filename_is_accepted(self, student, upload, upload_root):
        file_path = upload(student, filename='a' * 300 + '.pdf')['submission']['filePath']

        stored_name = file_path[len('/uploads/'):]
        assert len(stored_name.encode('utf-8')) <= 255
        assert stored_name.endswith('.pdf')
        assert os.path.exists(os.path.join(upload_root, stored_name))

    def test_uploaded_file_is_served(self, client, student, upload, pdf_bytes):
        file_path = upload(student)['submission']['filePath']

        response = client.get(file_path)

        assert response.status_code == 200
        assert response.content == pdf_bytes

    def test_non_pdf_content_is_rejected_and_discarded(self, student, upload, db_session, upload_root):
        """Declared content type alone is not enough"""
        body = upload(student, content=b'MZ\x90\x00not a pdf at all', expect=400)

        assert body == {'success': False, 'message': 'Only PDF allowed'}
        assert os.listdir(upload_root) == []
        assert db_session.query(Submission).count() == 0

    def test_missing_file_is_rejected(self, client, student, auth):
        response = client.post('/submissions/upload', data={'title': 'No file', 'type': 'research'},
                               headers=auth(student))

        assert response.status_code == 400
        assert response.json()['message'] == 'PDF required'

    def test_invalid_type_is_rejected(self, student, upload):
        body = upload(student, type='thesis', expect=400)

        assert body['message'] == 'Validation failed'
        assert any(err['field'] == 'type' for err in body['errors'])

    def test_oversized_file_is_rejected(self, student, upload, settings, pdf_bytes, upload_root):
        small = settings.model_copy(update={'max_upload_bytes': 64})
        app.dependency_overrides[get_settings] = lambda: small

        body = upload(student, content=pdf_bytes + b'0' * 64, expect=400)

        assert body['message'] == 'File too large'
        assert os.listdir(upload_root) == []

    @pytest.mark.parametrize('role_fixture', ['faculty', 'admin'])
    def test_only_students_upload(self, request, upload, role_fixture):
        user = request.getfixturevalue(role_fixture)

        body = upload(user, expect=403)

        assert body['message'] == 'Forbidden: Role mismatch'


class TestAssign:

    def test_assign_moves_to_assigned(self, student, faculty, admin, upload, assign):
        submission_id = upload(student)['submission']['id']

        submission = assign(admin, submission_id, faculty.id)['submission']

        assert submission['status'] == 'Assigned'
        assert submission['assignedFacultyId'] == faculty.id
        assert submission['version'] == 1

    def test_repeat_assignment_is_a_no_op(self, student, faculty, admin, upload, assign):
        submission_id = upload(student)['submission']['id']
        first = assign(admin, submission_id, faculty.id)['submission']

        second = assign(admin, submission_id, faculty.id)['submission']

        assert second['status'] == 'Assigned'
        assert second['assignedFacultyId'] == faculty.id
        assert second['version'] == first['version']
        assert second['updatedAt'] == first['updatedAt']

    def test_reassign_to_other_faculty(self, student, faculty, other_faculty, admin, upload, assign):
        submission_id = upload(student)['submission']['id']
        assign(admin, submission_id, faculty.id)

        submission = assign(admin, submission_id, other_faculty.id)['submission']

        assert submission['assignedFacultyId'] == other_faculty.id
        assert submission['status'] == 'Assigned'

    def test_unknown_submission(self, faculty, admin, assign):
        body = assign(admin, 'no-such-submission', faculty.id, expect=404)

        assert body['message'] == 'Submission not found'

    def test_target_must_hold_faculty_role(self, student, other_student, admin, upload, assign, db_session):
        submission_id = upload(student)['submission']['id']

        body = assign(admin, submission_id, other_student.id, expect=404)

        assert body['message'] == 'Faculty not found'
        db_session.expire_all()
        stored = db_session.get(Submission, submission_id)
        assert stored.status.value == 'Submitted'
        assert stored.assigned_faculty_id is None

    def test_missing_fields(self, client, admin, auth):
        response = client.post('/admin/assign', json={'submissionId': 'abc'}, headers=auth(admin))

        assert response.status_code == 400
        assert any(err['field'] == 'facultyId' for err in response.json()['errors'])

    def test_reviewed_submission_cannot_be_reassigned(self, student, faculty, other_faculty, admin,
                                                      upload, assign, review):
        submission_id = upload(student)['submission']['id']
        assign(admin, submission_id, faculty.id)
        review(faculty, submission_id, decision='Approved')

        body = assign(admin, submission_id, other_faculty.id, expect=400)

        assert 'already reviewed' in body['message']

    def test_only_admin_assigns(self, student, faculty, upload, assign):
        submission_id = upload(student)['submission']['id']

        assign(faculty, submission_id, faculty.id, expect=403)


class TestReview:

    @pytest.fixture
    def assigned(self, student, faculty, admin, upload, assign):
        submission_id = upload(student)['submission']['id']
        assign(admin, submission_id, faculty.id)
        return submission_id

    def test_review_sets_status_and_bumps_version(self, client, faculty, assigned, review, auth):
        body = review(faculty, assigned, decision='Resubmission Required', marks=45, remarks='Add results')

        assert body['newStatus'] == 'Resubmission Required'
        assert body['review']['marks'] == 45
        assert body['review']['remarks'] == 'Add results'
        assert body['review']['facultyId'] == faculty.id

        submission = client.get(f'/submissions/{assigned}', headers=auth(faculty)).json()['submission']
        assert submission['status'] == 'Resubmission Required'
        assert submission['version'] == 2

    def test_unassigned_faculty_is_forbidden_and_nothing_changes(self, other_faculty, assigned,
                                                                review, db_session):
        body = review(other_faculty, assigned, expect=403)

        assert body['message'] == 'Not assigned to you'
        db_session.expire_all()
        stored = db_session.get(Submission, assigned)
        assert stored.status.value == 'Assigned'
        assert stored.version == 1
        assert db_session.query(Review).count() == 0

    def test_review_of_unassigned_submission_is_forbidden(self, student, faculty, upload, review):
        submission_id = upload(student)['submission']['id']

        review(faculty, submission_id, expect=403)

    def test_unknown_submission(self, faculty, review):
        body = review(faculty, 'missing-id', expect=404)

        assert body['message'] == 'Submission not found'

    def test_second_review_updates_in_place(self, faculty, assigned, review, db_session):
        first = review(faculty, assigned, decision='Resubmission Required', marks=40)
        second = review(faculty, assigned, decision='Approved', marks=88, remarks='Fixed')

        assert second['review']['id'] == first['review']['id']
        db_session.expire_all()
        rows = db_session.query(Review).filter(Review.submission_id == assigned).all()
        assert len(rows) == 1
        assert rows[0].marks == 88
        assert rows[0].decision.value == 'Approved'
        stored = db_session.get(Submission, assigned)
        assert stored.version == 3
        assert stored.status.value == 'Approved'

    @pytest.mark.parametrize('marks', [-1, 101])
    def test_marks_out_of_range(self, faculty, assigned, review, marks):
        body = review(faculty, assigned, marks=marks, expect=400)

        assert any(err['field'] == 'marks' for err in body['errors'])

    def test_unknown_decision(self, faculty, assigned, review):
        review(faculty, assigned, decision='Rejected', expect=400)

    def test_students_cannot_review(self, student, assigned, review):
        review(student, assigned, expect=403)


class TestView:

    def test_round_trip_after_upload(self, client, student, upload, auth):
        created = upload(student, title='Research on Graphs', type='research',
                         domain='Theory', companyOrGuide='Prof. Lee')['submission']

        response = client.get(f"/submissions/{created['id']}", headers=auth(student))

        assert response.status_code == 200
        fetched = response.json()['submission']
        for key in ('title', 'type', 'domain', 'companyOrGuide', 'filePath'):
            assert fetched[key] == created[key]
        assert response.json()['reviews'] == []

    def test_other_student_is_forbidden(self, client, student, other_student, upload, auth):
        submission_id = upload(student)['submission']['id']

        response = client.get(f'/submissions/{submission_id}', headers=auth(other_student))

        assert response.status_code == 403
        assert response.json()['success'] is False

    def test_admin_sees_everything(self, client, student, admin, upload, auth):
        submission_id = upload(student)['submission']['id']

        response = client.get(f'/submissions/{submission_id}', headers=auth(admin))

        assert response.status_code == 200

    def test_faculty_only_sees_assigned(self, client, student, faculty, other_faculty, admin,
                                        upload, assign, auth):
        submission_id = upload(student)['submission']['id']
        assert client.get(f'/submissions/{submission_id}', headers=auth(faculty)).status_code == 403

        assign(admin, submission_id, faculty.id)

        assert client.get(f'/submissions/{submission_id}', headers=auth(faculty)).status_code == 200
        assert client.get(f'/submissions/{submission_id}', headers=auth(other_faculty)).status_code == 403

    def test_missing_submission(self, client, admin, auth):
        response = client.get('/submissions/does-not-exist', headers=auth(admin))

        assert response.status_code == 404

    def test_requires_authentication(self, client):
        assert client.get('/submissions/anything').status_code == 401
