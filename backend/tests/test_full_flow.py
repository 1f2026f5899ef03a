"""
End-to-end flow through the public API only: register, login, upload,
assign, review and read back.
"""


def register_and_login(client, name, email, role=None):
    payload = {'name': name, 'email': email, 'password': 'Password123'}
    if role:
        payload['role'] = role
    assert client.post('/auth/register', json=payload).status_code == 201

    response = client.post('/auth/login', json={'email': email, 'password': 'Password123'})
    assert response.status_code == 200
    body = response.json()
    return body['userId'], {'Authorization': f"Bearer {body['token']}"}


def test_submission_is_approved_end_to_end(client, pdf_bytes):
    student_id, student_headers = register_and_login(client, 'Student A', 'a@uni.example.com')
    faculty_id, faculty_headers = register_and_login(client, 'Faculty B', 'b@uni.example.com', 'faculty')
    _, admin_headers = register_and_login(client, 'Admin C', 'c@uni.example.com', 'admin')

    uploaded = client.post(
        '/submissions/upload',
        data={'title': 'X', 'type': 'project'},
        files={'report': ('x.pdf', pdf_bytes, 'application/pdf')},
        headers=student_headers,
    )
    assert uploaded.status_code == 201
    submission_id = uploaded.json()['submission']['id']
    assert uploaded.json()['submission']['studentId'] == student_id

    faculty_list = client.get('/admin/faculty', headers=admin_headers).json()['faculty']
    assert [f['id'] for f in faculty_list] == [faculty_id]

    assigned = client.post('/admin/assign', json={'submissionId': submission_id, 'facultyId': faculty_id},
                           headers=admin_headers)
    assert assigned.status_code == 200

    queue = client.get('/faculty/assigned', headers=faculty_headers).json()['submissions']
    assert [(s['id'], s['status']) for s in queue] == [(submission_id, 'Assigned')]

    reviewed = client.post('/faculty/review',
                           json={'submissionId': submission_id, 'decision': 'Approved', 'marks': 90},
                           headers=faculty_headers)
    assert reviewed.status_code == 200
    assert reviewed.json()['newStatus'] == 'Approved'

    mine = client.get('/submissions/mine', headers=student_headers).json()
    assert mine['submissions'][0]['status'] == 'Approved'
    assert mine['submissions'][0]['version'] == 2
    assert len(mine['reviews']) == 1
    assert mine['reviews'][0]['decision'] == 'Approved'
    assert mine['reviews'][0]['marks'] == 90
    assert mine['reviews'][0]['faculty']['name'] == 'Faculty B'


def test_health_and_request_id(client):
    response = client.get('/health')

    assert response.status_code == 200
    assert response.json()['ok'] is True
    assert response.headers['X-Request-ID']
