DEFAULT_PASSWORD = 'secret123'


def test_signup_normalizes_email_and_logs_in(app):
    client = app.test_client()
    resp = client.post('/api/auth/signup', json={
        'email': '  Carol@Example.COM ',
        'password': DEFAULT_PASSWORD,
        'name': 'Carol',
        'role': 'student',
        'student_level': 'college',
    })
    assert resp.status_code == 201
    user = resp.get_json()['user']
    assert user['email'] == 'carol@example.com'
    assert user['student_level'] == 'college'
    assert 'password_hash' not in user

    me = client.get('/api/auth/me')
    assert me.status_code == 200
    assert me.get_json()['id'] == user['id']


def test_signup_rejects_duplicate_email(app, student):
    resp = app.test_client().post('/api/auth/signup', json={
        'email': 'ALICE@example.com', 'password': DEFAULT_PASSWORD, 'name': 'Again', 'role': 'student'
    })
    assert resp.status_code == 409
    assert resp.get_json() == {'success': False, 'message': 'User with this email already exists'}


def test_signup_validation(app):
    client = app.test_client()
    short = client.post('/api/auth/signup', json={
        'email': 'x@example.com', 'password': '123', 'name': 'X', 'role': 'student'
    })
    assert short.status_code == 400

    bad_role = client.post('/api/auth/signup', json={
        'email': 'x@example.com', 'password': DEFAULT_PASSWORD, 'name': 'X', 'role': 'admin'
    })
    assert bad_role.status_code == 400

    missing = client.post('/api/auth/signup', json={'email': 'x@example.com'})
    assert missing.status_code == 400
    assert 'password' in missing.get_json()['message']


def test_signup_rejects_non_string_fields(app):
    client = app.test_client()
    payload = {'email': 'x@example.com', 'password': DEFAULT_PASSWORD, 'name': 'X', 'role': 'student'}

    resp = client.post('/api/auth/signup', json=dict(payload, name=42))
    assert resp.status_code == 400
    assert resp.get_json() == {'success': False, 'message': 'name must be a string'}
    assert client.post('/api/auth/signup', json=dict(payload, email=123)).status_code == 400
    assert client.post('/api/auth/signup', json=dict(payload, password=12345678)).status_code == 400
    assert client.post('/api/auth/signup', json=payload).status_code == 201


def test_signin_rejects_non_string_credentials(app, student):
    client = app.test_client()
    resp = client.post('/api/auth/signin', json={'email': 'alice@example.com', 'password': [DEFAULT_PASSWORD]})
    assert resp.status_code == 400
    assert resp.get_json()['success'] is False
    assert client.post('/api/auth/signin', json={'email': 1, 'password': DEFAULT_PASSWORD}).status_code == 400
    assert client.get('/api/auth/me').status_code == 401


def test_signin_and_signout(app, student):
    client = app.test_client()
    wrong = client.post('/api/auth/signin', json={'email': 'alice@example.com', 'password': 'nope-nope'})
    assert wrong.status_code == 401

    unknown = client.post('/api/auth/signin', json={'email': 'ghost@example.com', 'password': DEFAULT_PASSWORD})
    assert unknown.status_code == 401

    ok = client.post('/api/auth/signin', json={'email': 'Alice@Example.com', 'password': DEFAULT_PASSWORD})
    assert ok.status_code == 200
    assert ok.get_json()['user']['name'] == 'Alice'

    assert client.post('/api/auth/signout').status_code == 200
    assert client.get('/api/auth/me').status_code == 401


def test_change_password(app, student):
    wrong = student.post('/api/auth/password', json={
        'current_password': 'not-it', 'new_password': 'another123'
    })
    assert wrong.status_code == 401

    ok = student.post('/api/auth/password', json={
        'current_password': DEFAULT_PASSWORD, 'new_password': 'another123'
    })
    assert ok.status_code == 200

    client = app.test_client()
    assert client.post('/api/auth/signin', json={
        'email': 'alice@example.com', 'password': DEFAULT_PASSWORD
    }).status_code == 401
    assert client.post('/api/auth/signin', json={
        'email': 'alice@example.com', 'password': 'another123'
    }).status_code == 200


def test_create_user_requires_login(app):
    resp = app.test_client().post('/api/users', json={
        'name': 'Dan', 'email': 'dan@example.com', 'role': 'student'
    })
    assert resp.status_code == 401


def test_created_user_has_no_password(app, teacher):
    resp = teacher.post('/api/users', json={
        'name': 'Dan', 'email': 'dan@example.com', 'role': 'student'
    })
    assert resp.status_code == 201
    assert app.test_client().post('/api/auth/signin', json={
        'email': 'dan@example.com', 'password': DEFAULT_PASSWORD
    }).status_code == 401

    dup = teacher.post('/api/users', json={'name': 'Dan', 'email': 'dan@example.com', 'role': 'student'})
    assert dup.status_code == 409


def test_get_user(teacher, student):
    resp = teacher.get(f"/api/users/{student.user['id']}")
    assert resp.status_code == 200
    assert resp.get_json()['email'] == 'alice@example.com'

    assert teacher.get('/api/users/9999').status_code == 404

    by_email = teacher.get('/api/users/by-email?email=ALICE@example.com')
    assert by_email.get_json()['id'] == student.user['id']
    assert teacher.get('/api/users/by-email?email=nobody@example.com').status_code == 404


def test_update_profile_only_touches_supplied_fields(student):
    resp = student.patch('/api/users/me', json={'phone': '555-0100', 'office': 'B12'})
    assert resp.status_code == 200
    user = resp.get_json()['user']
    assert user['phone'] == '555-0100'
    assert user['office'] == 'B12'
    assert user['name'] == 'Alice'
    assert user['id_number'] == 'S001'

    assert student.patch('/api/users/me', json={'name': '   '}).status_code == 400
    assert student.patch('/api/users/me', json={'name': 7}).status_code == 400
    assert student.get('/api/auth/me').get_json()['name'] == 'Alice'


def test_health(app):
    resp = app.test_client().get('/api/health')
    assert resp.get_json() == {'backend': 'ok', 'database': 'ok'}
