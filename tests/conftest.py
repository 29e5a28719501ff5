import pytest
from app import create_app
from app.extensions import db


DEFAULT_PASSWORD = 'secret123'


@pytest.fixture
def app():
    app = create_app('testing')
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def make_user(app):
    """注册用户并返回已登录的测试客户端，client.user 为用户信息"""
    def _make(email, role='student', name=None, password=DEFAULT_PASSWORD, **extra):
        client = app.test_client()
        payload = dict(email=email, password=password, role=role,
                       name=name or email.split('@')[0].title(), **extra)
        resp = client.post('/api/auth/signup', json=payload)
        assert resp.status_code == 201, resp.get_json()
        client.user = resp.get_json()['user']
        return client
    return _make


@pytest.fixture
def teacher(make_user):
    return make_user('teacher@example.com', role='teacher', name='Ms Lee')


@pytest.fixture
def student(make_user):
    return make_user('alice@example.com', name='Alice', id_number='S001')


@pytest.fixture
def other_student(make_user):
    return make_user('bob@example.com', name='Bob', id_number='S002')


@pytest.fixture
def classroom(teacher, student, other_student):
    resp = teacher.post('/api/classes', json={'name': 'Algebra', 'code': 'ALG101'})
    assert resp.status_code == 201, resp.get_json()
    for client in (student, other_student):
        assert client.post('/api/classes/join', json={'code': 'ALG101'}).status_code == 200
    return resp.get_json()['class']


@pytest.fixture
def beadle(teacher, student, classroom):
    """把 student 任命为班干部"""
    resp = teacher.post(f"/api/classes/{classroom['id']}/beadles",
                        json={'student_id': student.user['id']})
    assert resp.status_code == 200, resp.get_json()
    return student
