import pytest


@pytest.fixture
def seating_url(classroom):
    return f"/api/classes/{classroom['id']}/seating"


@pytest.fixture
def seat_plan(teacher, seating_url):
    resp = teacher.post(f'{seating_url}/init', json={'rows': 2, 'columns': 3})
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()['seat_plan']


def seat_at(plan, x, y):
    return next(s for s in plan['seats'] if s['x'] == x and s['y'] == y)


def test_no_plan_yet(teacher, seating_url):
    assert teacher.get(seating_url).get_json() is None


def test_initialize_plan(teacher, seating_url, seat_plan):
    assert seat_plan['rows'] == 2
    assert seat_plan['columns'] == 3
    assert seat_plan['finalized'] is False
    assert [s['label'] for s in seat_plan['seats']] == ['A1', 'A2', 'A3', 'B1', 'B2', 'B3']

    again = teacher.post(f'{seating_url}/init', json={'rows': 2, 'columns': 3})
    assert again.status_code == 409


def test_initialize_plan_validation(teacher, student, seating_url):
    assert teacher.post(f'{seating_url}/init', json={'rows': 27, 'columns': 3}).status_code == 400
    assert teacher.post(f'{seating_url}/init', json={'rows': 0, 'columns': 3}).status_code == 400
    assert student.post(f'{seating_url}/init', json={'rows': 2, 'columns': 3}).status_code == 403


def test_assign_moves_student(teacher, student, classroom, seating_url, seat_plan):
    student_id = student.user['id']
    resp = teacher.post(f'{seating_url}/assign', json={'student_id': student_id, 'x': 0, 'y': 0})
    assert seat_at(resp.get_json()['seat_plan'], 0, 0)['student_name'] == 'Alice'

    resp = teacher.post(f'{seating_url}/assign', json={'student_id': student_id, 'x': 2, 'y': 1})
    plan = resp.get_json()['seat_plan']
    assert seat_at(plan, 0, 0)['student_id'] is None
    assert seat_at(plan, 2, 1)['student_id'] == student_id

    students = teacher.get(f"/api/classes/{classroom['id']}/students").get_json()
    alice = next(s for s in students if s['id'] == student_id)
    assert alice['seat_assignment'] == {'row': 1, 'col': 2}

    unassigned = teacher.get(f'{seating_url}/unassigned').get_json()
    assert [s['name'] for s in unassigned] == ['Bob']

    resp = teacher.post(f'{seating_url}/remove', json={'student_id': student_id})
    assert seat_at(resp.get_json()['seat_plan'], 2, 1)['student_id'] is None


def test_assign_errors(teacher, make_user, seating_url, seat_plan, student):
    outsider = make_user('eve@example.com')
    assert teacher.post(f'{seating_url}/assign', json={
        'student_id': outsider.user['id'], 'x': 0, 'y': 0
    }).status_code == 400
    assert teacher.post(f'{seating_url}/assign', json={
        'student_id': student.user['id'], 'x': 9, 'y': 9
    }).status_code == 404


def test_toggle_empty_evicts_student(teacher, student, seating_url, seat_plan):
    teacher.post(f'{seating_url}/assign', json={'student_id': student.user['id'], 'x': 1, 'y': 0})
    resp = teacher.post(f'{seating_url}/toggle-empty', json={'x': 1, 'y': 0, 'is_empty': True})
    seat = seat_at(resp.get_json()['seat_plan'], 1, 0)
    assert seat['is_empty'] is True
    assert seat['student_id'] is None

    disabled = teacher.post(f'{seating_url}/assign', json={'student_id': student.user['id'], 'x': 1, 'y': 0})
    assert disabled.status_code == 400
    assert student.post(f'{seating_url}/select', json={'x': 1, 'y': 0}).status_code == 400


def test_student_selects_seat(teacher, student, other_student, seating_url, seat_plan):
    resp = student.post(f'{seating_url}/select', json={'x': 0, 'y': 1})
    assert resp.status_code == 200
    assert seat_at(resp.get_json()['seat_plan'], 0, 1)['student_id'] == student.user['id']

    taken = other_student.post(f'{seating_url}/select', json={'x': 0, 'y': 1})
    assert taken.status_code == 409

    assert teacher.post(f'{seating_url}/select', json={'x': 0, 'y': 0}).status_code == 403


def test_finalized_seating(teacher, student, other_student, classroom, seating_url, seat_plan):
    teacher.post(f"/api/classes/{classroom['id']}/beadles", json={'student_id': student.user['id']})
    assert student.post(f'{seating_url}/finalize').status_code == 403

    resp = teacher.post(f'{seating_url}/finalize')
    assert resp.get_json() == {'success': True, 'finalized': True}
    assert teacher.get(seating_url).get_json()['finalized'] is True

    assert other_student.post(f'{seating_url}/select', json={'x': 0, 'y': 0}).status_code == 403
    beadle_edit = student.post(f'{seating_url}/assign', json={
        'student_id': other_student.user['id'], 'x': 0, 'y': 0
    })
    assert beadle_edit.status_code == 403
    assert teacher.post(f'{seating_url}/assign', json={
        'student_id': other_student.user['id'], 'x': 0, 'y': 0
    }).status_code == 200

    teacher.post(f'{seating_url}/unfinalize')
    assert other_student.post(f'{seating_url}/select', json={'x': 1, 'y': 0}).status_code == 200


def test_save_seat_plan(teacher, student, other_student, seating_url):
    payload = {
        'rows': 1,
        'columns': 2,
        'seats': [
            {'x': 0, 'y': 0, 'student_id': student.user['id']},
            {'x': 1, 'y': 0, 'is_empty': True},
        ],
    }
    created = teacher.put(seating_url, json=payload)
    assert created.status_code == 200
    body = created.get_json()
    assert body['updated'] is False
    assert seat_at(body['seat_plan'], 0, 0)['label'] == 'A1'

    payload['seats'] = [{'x': 0, 'y': 0}, {'x': 1, 'y': 0, 'student_id': other_student.user['id']}]
    replaced = teacher.put(seating_url, json=payload).get_json()
    assert replaced['updated'] is True
    assert seat_at(replaced['seat_plan'], 0, 0)['student_id'] is None
    assert seat_at(replaced['seat_plan'], 1, 0)['student_id'] == other_student.user['id']

    payload['seats'] = [{'x': 0, 'y': 0}, {'x': 0, 'y': 0}]
    assert teacher.put(seating_url, json=payload).status_code == 400
    payload['seats'] = [{'x': 0, 'y': 0, 'student_id': student.user['id']},
                        {'x': 1, 'y': 0, 'student_id': student.user['id']}]
    assert teacher.put(seating_url, json=payload).status_code == 400
    payload['seats'] = [{'x': 5, 'y': 0}]
    assert teacher.put(seating_url, json=payload).status_code == 400


def test_leaving_class_frees_seat(student, classroom, teacher, seating_url, seat_plan):
    student.post(f'{seating_url}/select', json={'x': 2, 'y': 0})
    student.post(f"/api/classes/{classroom['id']}/leave")
    plan = teacher.get(seating_url).get_json()
    assert all(s['student_id'] is None for s in plan['seats'])
