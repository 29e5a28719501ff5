from io import BytesIO

import pytest
from openpyxl import load_workbook

from app.services import AnalyticsService

DATES = ('2024-03-01', '2024-03-02', '2024-03-03')


@pytest.fixture
def attendance_history(teacher, student, other_student, classroom):
    """Alice 连续缺勤三次，Bob 全勤"""
    class_id = classroom['id']
    for date in DATES:
        for client, status in ((student, 'absent'), (other_student, 'present')):
            resp = teacher.post(f'/api/classes/{class_id}/attendance', json={
                'student_id': client.user['id'], 'date': date, 'status': status
            })
            assert resp.status_code == 200
    return classroom


def test_teacher_analytics(app, teacher, student, attendance_history):
    with app.app_context():
        result = AnalyticsService.get_teacher_analytics(teacher.user['id'], today='2024-03-03')

    assert result['total_classes'] == 1
    assert result['total_students'] == 2
    assert result['average_attendance'] == 50

    assert len(result['at_risk_students']) == 1
    at_risk = result['at_risk_students'][0]
    assert at_risk['student_id'] == student.user['id']
    assert at_risk['absences'] == 3
    assert at_risk['total_sessions'] == 3
    assert at_risk['allowable_remaining'] == 0
    assert at_risk['attendance_rate'] == 0
    assert at_risk['class_code'] == 'ALG101'

    performance = result['class_performance'][0]
    assert performance['attendance'] == 50
    assert performance['students'] == 2

    trends = result['recent_trends']
    assert [t['date'] for t in trends] == [
        '2024-02-26', '2024-02-27', '2024-02-28', '2024-02-29',
        '2024-03-01', '2024-03-02', '2024-03-03',
    ]
    assert [t['attendance'] for t in trends] == [0, 0, 0, 0, 50, 50, 50]


def test_teacher_analytics_without_classes(teacher):
    result = teacher.get('/api/analytics/teacher').get_json()
    assert result['total_classes'] == 0
    assert result['at_risk_students'] == []


def test_student_analytics(student, attendance_history):
    resp = student.get('/api/analytics/student')
    assert resp.status_code == 200
    result = resp.get_json()
    assert result['total_classes'] == 1
    assert result['overall_attendance'] == 0
    assert result['stats']['absent'] == 3
    assert len(result['recent_attendance']) == 3
    assert result['recent_attendance'][0]['date'] == '2024-03-03'
    assert result['class_performance'][0]['absent'] == 3


def test_analytics_role_checks(teacher, student):
    assert student.get('/api/analytics/teacher').status_code == 403
    assert teacher.get('/api/analytics/student').status_code == 403


def test_export_attendance(teacher, student, attendance_history):
    class_id = attendance_history['id']
    assert student.get(f'/api/classes/{class_id}/attendance/export').status_code == 403

    resp = teacher.get(f'/api/classes/{class_id}/attendance/export')
    assert resp.status_code == 200
    assert resp.mimetype == 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
    assert 'ALG101_attendance_' in resp.headers['Content-Disposition']

    workbook = load_workbook(BytesIO(resp.data))
    sheet = workbook['Attendance']
    rows = list(sheet.iter_rows(values_only=True))
    assert list(rows[0]) == ['Name', 'ID Number', 'Email', *DATES,
                             'Present', 'Late', 'Absent', 'Excused', 'Rate (%)']
    assert list(rows[1]) == ['Alice', 'S001', 'alice@example.com', 'A', 'A', 'A', 0, 0, 3, 0, 0]
    assert list(rows[2]) == ['Bob', 'S002', 'bob@example.com', 'P', 'P', 'P', 3, 0, 0, 0, 100]
    assert sheet.freeze_panes == 'B2'
