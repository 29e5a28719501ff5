from datetime import datetime

import pytest

from app.extensions import db
from app.models import Notification, NotificationType, Event, Reminder
from app.services import NotificationService
from app.services.scheduler_service import run_scheduled_notifications


def scheduled(app, receiver_id=None):
    """定时任务生成的通知"""
    kinds = (NotificationType.EVENT_UPCOMING, NotificationType.REMINDER_DUE)
    with app.app_context():
        query = Notification.query.filter(Notification.notification_type.in_(kinds))
        if receiver_id is not None:
            query = query.filter_by(receiver_id=receiver_id)
        return [(n.receiver_id, n.notification_type, n.title) for n in query.all()]


@pytest.fixture
def local_now(app):
    return datetime(2024, 3, 1, 9, 0, tzinfo=app.config['LOCAL_TZ'])


def test_inbox(teacher, student, other_student, classroom):
    data = teacher.get('/api/notifications').get_json()
    assert data['total'] == 2
    assert data['unread_count'] == 2
    assert teacher.get('/api/notifications/count').get_json() == {'count': 2}

    first_id = data['notifications'][0]['id']
    resp = teacher.post(f'/api/notifications/{first_id}/read')
    assert resp.get_json() == {'success': True, 'unread_count': 1}

    unread = teacher.get('/api/notifications?unread=1').get_json()
    assert [n['id'] for n in unread['notifications']] != [first_id]
    assert unread['total'] == 1

    assert teacher.post('/api/notifications/read-all').get_json() == {'success': True, 'count': 1}
    assert teacher.get('/api/notifications/count').get_json() == {'count': 0}

    assert teacher.delete(f'/api/notifications/{first_id}').status_code == 200
    assert teacher.get('/api/notifications').get_json()['total'] == 1


def test_inbox_belongs_to_receiver(teacher, student, classroom):
    notification_id = teacher.get('/api/notifications').get_json()['notifications'][0]['id']
    assert student.post(f'/api/notifications/{notification_id}/read').status_code == 403
    assert student.delete(f'/api/notifications/{notification_id}').status_code == 403
    assert student.delete('/api/notifications/9999').status_code == 404
    assert teacher.get('/api/notifications/count').get_json() == {'count': 2}


def test_inbox_pagination(app, teacher):
    with app.app_context():
        for i in range(25):
            NotificationService.create_notification(None, teacher.user['id'], f'Notice {i}', 'body', commit=False)
        db.session.commit()

    page1 = teacher.get('/api/notifications').get_json()
    assert len(page1['notifications']) == 20
    assert page1['pages'] == 2
    page2 = teacher.get('/api/notifications?page=2&per_page=20').get_json()
    assert len(page2['notifications']) == 5
    odd_size = teacher.get('/api/notifications?per_page=7').get_json()
    assert len(odd_size['notifications']) == 20


def test_due_reminders(app, teacher, student, other_student, classroom, local_now):
    class_id = classroom['id']
    student.post('/api/reminders', json={'title': 'Buy calculator', 'due_date': '2024-03-01'})
    student.post('/api/reminders', json={'title': 'Later', 'due_date': '2024-03-05'})
    done = student.post('/api/reminders', json={'title': 'Done', 'due_date': '2024-02-20'}).get_json()['reminder']
    student.post(f"/api/reminders/{done['id']}/toggle")
    teacher.post('/api/reminders', json={
        'title': 'Homework 3', 'due_date': '2024-02-29', 'is_class_wide': True, 'class_id': class_id
    })

    with app.app_context():
        result = NotificationService.process_scheduled_notifications(now=local_now)
    assert result == {'reminders': 2, 'events': 0, 'notifications': 3}

    alice = sorted(title for _, _, title in scheduled(app, student.user['id']))
    assert alice == ['Reminder due: Buy calculator', 'Reminder due: Homework 3']
    assert [t for _, _, t in scheduled(app, other_student.user['id'])] == ['Reminder due: Homework 3']
    assert scheduled(app, teacher.user['id']) == []

    with app.app_context():
        again = NotificationService.process_scheduled_notifications(now=local_now)
        assert Reminder.query.filter(Reminder.notified_at.is_(None)).count() == 2
    assert again == {'reminders': 0, 'events': 0, 'notifications': 0}


def test_class_reminders_respect_send_reminders(app, teacher, classroom, local_now):
    class_id = classroom['id']
    teacher.put(f'/api/classes/{class_id}/settings', json={'name': 'Algebra', 'send_reminders': False})
    teacher.post('/api/reminders', json={
        'title': 'Quiet', 'due_date': '2024-02-29', 'is_class_wide': True, 'class_id': class_id
    })

    with app.app_context():
        result = NotificationService.process_scheduled_notifications(now=local_now)
        assert Reminder.query.one().notified_at is not None
    assert result == {'reminders': 1, 'events': 0, 'notifications': 0}


def test_upcoming_events(app, teacher, student, other_student, classroom, local_now):
    class_id = classroom['id']
    teacher.post('/api/events', json={'title': 'Quiz', 'date': '2024-03-01', 'time': '09:20', 'class_id': class_id})
    teacher.post('/api/events', json={'title': 'Lab', 'date': '2024-03-01', 'time': '11:00', 'class_id': class_id})
    teacher.post('/api/events', json={'title': 'Old', 'date': '2024-02-28', 'class_id': class_id})
    teacher.post('/api/events', json={'title': 'Tomorrow', 'date': '2024-03-02', 'class_id': class_id})
    student.post('/api/events', json={'title': 'Dentist', 'date': '2024-03-01', 'time': '09:30',
                                      'is_personal': True})

    with app.app_context():
        result = NotificationService.process_scheduled_notifications(now=local_now)
        pending = sorted(e.title for e in Event.query.filter(Event.notified_at.is_(None)).all())
    assert result == {'reminders': 0, 'events': 2, 'notifications': 4}
    assert pending == ['Lab', 'Tomorrow']

    receivers = sorted(r for r, _, title in scheduled(app) if title == 'Upcoming: Quiz')
    assert receivers == sorted([teacher.user['id'], student.user['id'], other_student.user['id']])
    assert [r for r, _, title in scheduled(app) if title == 'Upcoming: Dentist'] == [student.user['id']]

    later = datetime(2024, 3, 1, 10, 45, tzinfo=app.config['LOCAL_TZ'])
    with app.app_context():
        result = NotificationService.process_scheduled_notifications(now=later)
    assert result['events'] == 1
    assert result['notifications'] == 3


def test_started_events_are_not_announced(app, teacher, student, other_student, classroom, local_now):
    class_id = classroom['id']
    teacher.post('/api/events', json={'title': 'Roll call', 'date': '2024-03-01', 'time': '08:00',
                                      'class_id': class_id})
    teacher.post('/api/events', json={'title': 'Field day', 'date': '2024-03-01', 'class_id': class_id})

    with app.app_context():
        result = NotificationService.process_scheduled_notifications(now=local_now)
        roll_call = Event.query.filter_by(title='Roll call').one()
        assert roll_call.notified_at is not None
    assert result == {'reminders': 0, 'events': 1, 'notifications': 3}
    titles = {title for _, _, title in scheduled(app)}
    assert titles == {'Upcoming: Field day'}


def test_scheduler_job_runs_in_app_context(app, student):
    student.post('/api/reminders', json={'title': 'Old', 'due_date': '2020-01-01'})
    result = run_scheduled_notifications(app)
    assert result['reminders'] == 1
    assert result['notifications'] == 1


def test_scheduler_job_survives_failures(app, monkeypatch):
    def boom(now=None):
        raise RuntimeError('database unavailable')

    monkeypatch.setattr(NotificationService, 'process_scheduled_notifications', staticmethod(boom))
    assert run_scheduled_notifications(app) is None


def test_scheduler_disabled_in_testing(app):
    from app.services.scheduler_service import scheduler
    assert app.config['SCHEDULER_ENABLED'] is False
    assert not scheduler.running
