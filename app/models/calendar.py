"""日程与提醒模型"""
from datetime import datetime
from app.extensions import db
from app.utils.helpers import to_iso


class EventType:
    EXAM = 'exam'
    ACTIVITY = 'activity'
    CLASS = 'class'
    DEADLINE = 'deadline'
    OTHER = 'other'

    ALL = (EXAM, ACTIVITY, CLASS, DEADLINE, OTHER)


class ClassType:
    IN_PERSON = 'in-person'
    ONLINE = 'online'
    ASYNC = 'async'

    ALL = (IN_PERSON, ONLINE, ASYNC)


class Event(db.Model):
    """日程：班级日程或个人日程"""
    id = db.Column(db.Integer, primary_key=True)
    class_id = db.Column(db.Integer, db.ForeignKey('class.id'), index=True)  # 个人日程可为空
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    date = db.Column(db.String(10), nullable=False, index=True)  # YYYY-MM-DD
    time = db.Column(db.String(5))  # HH:MM
    event_type = db.Column(db.String(20))
    class_type = db.Column(db.String(20))
    created_by = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    is_personal = db.Column(db.Boolean, default=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    notified_at = db.Column(db.DateTime)  # 定时任务已发送提醒的时间

    creator = db.relationship('User', backref=db.backref('created_events', lazy='dynamic'))

    def to_dict(self, class_name=None):
        return {
            'id': self.id,
            'class_id': self.class_id,
            'class_name': class_name,
            'title': self.title,
            'description': self.description,
            'date': self.date,
            'time': self.time,
            'event_type': self.event_type,
            'class_type': self.class_type,
            'created_by': self.created_by,
            'is_personal': bool(self.is_personal),
            'created_at': to_iso(self.created_at),
        }

    def __repr__(self):
        return f'<Event {self.title} {self.date}>'


class Reminder(db.Model):
    """提醒：个人待办或教师发布的班级提醒"""
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    class_id = db.Column(db.Integer, db.ForeignKey('class.id'), index=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    due_date = db.Column(db.String(10), nullable=False, index=True)  # YYYY-MM-DD
    completed = db.Column(db.Boolean, default=False)
    is_class_wide = db.Column(db.Boolean, default=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    notified_at = db.Column(db.DateTime)

    owner = db.relationship('User', backref=db.backref('reminders', lazy='dynamic'))

    def to_dict(self, class_name=None):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'class_id': self.class_id,
            'class_name': class_name,
            'title': self.title,
            'description': self.description,
            'due_date': self.due_date,
            'completed': bool(self.completed),
            'is_class_wide': bool(self.is_class_wide),
            'created_at': to_iso(self.created_at),
        }

    def __repr__(self):
        return f'<Reminder {self.title} {self.due_date}>'
