"""通知相关模型"""
from datetime import datetime
from app.extensions import db
from app.utils.helpers import to_iso


class NotificationType:
    """通知类型"""
    SYSTEM = 'system'
    CLASS_JOIN = 'class_join'
    EVENT_UPCOMING = 'event_upcoming'
    REMINDER_DUE = 'reminder_due'
    BEADLE = 'beadle'


class Notification(db.Model):
    """系统通知模型"""
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    content = db.Column(db.Text, nullable=False)
    notification_type = db.Column(db.String(50), nullable=False)
    sender_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=True)  # 系统通知可以没有发送者
    receiver_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    is_read = db.Column(db.Boolean, default=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    related_class_id = db.Column(db.Integer, db.ForeignKey('class.id', ondelete='SET NULL'))
    related_event_id = db.Column(db.Integer, db.ForeignKey('event.id', ondelete='SET NULL'))
    related_reminder_id = db.Column(db.Integer, db.ForeignKey('reminder.id', ondelete='SET NULL'))

    # 关系
    sender = db.relationship('User', foreign_keys=[sender_id], backref='sent_notifications')
    receiver = db.relationship('User', foreign_keys=[receiver_id], backref='received_notifications')

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'content': self.content,
            'notification_type': self.notification_type,
            'sender_id': self.sender_id,
            'receiver_id': self.receiver_id,
            'is_read': bool(self.is_read),
            'created_at': to_iso(self.created_at),
            'related_class_id': self.related_class_id,
            'related_event_id': self.related_event_id,
            'related_reminder_id': self.related_reminder_id,
        }

    def __repr__(self):
        return f'<Notification {self.title}>'
