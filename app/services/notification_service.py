"""通知服务"""
from datetime import datetime, timedelta
from flask import current_app
from app.extensions import db
from app.models import (Notification, NotificationType, Class, ClassMember,
                        Event, Reminder)
from app.utils.exceptions import NotFoundError, PermissionDeniedError
from app.utils.helpers import local_now, DATE_FORMAT


class NotificationService:
    """通知服务类"""

    @staticmethod
    def create_notification(sender_id, receiver_id, title, content,
                            notification_type=NotificationType.SYSTEM,
                            related_class_id=None,
                            related_event_id=None,
                            related_reminder_id=None,
                            commit=True):
        """创建通知"""
        notification = Notification(
            title=title,
            content=content,
            notification_type=notification_type,
            sender_id=sender_id,
            receiver_id=receiver_id,
            related_class_id=related_class_id,
            related_event_id=related_event_id,
            related_reminder_id=related_reminder_id
        )
        db.session.add(notification)
        if commit:
            db.session.commit()
        return notification

    @staticmethod
    def get_notifications(user_id, page=1, per_page=20, unread_only=False):
        """分页获取用户通知，按时间降序"""
        query = Notification.query.filter_by(receiver_id=user_id)
        if unread_only:
            query = query.filter_by(is_read=False)
        return query.order_by(Notification.created_at.desc(), Notification.id.desc()).paginate(
            page=page, per_page=per_page, error_out=False
        )

    @staticmethod
    def get_unread_count(user_id):
        """获取用户未读通知数量"""
        return Notification.query.filter_by(
            receiver_id=user_id,
            is_read=False
        ).count()

    @staticmethod
    def _get_own_notification(user_id, notification_id):
        notification = db.session.get(Notification, notification_id)
        if not notification:
            raise NotFoundError('Notification not found')
        if notification.receiver_id != user_id:
            raise PermissionDeniedError('You cannot access this notification')
        return notification

    @staticmethod
    def mark_as_read(user_id, notification_id):
        """标记通知为已读"""
        notification = NotificationService._get_own_notification(user_id, notification_id)
        notification.is_read = True
        db.session.commit()
        return notification

    @staticmethod
    def mark_all_as_read(user_id):
        """标记用户所有通知为已读"""
        count = Notification.query.filter_by(
            receiver_id=user_id,
            is_read=False
        ).update({'is_read': True})
        db.session.commit()
        return count

    @staticmethod
    def delete_notification(user_id, notification_id):
        """删除通知"""
        notification = NotificationService._get_own_notification(user_id, notification_id)
        db.session.delete(notification)
        db.session.commit()

    @staticmethod
    def process_scheduled_notifications(now=None):
        """
        处理到期的提醒和即将开始的日程（定时任务每分钟调用）

        Args:
            now: 本地时间（带时区），默认当前时间

        Returns:
            dict: 本次处理的提醒数、日程数和生成的通知数
        """
        if now is None:
            now = local_now()
        today = now.strftime(DATE_FORMAT)
        stamp = datetime.utcnow()
        created = 0

        # 到期提醒
        due_reminders = Reminder.query.filter(
            Reminder.notified_at.is_(None),
            Reminder.completed.is_(False),
            Reminder.due_date <= today
        ).all()
        for reminder in due_reminders:
            for receiver_id in NotificationService._reminder_recipients(reminder):
                NotificationService.create_notification(
                    sender_id=None,
                    receiver_id=receiver_id,
                    title=f'Reminder due: {reminder.title}',
                    content=reminder.description or f'"{reminder.title}" is due on {reminder.due_date}.',
                    notification_type=NotificationType.REMINDER_DUE,
                    related_class_id=reminder.class_id,
                    related_reminder_id=reminder.id,
                    commit=False
                )
                created += 1
            reminder.notified_at = stamp

        # 即将开始的日程
        lead = timedelta(minutes=current_app.config['EVENT_NOTIFY_LEAD_MINUTES'])
        horizon = (now + lead).strftime(DATE_FORMAT)
        pending_events = Event.query.filter(
            Event.notified_at.is_(None),
            Event.date <= horizon
        ).all()
        processed_events = 0
        for event in pending_events:
            if event.date < today:
                # 已过期的日程只做标记，不再通知
                event.notified_at = stamp
                continue
            start = NotificationService._event_start(event, now.tzinfo)
            if event.time and start < now:
                # 已开始的日程同样只做标记
                event.notified_at = stamp
                continue
            if start - lead > now:
                continue
            when = f'{event.date} {event.time}' if event.time else event.date
            for receiver_id in NotificationService._event_recipients(event):
                NotificationService.create_notification(
                    sender_id=event.created_by,
                    receiver_id=receiver_id,
                    title=f'Upcoming: {event.title}',
                    content=event.description or f'"{event.title}" starts at {when}.',
                    notification_type=NotificationType.EVENT_UPCOMING,
                    related_class_id=event.class_id,
                    related_event_id=event.id,
                    commit=False
                )
                created += 1
            event.notified_at = stamp
            processed_events += 1

        db.session.commit()
        return {
            'reminders': len(due_reminders),
            'events': processed_events,
            'notifications': created,
        }

    @staticmethod
    def _event_start(event, tzinfo):
        """日程开始时间，无具体时间时取当天零点"""
        value = f'{event.date} {event.time or "00:00"}'
        return datetime.strptime(value, f'{DATE_FORMAT} %H:%M').replace(tzinfo=tzinfo)

    @staticmethod
    def _class_student_ids(class_id):
        return [m.student_id for m in ClassMember.query.filter_by(class_id=class_id).all()]

    @staticmethod
    def _reminder_recipients(reminder):
        if reminder.is_class_wide and reminder.class_id:
            class_obj = db.session.get(Class, reminder.class_id)
            if not class_obj or not class_obj.send_reminders:
                return []
            return NotificationService._class_student_ids(class_obj.id)
        return [reminder.user_id]

    @staticmethod
    def _event_recipients(event):
        if event.is_personal or not event.class_id:
            return [event.created_by]
        class_obj = db.session.get(Class, event.class_id)
        if not class_obj:
            return [event.created_by]
        receivers = [class_obj.teacher_id]
        for student_id in NotificationService._class_student_ids(class_obj.id):
            if student_id not in receivers:
                receivers.append(student_id)
        return receivers
