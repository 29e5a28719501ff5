"""日程与提醒服务"""
from flask import current_app
from app.extensions import db
from app.models import (Event, Reminder, EventType, ClassType, Class,
                        ClassMember, UserRole)
from app.services.class_service import ClassService
from app.utils.exceptions import (ValidationError, PermissionDeniedError,
                                  NotFoundError)
from app.utils.helpers import parse_iso_date, parse_time, parse_choice, parse_str


EVENT_FIELDS = ('title', 'description', 'date', 'time', 'event_type', 'class_type')


class CalendarService:
    """日程与提醒服务类"""

    # ---------- 日程 ----------

    @staticmethod
    def _visible_classes(user):
        """教师为任教班级，学生为已加入班级"""
        if user.role == UserRole.TEACHER:
            return Class.query.filter_by(teacher_id=user.id).all()
        memberships = ClassMember.query.filter_by(student_id=user.id).all()
        return [m.class_obj for m in memberships if m.class_obj is not None]

    @staticmethod
    def get_user_events(user, start_date=None, end_date=None):
        """用户可见的日程：所在班级的班级日程 + 自己的个人日程"""
        if start_date is not None:
            parse_iso_date(start_date, 'start')
        if end_date is not None:
            parse_iso_date(end_date, 'end')

        def in_range(event):
            if start_date is not None and event.date < start_date:
                return False
            if end_date is not None and event.date > end_date:
                return False
            return True

        events = []
        for class_obj in CalendarService._visible_classes(user):
            class_events = Event.query.filter_by(class_id=class_obj.id).all()
            events.extend(
                e.to_dict(class_name=class_obj.name)
                for e in class_events if not e.is_personal and in_range(e)
            )

        personal = Event.query.filter_by(created_by=user.id, is_personal=True).all()
        events.extend(e.to_dict() for e in personal if in_range(e))
        events.sort(key=lambda e: (e['date'], e['time'] or ''))
        return events

    @staticmethod
    def get_class_events(class_id):
        class_obj = db.session.get(Class, class_id)
        if not class_obj:
            return []
        events = Event.query.filter_by(class_id=class_id).filter(
            db.or_(Event.is_personal.is_(False), Event.is_personal.is_(None))
        ).order_by(Event.date, Event.time).all()
        return [e.to_dict(class_name=class_obj.name) for e in events]

    @staticmethod
    def create_event(user, title, date, is_personal=False, class_id=None,
                     description=None, time=None, event_type=None, class_type=None):
        """创建日程；班级日程只能由该班教师创建"""
        title = parse_str(title, 'title')
        description = parse_str(description, 'description', required=False)
        parse_iso_date(date)
        parse_time(time)
        parse_choice(event_type, EventType.ALL, 'event_type', required=False)
        parse_choice(class_type, ClassType.ALL, 'class_type', required=False)

        if class_id is not None:
            class_obj = ClassService.get_class_or_404(class_id)
            if not is_personal and (user.role != UserRole.TEACHER or class_obj.teacher_id != user.id):
                raise PermissionDeniedError('Only the class teacher can create class-wide events')
        elif not is_personal:
            raise ValidationError('class_id is required for class-wide events')

        event = Event(
            class_id=class_id,
            title=title,
            description=description,
            date=date,
            time=time or None,
            event_type=event_type,
            class_type=class_type,
            created_by=user.id,
            is_personal=bool(is_personal)
        )
        db.session.add(event)
        db.session.commit()
        current_app.logger.info(f'Event {event.id} created by user {user.id}')
        return event

    @staticmethod
    def _own_event(user, event_id, action):
        event = db.session.get(Event, event_id)
        if not event:
            raise NotFoundError('Event not found')
        if event.created_by != user.id:
            raise PermissionDeniedError(f"You don't have permission to {action} this event")
        return event

    @staticmethod
    def update_event(user, event_id, **fields):
        """部分更新日程"""
        event = CalendarService._own_event(user, event_id, 'update')
        updates = {k: v for k, v in fields.items() if k in EVENT_FIELDS and v is not None}
        if 'title' in updates:
            updates['title'] = parse_str(updates['title'], 'title')
        if 'description' in updates:
            updates['description'] = parse_str(updates['description'], 'description', required=False)
        if 'date' in updates:
            parse_iso_date(updates['date'])
        if 'time' in updates:
            updates['time'] = parse_time(updates['time'])
        if 'event_type' in updates:
            parse_choice(updates['event_type'], EventType.ALL, 'event_type')
        if 'class_type' in updates:
            parse_choice(updates['class_type'], ClassType.ALL, 'class_type')

        for key, value in updates.items():
            setattr(event, key, value)
        if 'date' in updates or 'time' in updates:
            # 时间变化后重新提醒
            event.notified_at = None
        db.session.commit()
        return event

    @staticmethod
    def delete_event(user, event_id):
        event = CalendarService._own_event(user, event_id, 'delete')
        db.session.delete(event)
        db.session.commit()

    # ---------- 提醒 ----------

    @staticmethod
    def get_user_reminders(user):
        """自己的提醒 + 学生所在班级的班级提醒"""
        own = Reminder.query.filter_by(user_id=user.id).order_by(Reminder.due_date).all()
        reminders = []
        for reminder in own:
            class_name = reminder.class_obj.name if reminder.class_obj else None
            reminders.append(reminder.to_dict(class_name=class_name))

        if user.is_student:
            for membership in ClassMember.query.filter_by(student_id=user.id).all():
                class_obj = membership.class_obj
                if class_obj is None:
                    continue
                class_reminders = Reminder.query.filter_by(
                    class_id=class_obj.id, is_class_wide=True
                ).order_by(Reminder.due_date).all()
                reminders.extend(r.to_dict(class_name=class_obj.name) for r in class_reminders)
        return reminders

    @staticmethod
    def create_reminder(user, title, due_date, is_class_wide=False, class_id=None, description=None):
        """创建提醒；班级提醒只能由该班教师创建"""
        title = parse_str(title, 'title')
        description = parse_str(description, 'description', required=False)
        parse_iso_date(due_date, 'due_date')

        if is_class_wide:
            if class_id is None:
                raise ValidationError('class_id is required for class-wide reminders')
            class_obj = ClassService.get_class_or_404(class_id)
            if user.role != UserRole.TEACHER or class_obj.teacher_id != user.id:
                raise PermissionDeniedError('Only the class teacher can create class-wide reminders')
        elif class_id is not None:
            ClassService.get_class_or_404(class_id)

        reminder = Reminder(
            user_id=user.id,
            class_id=class_id,
            title=title,
            description=description,
            due_date=due_date,
            completed=False,
            is_class_wide=bool(is_class_wide)
        )
        db.session.add(reminder)
        db.session.commit()
        return reminder

    @staticmethod
    def _own_reminder(user, reminder_id):
        reminder = db.session.get(Reminder, reminder_id)
        if not reminder:
            raise NotFoundError('Reminder not found')
        if reminder.user_id != user.id:
            raise PermissionDeniedError("You don't have permission to modify this reminder")
        return reminder

    @staticmethod
    def toggle_reminder(user, reminder_id):
        """切换完成状态"""
        reminder = CalendarService._own_reminder(user, reminder_id)
        reminder.completed = not reminder.completed
        db.session.commit()
        return reminder

    @staticmethod
    def delete_reminder(user, reminder_id):
        reminder = CalendarService._own_reminder(user, reminder_id)
        db.session.delete(reminder)
        db.session.commit()
