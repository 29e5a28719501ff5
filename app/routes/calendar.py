"""日程与提醒路由"""
from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user
from app.routes.classes import visible_class
from app.services import CalendarService
from app.services.calendar_service import EVENT_FIELDS
from app.utils import get_json_body, require_fields, parse_int, parse_bool

bp = Blueprint('calendar', __name__, url_prefix='/api')


def _optional_class_id(data):
    class_id = data.get('class_id')
    if class_id in (None, ''):
        return None
    return parse_int(class_id, 'class_id')


# ---------- 日程 ----------

@bp.route('/events', methods=['GET'])
@login_required
def list_events():
    """当前用户可见的日程，可按日期范围过滤"""
    events = CalendarService.get_user_events(
        current_user,
        start_date=request.args.get('start') or None,
        end_date=request.args.get('end') or None
    )
    return jsonify(events)


@bp.route('/classes/<int:class_id>/events')
@login_required
def class_events(class_id):
    visible_class(class_id)
    return jsonify(CalendarService.get_class_events(class_id))


@bp.route('/events', methods=['POST'])
@login_required
def create_event():
    """创建日程"""
    data = get_json_body()
    title, date = require_fields(data, 'title', 'date')
    event = CalendarService.create_event(
        current_user,
        title=title,
        date=date,
        is_personal=parse_bool(data.get('is_personal'), 'is_personal', default=False),
        class_id=_optional_class_id(data),
        description=data.get('description'),
        time=data.get('time'),
        event_type=data.get('event_type'),
        class_type=data.get('class_type')
    )
    return jsonify({'success': True, 'event': event.to_dict()}), 201


@bp.route('/events/<int:event_id>', methods=['PATCH'])
@login_required
def update_event(event_id):
    """部分更新日程"""
    data = get_json_body()
    fields = {key: data[key] for key in EVENT_FIELDS if key in data}
    event = CalendarService.update_event(current_user, event_id, **fields)
    return jsonify({'success': True, 'event': event.to_dict()})


@bp.route('/events/<int:event_id>', methods=['DELETE'])
@login_required
def delete_event(event_id):
    CalendarService.delete_event(current_user, event_id)
    return jsonify({'success': True})


# ---------- 提醒 ----------

@bp.route('/reminders', methods=['GET'])
@login_required
def list_reminders():
    return jsonify(CalendarService.get_user_reminders(current_user))


@bp.route('/reminders', methods=['POST'])
@login_required
def create_reminder():
    """创建提醒"""
    data = get_json_body()
    title, due_date = require_fields(data, 'title', 'due_date')
    reminder = CalendarService.create_reminder(
        current_user,
        title=title,
        due_date=due_date,
        is_class_wide=parse_bool(data.get('is_class_wide'), 'is_class_wide', default=False),
        class_id=_optional_class_id(data),
        description=data.get('description')
    )
    return jsonify({'success': True, 'reminder': reminder.to_dict()}), 201


@bp.route('/reminders/<int:reminder_id>/toggle', methods=['POST'])
@login_required
def toggle_reminder(reminder_id):
    """切换提醒完成状态"""
    reminder = CalendarService.toggle_reminder(current_user, reminder_id)
    return jsonify({'success': True, 'completed': reminder.completed})


@bp.route('/reminders/<int:reminder_id>', methods=['DELETE'])
@login_required
def delete_reminder(reminder_id):
    CalendarService.delete_reminder(current_user, reminder_id)
    return jsonify({'success': True})
