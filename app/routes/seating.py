"""座位表路由"""
from flask import Blueprint, jsonify, current_app
from flask_login import login_required, current_user
from app.routes.classes import visible_class
from app.services import SeatingService
from app.models import seat_plan_to_dict
from app.utils import (require_teacher, require_student, get_json_body,
                       require_fields, parse_int, parse_bool)

bp = Blueprint('seating', __name__, url_prefix='/api/classes/<int:class_id>/seating')


def _plan_response(plan, class_obj, **extra):
    return jsonify(dict(
        success=True,
        seat_plan=seat_plan_to_dict(plan, finalized=class_obj.seating_finalized),
        **extra
    ))


def _position(data):
    x, y = require_fields(data, 'x', 'y')
    return parse_int(x, 'x', minimum=0), parse_int(y, 'y', minimum=0)


@bp.route('', methods=['GET'])
@login_required
def get_seat_plan(class_id):
    """座位表，未创建时返回null"""
    visible_class(class_id)
    return jsonify(SeatingService.get_seat_plan(class_id))


@bp.route('/init', methods=['POST'])
@login_required
def init_seat_plan(class_id):
    """按行列生成座位表"""
    class_obj = visible_class(class_id)
    data = get_json_body()
    plan = SeatingService.initialize_seat_plan(
        current_user, class_id,
        data.get('rows', current_app.config['DEFAULT_SEATING_ROWS']),
        data.get('columns', current_app.config['DEFAULT_SEATING_COLS'])
    )
    return _plan_response(plan, class_obj), 201


@bp.route('', methods=['PUT'])
@login_required
def save_seat_plan(class_id):
    """保存整个座位表"""
    class_obj = visible_class(class_id)
    data = get_json_body()
    rows, columns, seats = require_fields(data, 'rows', 'columns', 'seats')
    plan, updated = SeatingService.save_seat_plan(current_user, class_id, rows, columns, seats)
    return _plan_response(plan, class_obj, updated=updated)


@bp.route('/assign', methods=['POST'])
@login_required
def assign_seat(class_id):
    """安排学生座位"""
    class_obj = visible_class(class_id)
    data = get_json_body()
    student_id = parse_int(require_fields(data, 'student_id')[0], 'student_id')
    x, y = _position(data)
    plan = SeatingService.assign_student_to_seat(current_user, class_id, student_id, x, y)
    return _plan_response(plan, class_obj)


@bp.route('/remove', methods=['POST'])
@login_required
def remove_from_seat(class_id):
    class_obj = visible_class(class_id)
    data = get_json_body()
    student_id = parse_int(require_fields(data, 'student_id')[0], 'student_id')
    plan = SeatingService.remove_student_from_seat(current_user, class_id, student_id)
    return _plan_response(plan, class_obj)


@bp.route('/toggle-empty', methods=['POST'])
@login_required
def toggle_empty(class_id):
    """禁用/启用座位"""
    class_obj = visible_class(class_id)
    data = get_json_body()
    x, y = _position(data)
    is_empty = parse_bool(data.get('is_empty'), 'is_empty')
    plan = SeatingService.toggle_seat_empty(current_user, class_id, x, y, is_empty)
    return _plan_response(plan, class_obj)


@bp.route('/select', methods=['POST'])
@require_student
def select_seat(class_id):
    """学生选座"""
    class_obj = visible_class(class_id)
    x, y = _position(get_json_body())
    plan = SeatingService.select_seat(current_user, class_id, x, y)
    return _plan_response(plan, class_obj)


@bp.route('/finalize', methods=['POST'])
@require_teacher
def finalize(class_id):
    SeatingService.set_finalized(current_user, class_id, True)
    return jsonify({'success': True, 'finalized': True})


@bp.route('/unfinalize', methods=['POST'])
@require_teacher
def unfinalize(class_id):
    SeatingService.set_finalized(current_user, class_id, False)
    return jsonify({'success': True, 'finalized': False})


@bp.route('/unassigned')
@login_required
def unassigned(class_id):
    visible_class(class_id)
    return jsonify(SeatingService.get_unassigned_students(class_id))
