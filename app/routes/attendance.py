"""考勤路由"""
from flask import Blueprint, jsonify, request, send_file
from flask_login import login_required, current_user
from app.routes.classes import visible_class
from app.services import AttendanceService, AnalyticsService, ClassService
from app.utils import (require_teacher, get_json_body, require_fields,
                       parse_int, local_today, PermissionDeniedError)

bp = Blueprint('attendance', __name__, url_prefix='/api')

XLSX_MIMETYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'


def _date_arg():
    """日期参数，缺省为本地今天"""
    return request.args.get('date') or local_today()


@bp.route('/classes/<int:class_id>/attendance', methods=['POST'])
@login_required
def mark_student(class_id):
    """为单个学生点名"""
    data = get_json_body()
    student_id, date, status = require_fields(data, 'student_id', 'date', 'status')
    result = AttendanceService.mark_student(
        current_user, class_id,
        parse_int(student_id, 'student_id'),
        date, status,
        notes=data.get('notes')
    )
    return jsonify(result)


@bp.route('/classes/<int:class_id>/attendance/all', methods=['POST'])
@login_required
def mark_all(class_id):
    """全班统一标记"""
    data = get_json_body()
    date, status = require_fields(data, 'date', 'status')
    return jsonify(AttendanceService.mark_all(current_user, class_id, date, status))


@bp.route('/attendance/sync', methods=['POST'])
@login_required
def sync_offline():
    """同步离线考勤记录"""
    data = get_json_body()
    records, = require_fields(data, 'records')
    return jsonify(AttendanceService.batch_mark(current_user, records))


@bp.route('/classes/<int:class_id>/attendance', methods=['GET'])
@login_required
def class_attendance(class_id):
    visible_class(class_id)
    return jsonify(AttendanceService.get_by_class_and_date(class_id, _date_arg()))


@bp.route('/classes/<int:class_id>/attendance/status-map')
@login_required
def status_map(class_id):
    visible_class(class_id)
    return jsonify(AttendanceService.get_status_map(class_id, _date_arg()))


@bp.route('/classes/<int:class_id>/attendance/sessions')
@login_required
def sessions(class_id):
    visible_class(class_id)
    return jsonify(AttendanceService.get_class_sessions(class_id))


@bp.route('/classes/<int:class_id>/attendance/today')
@login_required
def today(class_id):
    visible_class(class_id)
    return jsonify(AttendanceService.get_today_attendance(class_id, _date_arg()))


@bp.route('/classes/<int:class_id>/attendance/students/<int:student_id>')
@login_required
def student_attendance(class_id, student_id):
    """学生考勤记录（学生只能查看自己的）"""
    class_obj = visible_class(class_id)
    if (student_id != current_user.id
            and not ClassService.is_teacher(class_obj, current_user)
            and not ClassService.is_beadle(class_id, current_user.id)):
        raise PermissionDeniedError("You cannot view other students' attendance")
    return jsonify(AttendanceService.get_student_attendance(class_id, student_id))


@bp.route('/classes/<int:class_id>/attendance/stats')
@login_required
def class_stats(class_id):
    visible_class(class_id)
    return jsonify(AttendanceService.get_class_stats(class_id))


@bp.route('/classes/<int:class_id>/attendance/export')
@require_teacher
def export(class_id):
    """导出考勤表Excel"""
    output, filename = AnalyticsService.export_class_attendance(current_user, class_id)
    return send_file(
        output,
        mimetype=XLSX_MIMETYPE,
        as_attachment=True,
        download_name=filename
    )


@bp.route('/attendance/<int:record_id>', methods=['DELETE'])
@require_teacher
def delete_record(record_id):
    return jsonify(AttendanceService.delete_record(current_user, record_id))
