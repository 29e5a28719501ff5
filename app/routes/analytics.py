"""统计分析路由"""
from flask import Blueprint, jsonify
from flask_login import current_user
from app.services import AnalyticsService, AttendanceService
from app.utils import require_teacher, require_student

bp = Blueprint('analytics', __name__, url_prefix='/api/analytics')


@bp.route('/attendance-overview')
@require_teacher
def attendance_overview():
    """教师所有班级的出勤概览"""
    return jsonify(AttendanceService.get_teacher_stats(current_user.id))


@bp.route('/teacher')
@require_teacher
def teacher_analytics():
    return jsonify(AnalyticsService.get_teacher_analytics(current_user.id))


@bp.route('/student')
@require_student
def student_analytics():
    return jsonify(AnalyticsService.get_student_analytics(current_user.id))
