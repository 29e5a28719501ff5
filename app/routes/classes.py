"""班级管理路由"""
from flask import Blueprint, jsonify
from flask_login import login_required, current_user
from app.services import ClassService
from app.services.class_service import SETTING_FIELDS
from app.utils import (require_teacher, require_student, get_json_body,
                       require_fields, parse_int, parse_bool)

bp = Blueprint('classes', __name__, url_prefix='/api/classes')


def visible_class(class_id):
    """获取班级并检查当前用户是否为该班教师或成员"""
    class_obj = ClassService.get_class_or_404(class_id)
    ClassService.require_member_or_teacher(class_obj, current_user)
    return class_obj


@bp.route('', methods=['GET'])
@login_required
def list_classes():
    """我的班级列表（教师为任教班级，学生为已加入班级）"""
    if current_user.is_teacher:
        classes = ClassService.get_teacher_classes(current_user.id)
    else:
        classes = ClassService.get_student_classes(current_user.id)
    return jsonify(classes)


@bp.route('', methods=['POST'])
@require_teacher
def create_class():
    """创建班级"""
    data = get_json_body()
    name, = require_fields(data, 'name')
    class_obj = ClassService.create_class(
        current_user,
        name=name,
        description=data.get('description'),
        code=data.get('code'),
        schedule=data.get('schedule')
    )
    return jsonify({'success': True, 'class': class_obj.to_dict(with_count=True)}), 201


@bp.route('/join', methods=['POST'])
@require_student
def join_class():
    """学生通过加入码加入班级"""
    data = get_json_body()
    code, = require_fields(data, 'code')
    class_obj = ClassService.join_class(current_user, code)
    return jsonify({'success': True, 'class': class_obj.to_dict(with_count=True)})


@bp.route('/<int:class_id>', methods=['GET'])
@login_required
def get_class(class_id):
    visible_class(class_id)
    return jsonify(ClassService.get_class(class_id))


@bp.route('/<int:class_id>', methods=['DELETE'])
@require_teacher
def delete_class(class_id):
    """删除班级"""
    ClassService.delete_class(current_user, class_id)
    return jsonify({'success': True})


@bp.route('/<int:class_id>/leave', methods=['POST'])
@require_student
def leave_class(class_id):
    """退出班级"""
    ClassService.leave_class(current_user, class_id)
    return jsonify({'success': True})


@bp.route('/<int:class_id>/students')
@login_required
def class_students(class_id):
    visible_class(class_id)
    return jsonify(ClassService.get_class_students(class_id))


# ---------- 班级设置 ----------

@bp.route('/<int:class_id>/settings', methods=['GET'])
@login_required
def get_settings(class_id):
    visible_class(class_id)
    return jsonify(ClassService.get_class_settings(class_id))


@bp.route('/<int:class_id>/settings', methods=['PUT'])
@require_teacher
def update_settings(class_id):
    """更新班级设置"""
    data = get_json_body()
    name, = require_fields(data, 'name')
    settings = {
        field: parse_bool(data[field], field)
        for field in SETTING_FIELDS if field in data
    }
    ClassService.update_class_settings(
        current_user, class_id, name,
        description=data.get('description'),
        **settings
    )
    return jsonify({'success': True, 'settings': ClassService.get_class_settings(class_id)})


# ---------- 班干部 ----------

@bp.route('/<int:class_id>/beadles', methods=['GET'])
@login_required
def list_beadles(class_id):
    visible_class(class_id)
    return jsonify(ClassService.get_class_beadles(class_id))


@bp.route('/<int:class_id>/beadles/available')
@require_teacher
def available_beadles(class_id):
    """可任命为班干部的学生"""
    class_obj = ClassService.get_class_or_404(class_id)
    ClassService.require_teacher_of(class_obj, current_user, 'manage beadles')
    return jsonify(ClassService.get_available_students_for_beadle(class_id))


@bp.route('/<int:class_id>/beadles', methods=['POST'])
@require_teacher
def assign_beadle(class_id):
    """任命班干部"""
    data = get_json_body()
    student_id = parse_int(require_fields(data, 'student_id')[0], 'student_id')
    ClassService.assign_beadle(current_user, class_id, student_id)
    return jsonify({'success': True, 'message': 'Beadle assigned successfully'})


@bp.route('/<int:class_id>/beadles/<int:student_id>', methods=['DELETE'])
@require_teacher
def revoke_beadle(class_id, student_id):
    """撤销班干部"""
    ClassService.revoke_beadle(current_user, class_id, student_id)
    return jsonify({'success': True, 'message': 'Beadle revoked successfully'})


@bp.route('/<int:class_id>/role')
@login_required
def my_role(class_id):
    """当前学生在班级中的身份"""
    ClassService.get_class_or_404(class_id)
    return jsonify(ClassService.get_student_class_role(class_id, current_user.id))
