"""认证相关路由"""
from flask import Blueprint, jsonify
from flask_login import login_user, logout_user, login_required, current_user
from app.services import UserService
from app.utils import get_json_body, require_fields

bp = Blueprint('auth', __name__, url_prefix='/api/auth')


@bp.route('/signup', methods=['POST'])
def signup():
    """注册并登录"""
    data = get_json_body()
    email, password, name, role = require_fields(data, 'email', 'password', 'name', 'role')
    user = UserService.sign_up(
        email=email,
        password=password,
        name=name,
        role=role,
        id_number=data.get('id_number'),
        student_level=data.get('student_level')
    )
    login_user(user)
    return jsonify({'success': True, 'user': user.to_dict()}), 201


@bp.route('/signin', methods=['POST'])
def signin():
    """登录"""
    data = get_json_body()
    email, password = require_fields(data, 'email', 'password')
    user = UserService.sign_in(email, password)
    login_user(user, remember=bool(data.get('remember')))
    return jsonify({'success': True, 'user': user.to_dict()})


@bp.route('/signout', methods=['POST'])
@login_required
def signout():
    """登出"""
    logout_user()
    return jsonify({'success': True})


@bp.route('/me')
@login_required
def me():
    """当前登录用户"""
    return jsonify(current_user.to_dict())


@bp.route('/password', methods=['POST'])
@login_required
def change_password():
    """修改密码"""
    data = get_json_body()
    current_password, new_password = require_fields(data, 'current_password', 'new_password')
    UserService.change_password(current_user, current_password, new_password)
    return jsonify({'success': True})
