"""用户路由"""
from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user
from app.services import UserService
from app.services.user_service import PROFILE_FIELDS
from app.utils import get_json_body, require_fields, NotFoundError

bp = Blueprint('users', __name__, url_prefix='/api/users')


@bp.route('', methods=['POST'])
@login_required
def create_user():
    """创建用户（无密码）"""
    data = get_json_body()
    name, email, role = require_fields(data, 'name', 'email', 'role')
    user = UserService.create_user(name, email, role, avatar_url=data.get('avatar_url'))
    return jsonify({'success': True, 'user': user.to_dict()}), 201


@bp.route('/<int:user_id>')
@login_required
def get_user(user_id):
    return jsonify(UserService.get_user_or_404(user_id).to_dict())


@bp.route('/by-email')
@login_required
def get_user_by_email():
    email = request.args.get('email', '')
    user = UserService.get_user_by_email(email)
    if not user:
        raise NotFoundError('User not found')
    return jsonify(user.to_dict())


@bp.route('/me', methods=['PATCH'])
@login_required
def update_profile():
    """更新个人资料"""
    data = get_json_body()
    fields = {key: data.get(key) for key in PROFILE_FIELDS}
    user = UserService.update_user(current_user, **fields)
    return jsonify({'success': True, 'user': user.to_dict()})
