"""权限装饰器"""
from functools import wraps
from flask import jsonify
from flask_login import current_user


def require_role(role):
    """要求特定角色的装饰器"""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not current_user.is_authenticated:
                return jsonify({'success': False, 'message': 'Authentication required'}), 401
            if current_user.role != role:
                return jsonify({'success': False, 'message': f'Only {role}s can perform this action'}), 403
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def require_teacher(f):
    """要求教师权限"""
    # 延迟导入避免循环依赖
    from app.models import UserRole
    return require_role(UserRole.TEACHER)(f)


def require_student(f):
    """要求学生身份"""
    from app.models import UserRole
    return require_role(UserRole.STUDENT)(f)
