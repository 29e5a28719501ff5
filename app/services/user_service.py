"""用户服务"""
from flask import current_app
from app.extensions import db
from app.models import User, UserRole, StudentLevel
from app.utils.exceptions import (ValidationError, AuthenticationError,
                                  ConflictError, NotFoundError)
from app.utils.helpers import normalize_email, parse_choice, parse_str


MIN_PASSWORD_LENGTH = 6
PROFILE_FIELDS = ('name', 'avatar_url', 'phone', 'office', 'id_number', 'student_level')


class UserService:
    """用户服务类"""

    @staticmethod
    def get_user(user_id):
        return db.session.get(User, user_id)

    @staticmethod
    def get_user_or_404(user_id):
        user = UserService.get_user(user_id)
        if not user:
            raise NotFoundError('User not found')
        return user

    @staticmethod
    def get_user_by_email(email):
        return User.query.filter_by(email=normalize_email(email)).first()

    @staticmethod
    def _check_email_available(email):
        if not email or '@' not in email:
            raise ValidationError('A valid email is required')
        if User.query.filter_by(email=email).first():
            raise ConflictError('User with this email already exists')

    @staticmethod
    def create_user(name, email, role, avatar_url=None):
        """创建用户（无密码，不能直接登录）"""
        name = parse_str(name, 'name')
        email = normalize_email(parse_str(email, 'email'))
        parse_choice(role, UserRole.ALL, 'role')
        UserService._check_email_available(email)

        user = User(name=name, email=email, role=role, avatar_url=avatar_url)
        db.session.add(user)
        db.session.commit()
        current_app.logger.info(f'User created: {email} ({role})')
        return user

    @staticmethod
    def sign_up(email, password, name, role, id_number=None, student_level=None):
        """注册"""
        name = parse_str(name, 'name')
        email = normalize_email(parse_str(email, 'email'))
        password = parse_str(password, 'password', strip=False)
        parse_choice(role, UserRole.ALL, 'role')
        parse_choice(student_level, StudentLevel.ALL, 'student_level', required=False)
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f'Password must be at least {MIN_PASSWORD_LENGTH} characters')
        UserService._check_email_available(email)

        user = User(
            name=name,
            email=email,
            role=role,
            id_number=id_number,
            student_level=student_level
        )
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        current_app.logger.info(f'User signed up: {email} ({role})')
        return user

    @staticmethod
    def sign_in(email, password):
        """登录校验"""
        email = parse_str(email, 'email')
        password = parse_str(password, 'password', strip=False)
        user = UserService.get_user_by_email(email)
        if not user or not user.check_password(password):
            raise AuthenticationError('Invalid email or password')
        return user

    @staticmethod
    def change_password(user, current_password, new_password):
        """修改密码"""
        current_password = parse_str(current_password, 'current_password', strip=False)
        new_password = parse_str(new_password, 'new_password', strip=False)
        if not user.check_password(current_password):
            raise AuthenticationError('Current password is incorrect')
        if len(new_password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f'Password must be at least {MIN_PASSWORD_LENGTH} characters')
        if new_password == current_password:
            raise ValidationError('New password must differ from the current one')
        user.set_password(new_password)
        db.session.commit()

    @staticmethod
    def update_user(user, **fields):
        """更新个人资料，只修改传入的字段"""
        updates = {k: v for k, v in fields.items() if k in PROFILE_FIELDS and v is not None}
        if 'name' in updates:
            updates['name'] = parse_str(updates['name'], 'name')
        if 'student_level' in updates:
            parse_choice(updates['student_level'], StudentLevel.ALL, 'student_level')

        for key, value in updates.items():
            setattr(user, key, value)
        db.session.commit()
        return user
