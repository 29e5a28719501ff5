"""用户相关模型"""
from datetime import datetime
from werkzeug.security import generate_password_hash, check_password_hash
from flask_login import UserMixin
from app.extensions import db
from app.utils.helpers import to_iso


class UserRole:
    """用户角色枚举"""
    TEACHER = 'teacher'
    STUDENT = 'student'

    ALL = (TEACHER, STUDENT)


class StudentLevel:
    """学段枚举"""
    ELEMENTARY = 'elementary'
    JUNIOR_HIGH = 'junior_high'
    SENIOR_HIGH = 'senior_high'
    COLLEGE = 'college'

    ALL = (ELEMENTARY, JUNIOR_HIGH, SENIOR_HIGH, COLLEGE)


class User(UserMixin, db.Model):
    """用户模型"""
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255))  # 通过create_user创建的账号没有密码
    role = db.Column(db.String(20), nullable=False, default=UserRole.STUDENT, index=True)
    avatar_url = db.Column(db.String(500))
    id_number = db.Column(db.String(50))  # 学号或工号
    student_level = db.Column(db.String(20))
    phone = db.Column(db.String(50))
    office = db.Column(db.String(100))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def set_password(self, password):
        """设置密码"""
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        """验证密码"""
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    @property
    def is_teacher(self):
        return self.role == UserRole.TEACHER

    @property
    def is_student(self):
        return self.role == UserRole.STUDENT

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'role': self.role,
            'avatar_url': self.avatar_url,
            'id_number': self.id_number,
            'student_level': self.student_level,
            'phone': self.phone,
            'office': self.office,
            'created_at': to_iso(self.created_at),
        }

    def __repr__(self):
        return f'<User {self.name}>'
