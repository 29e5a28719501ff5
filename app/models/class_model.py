"""班级相关模型"""
from datetime import datetime
from app.extensions import db
from app.utils.helpers import to_iso


class Class(db.Model):
    """班级模型"""
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text)
    code = db.Column(db.String(50), unique=True, nullable=False, index=True)  # 加入码
    schedule = db.Column(db.String(200))
    teacher_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # 座位表配置
    seating_rows = db.Column(db.Integer, default=6)
    seating_cols = db.Column(db.Integer, default=8)
    seating_finalized = db.Column(db.Boolean, default=False)

    # 班级设置
    auto_mark_absent = db.Column(db.Boolean, default=True)
    allow_late_submissions = db.Column(db.Boolean, default=False)
    send_reminders = db.Column(db.Boolean, default=True)
    require_confirmation = db.Column(db.Boolean, default=False)

    # 关系
    teacher = db.relationship('User', backref='teaching_classes', foreign_keys=[teacher_id])
    members = db.relationship('ClassMember', backref='class_obj', lazy='dynamic',
                              cascade='all, delete-orphan')
    attendance_records = db.relationship('Attendance', backref='class_obj', lazy='dynamic',
                                         cascade='all, delete-orphan')
    events = db.relationship('Event', backref='class_obj', lazy='dynamic',
                             cascade='all, delete-orphan')
    reminders = db.relationship('Reminder', backref='class_obj', lazy='dynamic',
                                cascade='all, delete-orphan')
    seat_plan = db.relationship('SeatPlan', backref='class_obj', uselist=False,
                                cascade='all, delete-orphan')

    @property
    def student_count(self):
        return self.members.count()

    def to_dict(self, with_count=False):
        data = {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'code': self.code,
            'schedule': self.schedule,
            'teacher_id': self.teacher_id,
            'teacher_name': self.teacher.name if self.teacher else None,
            'created_at': to_iso(self.created_at),
            'seating_rows': self.seating_rows,
            'seating_cols': self.seating_cols,
            'seating_finalized': bool(self.seating_finalized),
        }
        if with_count:
            data['student_count'] = self.student_count
        return data

    def __repr__(self):
        return f'<Class {self.name}>'


class ClassMember(db.Model):
    """班级成员（学生）"""
    __tablename__ = 'class_member'
    __table_args__ = (
        db.UniqueConstraint('class_id', 'student_id', name='uq_class_member'),
    )

    id = db.Column(db.Integer, primary_key=True)
    class_id = db.Column(db.Integer, db.ForeignKey('class.id'), nullable=False, index=True)
    student_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    joined_at = db.Column(db.DateTime, default=datetime.utcnow)
    is_beadle = db.Column(db.Boolean, default=False)  # 班干部，可考勤、排座

    student = db.relationship('User', backref=db.backref('memberships', lazy='dynamic'))

    def __repr__(self):
        return f'<ClassMember class={self.class_id} student={self.student_id}>'
