"""考勤模型"""
from datetime import datetime
from app.extensions import db
from app.utils.helpers import to_iso


class AttendanceStatus:
    """考勤状态枚举"""
    PRESENT = 'present'
    ABSENT = 'absent'
    LATE = 'late'
    EXCUSED = 'excused'

    ALL = (PRESENT, ABSENT, LATE, EXCUSED)
    ATTENDED = (PRESENT, LATE)


class Attendance(db.Model):
    """考勤记录：每个班级、每个学生、每天一条"""
    __tablename__ = 'attendance'
    __table_args__ = (
        db.UniqueConstraint('class_id', 'student_id', 'date', name='uq_attendance_class_student_date'),
        db.Index('ix_attendance_class_date', 'class_id', 'date'),
    )

    id = db.Column(db.Integer, primary_key=True)
    class_id = db.Column(db.Integer, db.ForeignKey('class.id'), nullable=False)
    student_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    date = db.Column(db.String(10), nullable=False)  # YYYY-MM-DD
    status = db.Column(db.String(20), nullable=False)
    notes = db.Column(db.Text)
    marked_by = db.Column(db.Integer, db.ForeignKey('user.id'))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    student = db.relationship('User', foreign_keys=[student_id])

    def to_dict(self):
        return {
            'id': self.id,
            'class_id': self.class_id,
            'student_id': self.student_id,
            'date': self.date,
            'status': self.status,
            'notes': self.notes,
            'marked_by': self.marked_by,
            'created_at': to_iso(self.created_at),
            'updated_at': to_iso(self.updated_at),
        }

    def __repr__(self):
        return f'<Attendance {self.date} {self.student_id}:{self.status}>'
