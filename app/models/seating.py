"""座位表模型"""
from datetime import datetime
from app.extensions import db
from app.utils.helpers import to_iso


class SeatPlan(db.Model):
    """班级座位表，每个班级最多一张"""
    __tablename__ = 'seat_plan'

    id = db.Column(db.Integer, primary_key=True)
    class_id = db.Column(db.Integer, db.ForeignKey('class.id'), unique=True, nullable=False)
    rows = db.Column(db.Integer, nullable=False)
    columns = db.Column(db.Integer, nullable=False)
    created_by = db.Column(db.Integer, db.ForeignKey('user.id'))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    seats = db.relationship('Seat', backref='plan', order_by='[Seat.y, Seat.x]',
                            cascade='all, delete-orphan')

    def get_seat(self, x, y):
        for seat in self.seats:
            if seat.x == x and seat.y == y:
                return seat
        return None

    def seat_of(self, student_id):
        for seat in self.seats:
            if seat.student_id == student_id:
                return seat
        return None


class Seat(db.Model):
    """座位：x为列，y为行，均从0开始"""
    __tablename__ = 'seat'
    __table_args__ = (
        db.UniqueConstraint('plan_id', 'x', 'y', name='uq_seat_position'),
    )

    id = db.Column(db.Integer, primary_key=True)
    plan_id = db.Column(db.Integer, db.ForeignKey('seat_plan.id'), nullable=False, index=True)
    x = db.Column(db.Integer, nullable=False)
    y = db.Column(db.Integer, nullable=False)
    label = db.Column(db.String(20))
    is_empty = db.Column(db.Boolean, default=False)  # 禁用的座位
    student_id = db.Column(db.Integer, db.ForeignKey('user.id'), index=True)

    student = db.relationship('User')

    def to_dict(self):
        data = {
            'x': self.x,
            'y': self.y,
            'label': self.label,
            'is_empty': bool(self.is_empty),
            'student_id': self.student_id,
        }
        if self.student is not None:
            data.update({
                'student_name': self.student.name,
                'student_email': self.student.email,
                'student_id_number': self.student.id_number,
            })
        return data


def seat_plan_to_dict(plan, finalized=False):
    return {
        'id': plan.id,
        'class_id': plan.class_id,
        'rows': plan.rows,
        'columns': plan.columns,
        'finalized': bool(finalized),
        'created_by': plan.created_by,
        'created_at': to_iso(plan.created_at),
        'updated_at': to_iso(plan.updated_at),
        'seats': [seat.to_dict() for seat in plan.seats],
    }
