"""数据模型包"""
from app.models.user import User, UserRole, StudentLevel
from app.models.class_model import Class, ClassMember
from app.models.attendance import Attendance, AttendanceStatus
from app.models.calendar import Event, Reminder, EventType, ClassType
from app.models.seating import SeatPlan, Seat, seat_plan_to_dict
from app.models.notification import Notification, NotificationType

__all__ = [
    'User', 'UserRole', 'StudentLevel',
    'Class', 'ClassMember',
    'Attendance', 'AttendanceStatus',
    'Event', 'Reminder', 'EventType', 'ClassType',
    'SeatPlan', 'Seat', 'seat_plan_to_dict',
    'Notification', 'NotificationType'
]
