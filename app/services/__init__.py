"""服务层包"""
from app.services.notification_service import NotificationService
from app.services.user_service import UserService
from app.services.class_service import ClassService
from app.services.attendance_service import AttendanceService
from app.services.analytics_service import AnalyticsService
from app.services.calendar_service import CalendarService
from app.services.seating_service import SeatingService

__all__ = [
    'NotificationService', 'UserService', 'ClassService', 'AttendanceService',
    'AnalyticsService', 'CalendarService', 'SeatingService'
]
