"""工具函数包"""
from app.utils.decorators import require_role, require_teacher, require_student
from app.utils.exceptions import (
    ServiceError, ValidationError, AuthenticationError,
    PermissionDeniedError, NotFoundError, ConflictError
)
from app.utils.helpers import (
    to_local_time, local_now, local_today, to_iso, percent,
    get_json_body, require_fields, parse_iso_date, parse_time,
    parse_choice, parse_int, parse_bool, parse_str
)

__all__ = [
    'require_role', 'require_teacher', 'require_student',
    'ServiceError', 'ValidationError', 'AuthenticationError',
    'PermissionDeniedError', 'NotFoundError', 'ConflictError',
    'to_local_time', 'local_now', 'local_today', 'to_iso', 'percent',
    'get_json_body', 'require_fields', 'parse_iso_date', 'parse_time',
    'parse_choice', 'parse_int', 'parse_bool', 'parse_str'
]
