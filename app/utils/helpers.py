"""辅助函数"""
import math
import re
import secrets
import string
from datetime import datetime, timezone, timedelta
from flask import current_app, request
from app.utils.exceptions import ValidationError


DEFAULT_TZ = timezone(timedelta(hours=8))
DATE_FORMAT = '%Y-%m-%d'
TIME_PATTERN = re.compile(r'^([01]\d|2[0-3]):[0-5]\d$')
JOIN_CODE_ALPHABET = string.ascii_uppercase + string.digits


def get_local_tz():
    """获取配置的本地时区"""
    try:
        return current_app.config.get('LOCAL_TZ', DEFAULT_TZ)
    except RuntimeError:
        return DEFAULT_TZ


def to_local_time(utc_dt):
    """将UTC时间转换为本地时间"""
    if utc_dt is None:
        return None
    if utc_dt.tzinfo is None:
        utc_dt = utc_dt.replace(tzinfo=timezone.utc)
    return utc_dt.astimezone(get_local_tz())


def local_now():
    """当前本地时间"""
    return to_local_time(datetime.utcnow())


def local_today():
    """本地日期字符串 YYYY-MM-DD"""
    return local_now().strftime(DATE_FORMAT)


def to_iso(dt):
    """datetime序列化为ISO字符串（UTC）"""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.isoformat()


def from_timestamp_ms(value):
    """毫秒时间戳转为naive UTC时间"""
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc).replace(tzinfo=None)


def percent(part, whole):
    """百分比，四舍五入（.5向上）"""
    if not whole:
        return 0
    return int(math.floor(part * 100 / whole + 0.5))


def generate_join_code(length=6):
    """生成随机加入码"""
    return ''.join(secrets.choice(JOIN_CODE_ALPHABET) for _ in range(length))


def normalize_email(email):
    return (email or '').strip().lower()


def normalize_code(code):
    return (code or '').strip().upper()


# ---------- 请求参数解析 ----------

def get_json_body():
    """读取JSON请求体"""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def require_fields(data, *names):
    """检查必填字段，返回对应值元组"""
    missing = [name for name in names if data.get(name) in (None, '')]
    if missing:
        raise ValidationError(f'Missing required field(s): {", ".join(missing)}')
    return tuple(data[name] for name in names)


def parse_str(value, field, required=True, strip=True):
    """校验字符串参数，默认去除首尾空白；非必填时空值返回None"""
    if value is None:
        if required:
            raise ValidationError(f'Missing required field(s): {field}')
        return None
    if not isinstance(value, str):
        raise ValidationError(f'{field} must be a string')
    if strip:
        value = value.strip()
    if not value:
        if required:
            raise ValidationError(f'{field} cannot be empty')
        return None
    return value


def parse_iso_date(value, field='date'):
    """校验 YYYY-MM-DD 日期字符串"""
    if not isinstance(value, str):
        raise ValidationError(f'{field} must be a YYYY-MM-DD string')
    try:
        datetime.strptime(value, DATE_FORMAT)
    except ValueError:
        raise ValidationError(f'{field} must be a YYYY-MM-DD string')
    return value


def parse_time(value, field='time'):
    """校验 HH:MM 时间字符串，允许为空"""
    if value in (None, ''):
        return None
    if not isinstance(value, str) or not TIME_PATTERN.match(value):
        raise ValidationError(f'{field} must be a HH:MM string')
    return value


def parse_choice(value, choices, field, required=True):
    """校验枚举值"""
    if value in (None, ''):
        if required:
            raise ValidationError(f'Missing required field(s): {field}')
        return None
    if value not in choices:
        raise ValidationError(f'{field} must be one of: {", ".join(choices)}')
    return value


def parse_int(value, field, minimum=None, maximum=None):
    """校验整数参数"""
    if isinstance(value, bool):
        raise ValidationError(f'{field} must be an integer')
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'{field} must be an integer')
    if minimum is not None and number < minimum:
        raise ValidationError(f'{field} must be at least {minimum}')
    if maximum is not None and number > maximum:
        raise ValidationError(f'{field} must be at most {maximum}')
    return number


def parse_bool(value, field, default=None):
    """校验布尔参数"""
    if value is None:
        if default is None:
            raise ValidationError(f'Missing required field(s): {field}')
        return default
    if not isinstance(value, bool):
        raise ValidationError(f'{field} must be a boolean')
    return value
