"""应用配置"""
import os
from datetime import timedelta, timezone


class Config:
    """基础配置"""
    # 应用基础配置
    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-secret-key-change-in-production')
    JSON_SORT_KEYS = False

    # 数据库配置
    BASE_DIR = os.path.dirname(os.path.abspath(__file__))
    STORAGE_DIR = os.environ.get('STORAGE_DIR', os.path.join(BASE_DIR, 'storage'))

    SQLALCHEMY_DATABASE_URI = os.environ.get(
        'DATABASE_URL',
        f'sqlite:///{os.path.join(STORAGE_DIR, "data", "classroom.db")}'
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_recycle': 3600,
        'pool_pre_ping': True,
        'echo': False
    }
    if SQLALCHEMY_DATABASE_URI.startswith('sqlite'):
        # 调度器线程与请求线程共用SQLite
        SQLALCHEMY_ENGINE_OPTIONS['connect_args'] = {
            'timeout': 30,
            'check_same_thread': False,
        }

    # 时区配置（日期字符串按本地时区解释）
    LOCAL_TZ = timezone(timedelta(hours=int(os.environ.get('TZ_OFFSET_HOURS', '8'))))

    # 日志
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # 定时任务
    SCHEDULER_ENABLED = os.environ.get('SCHEDULER_ENABLED', '1') == '1'
    SCHEDULER_LOCK_FILE = os.environ.get('SCHEDULER_LOCK_FILE', '/tmp/classroom_scheduler.lock')
    NOTIFICATION_INTERVAL_MINUTES = int(os.environ.get('NOTIFICATION_INTERVAL_MINUTES', '1'))
    EVENT_NOTIFY_LEAD_MINUTES = int(os.environ.get('EVENT_NOTIFY_LEAD_MINUTES', '30'))

    # 班级
    JOIN_CODE_LENGTH = int(os.environ.get('JOIN_CODE_LENGTH', '6'))
    DEFAULT_SEATING_ROWS = 6
    DEFAULT_SEATING_COLS = 8

    # 分页配置
    PER_PAGE_OPTIONS = [10, 20, 50, 100]
    DEFAULT_PER_PAGE = 20


class DevelopmentConfig(Config):
    """开发环境配置"""
    DEBUG = True
    TESTING = False


class ProductionConfig(Config):
    """生产环境配置"""
    DEBUG = False
    TESTING = False

    def __init__(self):
        # 生产环境必须设置SECRET_KEY
        if Config.SECRET_KEY == 'dev-secret-key-change-in-production':
            import warnings
            warnings.warn(
                'Using the default SECRET_KEY in production is insecure; '
                'set the SECRET_KEY environment variable.',
                UserWarning
            )


class TestingConfig(Config):
    """测试环境配置"""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SQLALCHEMY_ENGINE_OPTIONS = {}
    SCHEDULER_ENABLED = False
    LOG_LEVEL = 'WARNING'


# 配置字典
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
