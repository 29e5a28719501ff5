"""应用工厂"""
import os
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException
from config import config
from app.extensions import db, login_manager, init_extensions
from app.models import User
from app.utils.exceptions import ServiceError


def create_app(config_name='default'):
    """创建Flask应用实例"""
    app = Flask(__name__)

    # 加载配置
    app.config.from_object(config[config_name])
    app.logger.setLevel(app.config['LOG_LEVEL'])

    # 确保必要的目录存在
    if app.config['SQLALCHEMY_DATABASE_URI'].startswith('sqlite:///') \
            and ':memory:' not in app.config['SQLALCHEMY_DATABASE_URI']:
        os.makedirs(os.path.join(app.config['STORAGE_DIR'], 'data'), exist_ok=True)

    # 初始化扩展
    init_extensions(app)

    # 注册user_loader
    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    # 注册错误处理
    register_error_handlers(app)

    # 注册蓝图
    register_blueprints(app)

    with app.app_context():
        db.create_all()

    # 初始化定时任务调度器
    init_scheduler(app)

    return app


def register_error_handlers(app):
    """注册错误处理，统一返回JSON"""
    @app.errorhandler(ServiceError)
    def handle_service_error(error):
        db.session.rollback()
        app.logger.info(f'{error.__class__.__name__}: {error.message}')
        return jsonify({'success': False, 'message': error.message}), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({'success': False, 'message': error.description}), error.code


def register_blueprints(app):
    """注册所有蓝图"""
    # 延迟导入避免循环依赖
    from app.routes import (main, auth, users, classes, attendance, analytics,
                            calendar, seating, notification)

    app.register_blueprint(main.bp)
    app.register_blueprint(auth.bp)
    app.register_blueprint(users.bp)
    app.register_blueprint(classes.bp)
    app.register_blueprint(attendance.bp)
    app.register_blueprint(analytics.bp)
    app.register_blueprint(calendar.bp)
    app.register_blueprint(seating.bp)
    app.register_blueprint(notification.bp)


def init_scheduler(app):
    """初始化定时任务调度器"""
    from app.services.scheduler_service import init_scheduler as _init_scheduler
    _init_scheduler(app)
