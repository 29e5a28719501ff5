"""定时任务服务 - 每分钟处理到期提醒和即将开始的日程"""
import os
import sys
import time
from flask_apscheduler import APScheduler
from app.extensions import db
from app.services.notification_service import NotificationService


scheduler = APScheduler()

JOB_ID = 'process_scheduled_notifications'
LOCK_MAX_AGE_SECONDS = 30
SCRIPTS_WITHOUT_SCHEDULER = ('init_db.py', 'run_notifications.py')


def run_scheduled_notifications(app):
    """在应用上下文中执行一次通知处理"""
    with app.app_context():
        try:
            result = NotificationService.process_scheduled_notifications()
            app.logger.info(
                f"Scheduled notifications: {result['reminders']} reminders, "
                f"{result['events']} events, {result['notifications']} notifications"
            )
            return result
        except Exception:
            app.logger.exception('Scheduled notification processing failed')
            db.session.rollback()
            return None


def _acquire_lock(app):
    """多worker部署时只在一个worker中启动调度器"""
    lock_file = app.config['SCHEDULER_LOCK_FILE']
    current_pid = os.getpid()
    try:
        if os.path.exists(lock_file):
            # 30秒内创建的锁属于同一批worker
            lock_age = time.time() - os.path.getmtime(lock_file)
            if lock_age < LOCK_MAX_AGE_SECONDS:
                with open(lock_file, 'r') as f:
                    lock_pid = f.read().strip()
                app.logger.info(f'Worker {current_pid}: scheduler already started in worker {lock_pid}, skipping')
                return False
            os.remove(lock_file)

        with open(lock_file, 'w') as f:
            f.write(str(current_pid))
    except OSError as e:
        app.logger.error(f'Failed to create scheduler lock file: {e}')
        return False
    return True


def init_scheduler(app):
    """初始化定时任务调度器"""
    if not app.config.get('SCHEDULER_ENABLED', True):
        return

    # 命令行脚本不启动调度器
    script_name = os.path.basename(sys.argv[0] if sys.argv else '')
    if script_name in SCRIPTS_WITHOUT_SCHEDULER:
        return

    if not _acquire_lock(app):
        return

    # 禁用API，提高安全性
    app.config['SCHEDULER_API_ENABLED'] = False
    scheduler.init_app(app)

    scheduler.add_job(
        id=JOB_ID,
        func=run_scheduled_notifications,
        args=[app],
        trigger='interval',
        minutes=app.config['NOTIFICATION_INTERVAL_MINUTES'],
        misfire_grace_time=900,
        replace_existing=True
    )

    scheduler.start()
    app.logger.info(f'Worker {os.getpid()}: notification scheduler started')
