"""手动执行一次定时通知处理（调度器之外的补发/排查用）"""
import os
import sys

# 添加项目根目录到Python路径
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app import create_app
from app.services.scheduler_service import run_scheduled_notifications


def main():
    app = create_app(os.getenv('FLASK_ENV', 'production'))
    print("开始处理到期提醒和即将开始的日程...")
    result = run_scheduled_notifications(app)

    if result is None:
        print("❌ 处理失败，详见日志")
        sys.exit(1)
    print(f"✅ 提醒 {result['reminders']} 条，日程 {result['events']} 条，"
          f"共发送通知 {result['notifications']} 条")


if __name__ == '__main__':
    main()
