"""初始化数据库，可选创建演示数据

用法:
    python scripts/init_db.py          # 只建表
    python scripts/init_db.py --demo   # 建表并创建演示教师、学生和班级
"""
import os
import sys

# 添加项目根目录到Python路径
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app import create_app
from app.extensions import db
from app.models import UserRole
from app.services import UserService, ClassService
from app.utils import ServiceError

DEMO_PASSWORD = 'demo123'


def create_demo_data():
    """创建演示教师、学生和班级"""
    teacher = UserService.get_user_by_email('teacher@example.com')
    if not teacher:
        teacher = UserService.sign_up('teacher@example.com', DEMO_PASSWORD, 'Demo Teacher', UserRole.TEACHER)
        print(f"✅ 创建教师: {teacher.email}")

    class_obj = None
    try:
        class_obj = ClassService.create_class(teacher, 'Demo Class', code='DEMO01')
        print(f"✅ 创建班级: {class_obj.name} [{class_obj.code}]")
    except ServiceError as e:
        print(f"⚠️ 跳过班级创建: {e.message}")

    for i in range(1, 4):
        email = f'student{i}@example.com'
        student = UserService.get_user_by_email(email)
        if student:
            continue
        student = UserService.sign_up(email, DEMO_PASSWORD, f'Student {i}', UserRole.STUDENT,
                                      id_number=f'S00{i}')
        print(f"✅ 创建学生: {student.email}")
        if class_obj:
            ClassService.join_class(student, class_obj.code)


def main():
    app = create_app(os.getenv('FLASK_ENV', 'development'))
    with app.app_context():
        db.create_all()
        print("✅ 数据表已创建")
        if '--demo' in sys.argv:
            create_demo_data()


if __name__ == '__main__':
    main()
