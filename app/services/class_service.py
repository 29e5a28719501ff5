"""班级服务"""
from flask import current_app
from app.extensions import db
from app.models import Class, ClassMember, UserRole, NotificationType
from app.services.notification_service import NotificationService
from app.utils.exceptions import (ValidationError, PermissionDeniedError,
                                  NotFoundError, ConflictError)
from app.utils.helpers import generate_join_code, normalize_code, to_iso, parse_str


MAX_CODE_ATTEMPTS = 10
SETTING_FIELDS = ('auto_mark_absent', 'allow_late_submissions',
                  'send_reminders', 'require_confirmation')


class ClassService:
    """班级服务类"""

    # ---------- 查询与权限辅助 ----------

    @staticmethod
    def get_class_or_404(class_id):
        class_obj = db.session.get(Class, class_id)
        if not class_obj:
            raise NotFoundError('Class not found')
        return class_obj

    @staticmethod
    def get_membership(class_id, student_id):
        return ClassMember.query.filter_by(class_id=class_id, student_id=student_id).first()

    @staticmethod
    def is_teacher(class_obj, user):
        return class_obj.teacher_id == user.id

    @staticmethod
    def is_beadle(class_id, user_id):
        membership = ClassMember.query.filter_by(class_id=class_id, student_id=user_id).first()
        return bool(membership and membership.is_beadle)

    @staticmethod
    def require_teacher_of(class_obj, user, action='manage this class'):
        if class_obj.teacher_id != user.id:
            raise PermissionDeniedError(f'Only the class teacher can {action}')

    @staticmethod
    def require_teacher_or_beadle(class_obj, user, action):
        """教师或班干部，返回是否为教师"""
        is_teacher = class_obj.teacher_id == user.id
        if not is_teacher and not ClassService.is_beadle(class_obj.id, user.id):
            raise PermissionDeniedError(f'Only the class teacher or beadles can {action}')
        return is_teacher

    @staticmethod
    def require_member_or_teacher(class_obj, user):
        if class_obj.teacher_id == user.id:
            return
        if not ClassService.get_membership(class_obj.id, user.id):
            raise PermissionDeniedError('You are not a member of this class')

    # ---------- 班级 ----------

    @staticmethod
    def _clean_code(code):
        """规范化加入码，空白码无效"""
        code = normalize_code(parse_str(code, 'code', required=False))
        if not code:
            raise ValidationError('Class code cannot be empty')
        return code

    @staticmethod
    def _unique_code():
        length = current_app.config['JOIN_CODE_LENGTH']
        for _ in range(MAX_CODE_ATTEMPTS):
            code = generate_join_code(length)
            if not Class.query.filter_by(code=code).first():
                return code
        raise ConflictError('Could not generate a unique class code, please try again')

    @staticmethod
    def create_class(teacher, name, description=None, code=None, schedule=None):
        """创建班级，未指定加入码时随机生成"""
        if teacher.role != UserRole.TEACHER:
            raise PermissionDeniedError('Only teachers can create classes')
        name = parse_str(name, 'name')

        if code is not None:
            code = ClassService._clean_code(code)
            if Class.query.filter_by(code=code).first():
                raise ConflictError('This class code is already in use. Please choose a different one.')
        else:
            code = ClassService._unique_code()

        class_obj = Class(
            name=name,
            description=parse_str(description, 'description', required=False),
            code=code,
            schedule=parse_str(schedule, 'schedule', required=False),
            teacher_id=teacher.id,
            seating_rows=current_app.config['DEFAULT_SEATING_ROWS'],
            seating_cols=current_app.config['DEFAULT_SEATING_COLS'],
            seating_finalized=False
        )
        db.session.add(class_obj)
        db.session.commit()
        current_app.logger.info(f'Class created: {class_obj.name} [{code}] by teacher {teacher.id}')
        return class_obj

    @staticmethod
    def join_class(student, code):
        """学生通过加入码加入班级"""
        if student.role != UserRole.STUDENT:
            raise PermissionDeniedError('Only students can join classes')
        class_obj = Class.query.filter_by(code=ClassService._clean_code(code)).first()
        if not class_obj:
            raise NotFoundError('Class not found with that code')

        if ClassService.get_membership(class_obj.id, student.id):
            raise ConflictError('Already a member of this class')

        db.session.add(ClassMember(class_id=class_obj.id, student_id=student.id))
        NotificationService.create_notification(
            sender_id=student.id,
            receiver_id=class_obj.teacher_id,
            title='New student joined',
            content=f'{student.name} joined {class_obj.name}.',
            notification_type=NotificationType.CLASS_JOIN,
            related_class_id=class_obj.id,
            commit=False
        )
        db.session.commit()
        current_app.logger.info(f'Student {student.id} joined class {class_obj.id}')
        return class_obj

    @staticmethod
    def leave_class(student, class_id):
        """学生退出班级"""
        class_obj = ClassService.get_class_or_404(class_id)
        membership = ClassService.get_membership(class_obj.id, student.id)
        if not membership:
            raise NotFoundError('You are not a member of this class')
        if class_obj.seat_plan:
            seat = class_obj.seat_plan.seat_of(student.id)
            if seat:
                seat.student_id = None
        db.session.delete(membership)
        db.session.commit()

    @staticmethod
    def delete_class(teacher, class_id):
        """删除班级（级联删除成员、考勤、日程等）"""
        class_obj = ClassService.get_class_or_404(class_id)
        ClassService.require_teacher_of(class_obj, teacher, 'delete this class')
        db.session.delete(class_obj)
        db.session.commit()
        current_app.logger.info(f'Class {class_id} deleted by teacher {teacher.id}')

    @staticmethod
    def get_teacher_classes(teacher_id):
        classes = Class.query.filter_by(teacher_id=teacher_id).order_by(Class.created_at.desc()).all()
        return [c.to_dict(with_count=True) for c in classes]

    @staticmethod
    def get_student_classes(student_id):
        memberships = ClassMember.query.filter_by(student_id=student_id).all()
        result = []
        for membership in memberships:
            class_obj = membership.class_obj
            if class_obj is None:
                continue
            data = class_obj.to_dict(with_count=True)
            data['is_beadle'] = bool(membership.is_beadle)
            data['joined_at'] = to_iso(membership.joined_at)
            result.append(data)
        return result

    @staticmethod
    def get_class(class_id):
        class_obj = db.session.get(Class, class_id)
        if not class_obj:
            return None
        return class_obj.to_dict(with_count=True)

    @staticmethod
    def get_class_students(class_id):
        """班级学生列表，附带加入时间、班干部标记和座位"""
        class_obj = ClassService.get_class_or_404(class_id)
        plan = class_obj.seat_plan
        students = []
        for membership in class_obj.members.order_by(ClassMember.joined_at).all():
            student = membership.student
            if student is None:
                continue
            data = student.to_dict()
            data['joined_at'] = to_iso(membership.joined_at)
            data['is_beadle'] = bool(membership.is_beadle)
            seat = plan.seat_of(student.id) if plan else None
            data['seat_assignment'] = {'row': seat.y, 'col': seat.x} if seat else None
            students.append(data)
        return students

    # ---------- 班级设置 ----------

    @staticmethod
    def get_class_settings(class_id):
        class_obj = db.session.get(Class, class_id)
        if not class_obj:
            return None
        return {
            'name': class_obj.name,
            'description': class_obj.description or '',
            'auto_mark_absent': True if class_obj.auto_mark_absent is None else class_obj.auto_mark_absent,
            'allow_late_submissions': bool(class_obj.allow_late_submissions),
            'send_reminders': True if class_obj.send_reminders is None else class_obj.send_reminders,
            'require_confirmation': bool(class_obj.require_confirmation),
        }

    @staticmethod
    def update_class_settings(teacher, class_id, name, description=None, **settings):
        class_obj = ClassService.get_class_or_404(class_id)
        ClassService.require_teacher_of(class_obj, teacher, 'update settings')
        class_obj.name = parse_str(name, 'name')
        class_obj.description = parse_str(description, 'description', required=False)
        for field in SETTING_FIELDS:
            if field in settings:
                setattr(class_obj, field, settings[field])
        db.session.commit()
        return class_obj

    # ---------- 班干部 ----------

    @staticmethod
    def _member_summary(membership):
        student = membership.student
        return {
            'id': student.id,
            'name': student.name,
            'email': student.email,
            'membership_id': membership.id,
        }

    @staticmethod
    def get_class_beadles(class_id):
        memberships = ClassMember.query.filter_by(class_id=class_id, is_beadle=True).all()
        return [ClassService._member_summary(m) for m in memberships if m.student]

    @staticmethod
    def get_available_students_for_beadle(class_id):
        memberships = ClassMember.query.filter(
            ClassMember.class_id == class_id,
            db.or_(ClassMember.is_beadle.is_(False), ClassMember.is_beadle.is_(None))
        ).all()
        return [ClassService._member_summary(m) for m in memberships if m.student]

    @staticmethod
    def _membership_or_404(class_id, student_id):
        membership = ClassService.get_membership(class_id, student_id)
        if not membership:
            raise NotFoundError('Student is not a member of this class')
        return membership

    @staticmethod
    def assign_beadle(teacher, class_id, student_id):
        """任命班干部"""
        class_obj = ClassService.get_class_or_404(class_id)
        ClassService.require_teacher_of(class_obj, teacher, 'add beadles')
        membership = ClassService._membership_or_404(class_id, student_id)
        if membership.is_beadle:
            raise ConflictError('Student is already a beadle for this class')

        membership.is_beadle = True
        NotificationService.create_notification(
            sender_id=teacher.id,
            receiver_id=student_id,
            title='Beadle access granted',
            content=f'You are now a beadle for {class_obj.name}.',
            notification_type=NotificationType.BEADLE,
            related_class_id=class_obj.id,
            commit=False
        )
        db.session.commit()
        return membership

    @staticmethod
    def revoke_beadle(teacher, class_id, student_id):
        """撤销班干部"""
        class_obj = ClassService.get_class_or_404(class_id)
        ClassService.require_teacher_of(class_obj, teacher, 'remove beadles')
        membership = ClassService._membership_or_404(class_id, student_id)
        if not membership.is_beadle:
            raise ConflictError('Student is not a beadle for this class')

        membership.is_beadle = False
        db.session.commit()
        return membership

    @staticmethod
    def get_student_class_role(class_id, student_id):
        membership = ClassService.get_membership(class_id, student_id)
        if not membership:
            return None
        return {
            'is_member': True,
            'is_beadle': bool(membership.is_beadle),
            'joined_at': to_iso(membership.joined_at),
        }

