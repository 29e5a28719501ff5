"""座位表服务"""
from datetime import datetime
from flask import current_app
from app.extensions import db
from app.models import SeatPlan, Seat, ClassMember, seat_plan_to_dict
from app.services.class_service import ClassService
from app.utils.exceptions import (ValidationError, PermissionDeniedError,
                                  NotFoundError, ConflictError)
from app.utils.helpers import parse_int


MAX_ROWS = 26  # 行号用字母A-Z
MAX_COLUMNS = 50


def seat_label(x, y):
    """座位标签：行字母+列号，如A1"""
    return f'{chr(65 + y)}{x + 1}'


class SeatingService:
    """座位表服务类"""

    @staticmethod
    def _plan_of(class_id):
        return SeatPlan.query.filter_by(class_id=class_id).first()

    @staticmethod
    def _plan_or_404(class_id):
        plan = SeatingService._plan_of(class_id)
        if not plan:
            raise NotFoundError('No seat plan found for this class')
        return plan

    @staticmethod
    def _check_editable(class_obj, user, action):
        """教师或班干部可修改；定稿后只有教师可以修改"""
        is_teacher = ClassService.require_teacher_or_beadle(class_obj, user, action)
        if class_obj.seating_finalized and not is_teacher:
            raise PermissionDeniedError('Seating has been finalized. Only the teacher can make changes.')
        return is_teacher

    @staticmethod
    def _validate_size(rows, columns):
        rows = parse_int(rows, 'rows', minimum=1, maximum=MAX_ROWS)
        columns = parse_int(columns, 'columns', minimum=1, maximum=MAX_COLUMNS)
        return rows, columns

    @staticmethod
    def _require_member(class_id, student_id):
        if not ClassService.get_membership(class_id, student_id):
            raise ValidationError('Student is not a member of this class')

    @staticmethod
    def _touch(plan):
        plan.updated_at = datetime.utcnow()

    @staticmethod
    def get_seat_plan(class_id):
        class_obj = ClassService.get_class_or_404(class_id)
        plan = SeatingService._plan_of(class_id)
        if not plan:
            return None
        return seat_plan_to_dict(plan, finalized=class_obj.seating_finalized)

    @staticmethod
    def initialize_seat_plan(user, class_id, rows, columns):
        """按行列生成默认座位表"""
        class_obj = ClassService.get_class_or_404(class_id)
        SeatingService._check_editable(class_obj, user, 'initialize seat plans')
        rows, columns = SeatingService._validate_size(rows, columns)
        if SeatingService._plan_of(class_id):
            raise ConflictError('A seat plan already exists for this class')

        plan = SeatPlan(class_id=class_id, rows=rows, columns=columns, created_by=user.id)
        for y in range(rows):
            for x in range(columns):
                plan.seats.append(Seat(x=x, y=y, label=seat_label(x, y), is_empty=False))
        db.session.add(plan)
        class_obj.seating_rows = rows
        class_obj.seating_cols = columns
        db.session.commit()
        current_app.logger.info(f'Seat plan {rows}x{columns} initialized for class {class_id}')
        return plan

    @staticmethod
    def save_seat_plan(user, class_id, rows, columns, seats):
        """创建或整体替换座位表"""
        class_obj = ClassService.get_class_or_404(class_id)
        SeatingService._check_editable(class_obj, user, 'modify seat plans')
        rows, columns = SeatingService._validate_size(rows, columns)
        if not isinstance(seats, list):
            raise ValidationError('seats must be a list')

        positions = set()
        seated = set()
        new_seats = []
        for raw in seats:
            if not isinstance(raw, dict):
                raise ValidationError('Invalid seat')
            x = parse_int(raw.get('x'), 'x', minimum=0, maximum=columns - 1)
            y = parse_int(raw.get('y'), 'y', minimum=0, maximum=rows - 1)
            if (x, y) in positions:
                raise ValidationError(f'Duplicate seat at ({x}, {y})')
            positions.add((x, y))

            is_empty = bool(raw.get('is_empty', False))
            student_id = raw.get('student_id')
            if student_id is not None and not is_empty:
                student_id = parse_int(student_id, 'student_id')
                if student_id in seated:
                    raise ValidationError('A student can only occupy one seat')
                SeatingService._require_member(class_id, student_id)
                seated.add(student_id)
            else:
                student_id = None
            new_seats.append(Seat(
                x=x, y=y,
                label=raw.get('label') or seat_label(x, y),
                is_empty=is_empty,
                student_id=student_id
            ))

        plan = SeatingService._plan_of(class_id)
        updated = plan is not None
        if plan is None:
            plan = SeatPlan(class_id=class_id, created_by=user.id)
            db.session.add(plan)
        else:
            plan.seats.clear()
            db.session.flush()
        plan.rows = rows
        plan.columns = columns
        plan.seats.extend(new_seats)
        SeatingService._touch(plan)
        class_obj.seating_rows = rows
        class_obj.seating_cols = columns
        db.session.commit()
        return plan, updated

    @staticmethod
    def assign_student_to_seat(user, class_id, student_id, x, y):
        """安排学生到指定座位（会把该学生从原座位移走）"""
        class_obj = ClassService.get_class_or_404(class_id)
        SeatingService._check_editable(class_obj, user, 'assign seats')
        plan = SeatingService._plan_or_404(class_id)
        SeatingService._require_member(class_id, student_id)

        target = plan.get_seat(x, y)
        if not target:
            raise NotFoundError('Seat not found')
        if target.is_empty:
            raise ValidationError('This seat is disabled')

        current = plan.seat_of(student_id)
        if current is not None and current is not target:
            current.student_id = None
        target.student_id = student_id
        SeatingService._touch(plan)
        db.session.commit()
        return plan

    @staticmethod
    def remove_student_from_seat(user, class_id, student_id):
        class_obj = ClassService.get_class_or_404(class_id)
        SeatingService._check_editable(class_obj, user, 'remove seat assignments')
        plan = SeatingService._plan_or_404(class_id)

        seat = plan.seat_of(student_id)
        if seat is not None:
            seat.student_id = None
            SeatingService._touch(plan)
        db.session.commit()
        return plan

    @staticmethod
    def toggle_seat_empty(user, class_id, x, y, is_empty):
        """禁用/启用座位，禁用时清空座位上的学生"""
        class_obj = ClassService.get_class_or_404(class_id)
        SeatingService._check_editable(class_obj, user, 'modify seats')
        plan = SeatingService._plan_or_404(class_id)

        seat = plan.get_seat(x, y)
        if not seat:
            raise NotFoundError('Seat not found')
        seat.is_empty = bool(is_empty)
        if seat.is_empty:
            seat.student_id = None
        SeatingService._touch(plan)
        db.session.commit()
        return plan

    @staticmethod
    def select_seat(student, class_id, x, y):
        """学生自己选座"""
        class_obj = ClassService.get_class_or_404(class_id)
        if class_obj.seating_finalized:
            raise PermissionDeniedError('Seating arrangement has been finalized by the teacher')
        if not ClassService.get_membership(class_id, student.id):
            raise PermissionDeniedError('You are not a member of this class')
        plan = SeatingService._plan_or_404(class_id)

        target = plan.get_seat(x, y)
        if not target:
            raise NotFoundError('Seat not found')
        if target.is_empty:
            raise ValidationError('This seat is disabled')
        if target.student_id is not None and target.student_id != student.id:
            raise ConflictError('This seat is already taken')

        current = plan.seat_of(student.id)
        if current is not None and current is not target:
            current.student_id = None
        target.student_id = student.id
        SeatingService._touch(plan)
        db.session.commit()
        return plan

    @staticmethod
    def set_finalized(teacher, class_id, finalized):
        """定稿/取消定稿（仅教师）"""
        class_obj = ClassService.get_class_or_404(class_id)
        action = 'finalize seating' if finalized else 'unfinalize seating'
        ClassService.require_teacher_of(class_obj, teacher, action)
        class_obj.seating_finalized = bool(finalized)
        db.session.commit()
        return class_obj

    @staticmethod
    def get_unassigned_students(class_id):
        """还没有座位的学生"""
        plan = SeatingService._plan_of(class_id)
        assigned = {s.student_id for s in plan.seats if s.student_id} if plan else set()
        members = ClassMember.query.filter_by(class_id=class_id).all()
        students = []
        for member in members:
            if member.student_id in assigned or member.student is None:
                continue
            student = member.student
            students.append({
                'id': student.id,
                'name': student.name,
                'email': student.email,
                'id_number': student.id_number,
            })
        return students
