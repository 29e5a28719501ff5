"""考勤服务"""
from datetime import datetime
from flask import current_app
from app.extensions import db
from app.models import Attendance, AttendanceStatus, Class, ClassMember
from app.services.class_service import ClassService
from app.utils.exceptions import ServiceError, NotFoundError, ValidationError
from app.utils.helpers import (percent, parse_iso_date, parse_choice, parse_int,
                               from_timestamp_ms)


def empty_counts():
    return {status: 0 for status in AttendanceStatus.ALL}


def attendance_rate(records):
    """出勤率：(出勤+迟到)/总数"""
    attended = sum(1 for r in records if r.status in AttendanceStatus.ATTENDED)
    return percent(attended, len(records))


class AttendanceService:
    """考勤服务类"""

    @staticmethod
    def _find(class_id, student_id, date):
        return Attendance.query.filter_by(
            class_id=class_id, student_id=student_id, date=date
        ).first()

    @staticmethod
    def _upsert(class_id, student_id, date, status, notes, marked_by, created_at=None):
        """按(班级, 学生, 日期)新增或更新，返回(记录, 是否为更新)"""
        existing = AttendanceService._find(class_id, student_id, date)
        if existing:
            existing.status = status
            existing.notes = notes
            existing.marked_by = marked_by
            existing.updated_at = datetime.utcnow()
            return existing, True

        record = Attendance(
            class_id=class_id,
            student_id=student_id,
            date=date,
            status=status,
            notes=notes,
            marked_by=marked_by
        )
        if created_at is not None:
            record.created_at = created_at
            record.updated_at = created_at
        db.session.add(record)
        return record, False

    @staticmethod
    def mark_student(user, class_id, student_id, date, status, notes=None):
        """为单个学生点名"""
        parse_iso_date(date)
        parse_choice(status, AttendanceStatus.ALL, 'status')
        class_obj = ClassService.get_class_or_404(class_id)
        ClassService.require_teacher_or_beadle(class_obj, user, 'mark attendance')
        if not ClassService.get_membership(class_id, student_id):
            raise ValidationError('Student is not enrolled in this class')

        record, updated = AttendanceService._upsert(class_id, student_id, date, status, notes, user.id)
        db.session.commit()
        return {
            'success': True,
            'updated': updated,
            'record_id': record.id,
            'student_id': student_id,
            'status': status,
        }

    @staticmethod
    def mark_all(user, class_id, date, status):
        """全班统一标记"""
        parse_iso_date(date)
        parse_choice(status, AttendanceStatus.ALL, 'status')
        class_obj = ClassService.get_class_or_404(class_id)
        ClassService.require_teacher_or_beadle(class_obj, user, 'mark attendance')

        members = ClassMember.query.filter_by(class_id=class_id).all()
        for member in members:
            existing = AttendanceService._find(class_id, member.student_id, date)
            if existing:
                existing.status = status
                existing.marked_by = user.id
                existing.updated_at = datetime.utcnow()
            else:
                db.session.add(Attendance(
                    class_id=class_id,
                    student_id=member.student_id,
                    date=date,
                    status=status,
                    marked_by=user.id
                ))
        db.session.commit()
        current_app.logger.info(f'Class {class_id} marked {status} on {date} ({len(members)} students)')
        return {'success': True, 'count': len(members)}

    @staticmethod
    def batch_mark(user, records):
        """
        同步离线考勤记录

        每条记录独立处理，失败不影响其他记录。离线时间戳早于服务器上
        最后一次修改的记录视为过期，不覆盖。
        """
        if not isinstance(records, list):
            raise ValidationError('records must be a list')

        results = []
        for raw in records:
            student_id = raw.get('student_id') if isinstance(raw, dict) else None
            try:
                if not isinstance(raw, dict):
                    raise ValidationError('Invalid record')
                class_id = parse_int(raw.get('class_id'), 'class_id')
                student_id = parse_int(raw.get('student_id'), 'student_id')
                date = parse_iso_date(raw.get('date'))
                status = parse_choice(raw.get('status'), AttendanceStatus.ALL, 'status')
                timestamp = parse_int(raw.get('timestamp'), 'timestamp', minimum=0)
                marked_at = from_timestamp_ms(timestamp)

                class_obj = db.session.get(Class, class_id)
                if not class_obj:
                    raise NotFoundError('Class not found')
                ClassService.require_teacher_or_beadle(class_obj, user, 'mark attendance')
                if not ClassService.get_membership(class_id, student_id):
                    raise ValidationError('Student is not enrolled in this class')

                existing = AttendanceService._find(class_id, student_id, date)
                if existing and existing.updated_at and existing.updated_at > marked_at:
                    results.append({'student_id': student_id, 'success': True, 'stale': True})
                    continue

                AttendanceService._upsert(class_id, student_id, date, status,
                                          raw.get('notes'), user.id, created_at=marked_at)
                db.session.commit()
                results.append({'student_id': student_id, 'success': True})
            except ServiceError as e:
                db.session.rollback()
                results.append({'student_id': student_id, 'success': False, 'error': e.message})

        synced = sum(1 for r in results if r['success'])
        current_app.logger.info(f'Offline sync by user {user.id}: {synced}/{len(results)} synced')
        return {
            'success': True,
            'synced': synced,
            'failed': len(results) - synced,
            'results': results,
        }

    @staticmethod
    def _enrich(record):
        data = record.to_dict()
        student = record.student
        data['student_name'] = student.name if student else None
        data['student_email'] = student.email if student else None
        data['student_id_number'] = student.id_number if student else None
        return data

    @staticmethod
    def get_by_class_and_date(class_id, date):
        parse_iso_date(date)
        records = Attendance.query.filter_by(class_id=class_id, date=date).all()
        return [AttendanceService._enrich(r) for r in records]

    @staticmethod
    def get_status_map(class_id, date):
        """学生ID -> 考勤状态，便于前端快速查找"""
        parse_iso_date(date)
        records = Attendance.query.filter_by(class_id=class_id, date=date).all()
        return {
            str(r.student_id): {'status': r.status, 'record_id': r.id, 'notes': r.notes}
            for r in records
        }

    @staticmethod
    def get_class_sessions(class_id):
        """按日期汇总的课次列表，新日期在前"""
        records = Attendance.query.filter_by(class_id=class_id).all()
        sessions = {}
        for record in records:
            stats = sessions.setdefault(record.date, dict(empty_counts(), total=0))
            stats[record.status] += 1
            stats['total'] += 1

        result = []
        for date in sorted(sessions, reverse=True):
            stats = sessions[date]
            attended = stats[AttendanceStatus.PRESENT] + stats[AttendanceStatus.LATE]
            result.append(dict(date=date, attendance_rate=percent(attended, stats['total']), **stats))
        return result

    @staticmethod
    def get_today_attendance(class_id, date):
        """某天的考勤情况，包括未点名学生"""
        parse_iso_date(date)
        records = Attendance.query.filter_by(class_id=class_id, date=date).all()
        marked_ids = {r.student_id for r in records}
        members = ClassMember.query.filter_by(class_id=class_id).all()

        unmarked = []
        for member in members:
            if member.student_id in marked_ids:
                continue
            student = member.student
            unmarked.append({
                'student_id': member.student_id,
                'student_name': student.name if student else None,
                'student_id_number': student.id_number if student else None,
                'status': None,
            })

        stats = dict(empty_counts(), total=len(members), unmarked=len(unmarked))
        for record in records:
            stats[record.status] += 1
        return {
            'records': [AttendanceService._enrich(r) for r in records],
            'unmarked': unmarked,
            'stats': stats,
        }

    @staticmethod
    def get_student_attendance(class_id, student_id):
        """学生在某班级的考勤记录和统计"""
        records = Attendance.query.filter_by(
            class_id=class_id, student_id=student_id
        ).order_by(Attendance.date.desc()).all()

        stats = dict(empty_counts(), total=len(records))
        for record in records:
            stats[record.status] += 1
        return {
            'records': [r.to_dict() for r in records],
            'stats': stats,
            'attendance_rate': attendance_rate(records),
        }

    @staticmethod
    def get_class_stats(class_id):
        records = Attendance.query.filter_by(class_id=class_id).all()
        if not records:
            return {'average_attendance': 0, 'total_sessions': 0}
        return {
            'average_attendance': attendance_rate(records),
            'total_sessions': len({r.date for r in records}),
        }

    @staticmethod
    def get_teacher_stats(teacher_id):
        """教师所有班级的整体出勤统计"""
        class_ids = [c.id for c in Class.query.filter_by(teacher_id=teacher_id).all()]
        if not class_ids:
            return {'average_attendance': 0, 'total_sessions': 0, 'total_classes': 0}

        records = Attendance.query.filter(Attendance.class_id.in_(class_ids)).all()
        if not records:
            return {'average_attendance': 0, 'total_sessions': 0, 'total_classes': len(class_ids)}
        return {
            'average_attendance': attendance_rate(records),
            'total_sessions': len({r.date for r in records}),
            'total_classes': len(class_ids),
        }

    @staticmethod
    def delete_record(user, record_id):
        """删除考勤记录（仅任课教师）"""
        record = db.session.get(Attendance, record_id)
        if not record:
            raise NotFoundError('Attendance record not found')
        class_obj = ClassService.get_class_or_404(record.class_id)
        ClassService.require_teacher_of(class_obj, user, 'delete attendance records')
        db.session.delete(record)
        db.session.commit()
        return {'success': True}

