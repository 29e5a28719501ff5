"""统计分析服务"""
import math
from datetime import datetime, timedelta
from io import BytesIO
import pandas as pd
from app.models import Attendance, AttendanceStatus, Class, ClassMember
from app.services.attendance_service import attendance_rate, empty_counts
from app.services.class_service import ClassService
from app.utils.helpers import percent, local_today, DATE_FORMAT


AT_RISK_ABSENCES = 3
AT_RISK_MIN_SESSIONS = 5
AT_RISK_RATE = 75
ALLOWABLE_ABSENCE_RATIO = 0.25
TREND_DAYS = 7
MAX_AT_RISK = 10
RECENT_RECORDS = 10

STATUS_LABELS = {
    AttendanceStatus.PRESENT: 'P',
    AttendanceStatus.ABSENT: 'A',
    AttendanceStatus.LATE: 'L',
    AttendanceStatus.EXCUSED: 'E',
}


class AnalyticsService:
    """统计分析服务类"""

    @staticmethod
    def get_teacher_analytics(teacher_id, today=None):
        """
        教师端综合统计

        包括班级表现、风险学生（缺勤较多）和最近7天出勤趋势。
        """
        classes = Class.query.filter_by(teacher_id=teacher_id).all()
        if not classes:
            return {
                'total_classes': 0,
                'total_students': 0,
                'average_attendance': 0,
                'at_risk_students': [],
                'class_performance': [],
                'recent_trends': [],
            }

        total_students = 0
        all_records = []
        class_performance = []
        at_risk = []

        for class_obj in classes:
            members = ClassMember.query.filter_by(class_id=class_obj.id).all()
            total_students += len(members)
            records = Attendance.query.filter_by(class_id=class_obj.id).all()
            all_records.extend(records)
            total_sessions = len({r.date for r in records})

            for member in members:
                student = member.student
                if student is None:
                    continue
                absences = sum(1 for r in records
                               if r.student_id == member.student_id and r.status == AttendanceStatus.ABSENT)
                rate = ((total_sessions - absences) / total_sessions * 100) if total_sessions else 100
                if absences >= AT_RISK_ABSENCES or (total_sessions >= AT_RISK_MIN_SESSIONS and rate < AT_RISK_RATE):
                    allowable = max(0, math.floor(total_sessions * ALLOWABLE_ABSENCE_RATIO))
                    at_risk.append({
                        'student_id': member.student_id,
                        'name': student.name,
                        'class_name': class_obj.name,
                        'class_code': class_obj.code,
                        'absences': absences,
                        'total_sessions': total_sessions,
                        'allowable_remaining': max(0, allowable - absences),
                        'attendance_rate': int(math.floor(rate + 0.5)),
                    })

            class_performance.append({
                'id': class_obj.id,
                'name': class_obj.name,
                'code': class_obj.code,
                'description': class_obj.description,
                'students': len(members),
                'attendance': attendance_rate(records),
                'total_sessions': total_sessions,
            })

        at_risk.sort(key=lambda s: s['absences'], reverse=True)
        class_performance.sort(key=lambda c: c['attendance'], reverse=True)

        return {
            'total_classes': len(classes),
            'total_students': total_students,
            'average_attendance': attendance_rate(all_records),
            'at_risk_students': at_risk[:MAX_AT_RISK],
            'class_performance': class_performance,
            'recent_trends': AnalyticsService._recent_trends(all_records, today or local_today()),
        }

    @staticmethod
    def _recent_trends(records, today):
        """以today结尾的连续若干天出勤率"""
        end = datetime.strptime(today, DATE_FORMAT)
        trends = []
        for offset in range(TREND_DAYS - 1, -1, -1):
            day = (end - timedelta(days=offset)).strftime(DATE_FORMAT)
            day_records = [r for r in records if r.date == day]
            trends.append({'date': day, 'attendance': attendance_rate(day_records)})
        return trends

    @staticmethod
    def get_student_analytics(student_id):
        """学生端统计"""
        memberships = ClassMember.query.filter_by(student_id=student_id).all()
        if not memberships:
            return {
                'total_classes': 0,
                'overall_attendance': 0,
                'class_performance': [],
                'recent_attendance': [],
                'stats': empty_counts(),
            }

        all_records = []
        class_performance = []
        for membership in memberships:
            class_obj = membership.class_obj
            if class_obj is None:
                continue
            records = Attendance.query.filter_by(class_id=class_obj.id, student_id=student_id).all()
            all_records.extend(records)
            counts = empty_counts()
            for record in records:
                counts[record.status] += 1
            class_performance.append({
                'id': class_obj.id,
                'name': class_obj.name,
                'code': class_obj.code,
                'description': class_obj.description,
                'attendance': attendance_rate(records),
                'present': counts[AttendanceStatus.PRESENT],
                'late': counts[AttendanceStatus.LATE],
                'absent': counts[AttendanceStatus.ABSENT],
                'total_sessions': len(records),
            })

        stats = empty_counts()
        for record in all_records:
            stats[record.status] += 1
        attended = stats[AttendanceStatus.PRESENT] + stats[AttendanceStatus.LATE]

        recent = sorted(all_records, key=lambda r: r.date, reverse=True)[:RECENT_RECORDS]
        class_performance.sort(key=lambda c: c['attendance'], reverse=True)

        return {
            'total_classes': len(memberships),
            'overall_attendance': percent(attended, len(all_records)),
            'class_performance': class_performance,
            'recent_attendance': [
                {'date': r.date, 'status': r.status, 'class_id': r.class_id} for r in recent
            ],
            'stats': stats,
        }

    @staticmethod
    def export_class_attendance(teacher, class_id):
        """
        导出班级考勤表（Excel）

        Returns:
            (BytesIO, 文件名)
        """
        class_obj = ClassService.get_class_or_404(class_id)
        ClassService.require_teacher_of(class_obj, teacher, 'export attendance')

        members = ClassMember.query.filter_by(class_id=class_id).all()
        records = Attendance.query.filter_by(class_id=class_id).all()
        dates = sorted({r.date for r in records})
        by_student = {}
        for record in records:
            by_student.setdefault(record.student_id, []).append(record)

        data = []
        for member in members:
            student = member.student
            if student is None:
                continue
            student_records = by_student.get(member.student_id, [])
            statuses = {r.date: r.status for r in student_records}
            row = {'Name': student.name, 'ID Number': student.id_number or '', 'Email': student.email}
            for date in dates:
                row[date] = STATUS_LABELS.get(statuses.get(date), '')
            counts = empty_counts()
            for record in student_records:
                counts[record.status] += 1
            row['Present'] = counts[AttendanceStatus.PRESENT]
            row['Late'] = counts[AttendanceStatus.LATE]
            row['Absent'] = counts[AttendanceStatus.ABSENT]
            row['Excused'] = counts[AttendanceStatus.EXCUSED]
            row['Rate (%)'] = attendance_rate(student_records)
            data.append(row)

        columns = ['Name', 'ID Number', 'Email'] + dates + ['Present', 'Late', 'Absent', 'Excused', 'Rate (%)']
        df = pd.DataFrame(data, columns=columns)
        df = df.sort_values('Name', kind='stable')

        output = BytesIO()
        with pd.ExcelWriter(output, engine='openpyxl') as writer:
            df.to_excel(writer, sheet_name='Attendance', index=False)

            worksheet = writer.sheets['Attendance']
            worksheet.column_dimensions['A'].width = 20
            worksheet.column_dimensions['B'].width = 15
            worksheet.column_dimensions['C'].width = 28

            from openpyxl.styles import Font, Alignment, PatternFill
            header_fill = PatternFill(start_color='4472C4', end_color='4472C4', fill_type='solid')
            header_font = Font(bold=True, color='FFFFFF')
            for cell in worksheet[1]:
                cell.fill = header_fill
                cell.font = header_font
                cell.alignment = Alignment(horizontal='center', vertical='center')

            # 冻结表头和姓名列
            worksheet.freeze_panes = 'B2'

        output.seek(0)
        filename = f'{class_obj.code}_attendance_{local_today()}.xlsx'
        return output, filename
