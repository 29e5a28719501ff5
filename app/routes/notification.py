"""通知相关路由"""
from flask import Blueprint, request, jsonify, current_app
from flask_login import login_required, current_user
from app.services import NotificationService

bp = Blueprint('notification', __name__, url_prefix='/api/notifications')


@bp.route('')
@login_required
def notifications():
    """通知列表，按时间降序分页"""
    page = request.args.get('page', 1, type=int)
    per_page = request.args.get('per_page', current_app.config['DEFAULT_PER_PAGE'], type=int)
    if per_page not in current_app.config['PER_PAGE_OPTIONS']:
        per_page = current_app.config['DEFAULT_PER_PAGE']
    unread_only = request.args.get('unread', '').lower() in ('1', 'true', 'yes')

    pagination = NotificationService.get_notifications(
        current_user.id, page=page, per_page=per_page, unread_only=unread_only
    )
    return jsonify({
        'notifications': [n.to_dict() for n in pagination.items],
        'page': pagination.page,
        'pages': pagination.pages,
        'total': pagination.total,
        'unread_count': NotificationService.get_unread_count(current_user.id)
    })


@bp.route('/count')
@login_required
def unread_count():
    """未读通知数量"""
    return jsonify({'count': NotificationService.get_unread_count(current_user.id)})


@bp.route('/<int:notification_id>/read', methods=['POST'])
@login_required
def mark_notification_read(notification_id):
    """标记通知为已读"""
    NotificationService.mark_as_read(current_user.id, notification_id)
    return jsonify({
        'success': True,
        'unread_count': NotificationService.get_unread_count(current_user.id)
    })


@bp.route('/read-all', methods=['POST'])
@login_required
def mark_all_read():
    """标记所有通知为已读"""
    count = NotificationService.mark_all_as_read(current_user.id)
    return jsonify({'success': True, 'count': count})


@bp.route('/<int:notification_id>', methods=['DELETE'])
@login_required
def delete_notification(notification_id):
    """删除通知"""
    NotificationService.delete_notification(current_user.id, notification_id)
    return jsonify({'success': True})
