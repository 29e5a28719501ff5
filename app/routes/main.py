"""主路由"""
from flask import Blueprint, jsonify
from sqlalchemy import text
from app.extensions import db

bp = Blueprint('main', __name__)


@bp.route('/')
def index():
    """首页"""
    return jsonify({'message': 'Classroom management API'})


@bp.route('/api/health')
def health():
    """健康检查"""
    try:
        db.session.execute(text('SELECT 1'))
        database = 'ok'
    except Exception as e:
        database = f'error: {e}'
    return jsonify({'backend': 'ok', 'database': database})
