"""WSGI入口文件 - 用于Gunicorn等WSGI服务器

使用说明:
- 直接运行: python wsgi.py
- Gunicorn运行: gunicorn wsgi:app
"""
import os
import sys

# 确保项目根目录在Python路径中
sys.path.insert(0, os.path.dirname(__file__))

from app import create_app

# 创建应用实例
config_name = os.getenv('FLASK_ENV', 'production')
app = create_app(config_name)

if __name__ == '__main__':
    # 仅用于开发测试
    app.run(host='0.0.0.0', port=int(os.getenv('PORT', '5000')))
