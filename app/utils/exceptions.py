"""业务异常"""


class ServiceError(Exception):
    """业务规则异常基类，携带HTTP状态码"""
    status_code = 400

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(ServiceError):
    """参数不合法"""
    status_code = 400


class AuthenticationError(ServiceError):
    """登录凭据错误"""
    status_code = 401


class PermissionDeniedError(ServiceError):
    """无权执行该操作"""
    status_code = 403


class NotFoundError(ServiceError):
    """记录不存在"""
    status_code = 404


class ConflictError(ServiceError):
    """违反唯一性约束或状态冲突"""
    status_code = 409
