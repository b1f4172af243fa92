# utils/exceptions.py
from typing import Any, Optional
from werkzeug.exceptions import HTTPException


class BizError(HTTPException):
    code: int  # HTTP 状态码
    message: str  # 业务提示
    data: Optional[Any]  # 附加数据

    def __init__(self, message: str = "业务异常", code: int = 400, data: Any = None):
        self.code = code
        self.message = message
        self.data = data
        super().__init__(description=message)


class ValidationError(BizError):
    def __init__(self, message: str = "请求参数不合法", data: Any = None):
        super().__init__(message, 400, data)


class UnauthorizedError(BizError):
    def __init__(self, message: str = "需要登录", data: Any = None):
        super().__init__(message, 401, data)


class ForbiddenError(BizError):
    def __init__(self, message: str = "没有权限", data: Any = None):
        super().__init__(message, 403, data)


class NotFoundError(BizError):
    def __init__(self, message: str = "资源不存在", data: Any = None):
        super().__init__(message, 404, data)


class InternalError(BizError):
    def __init__(self, message: str = "服务器内部错误", data: Any = None):
        super().__init__(message, 500, data)
