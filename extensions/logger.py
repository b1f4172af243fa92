# extensions/logger.py
"""
日志初始化：控制台 + app.log + error.log 三路输出。

每条记录附带 request_id / tenant_id / user_id，便于按租户排查评论与恢复问题。
"""
import os, sys, logging, json, uuid, time
from logging.handlers import RotatingFileHandler
from flask import g, request, has_request_context
from werkzeug.exceptions import HTTPException

_REQUEST_ID_KEY = "request_id"
_HANDLER_MARK = "_devlog_handler"
_CONTEXT_FIELDS = ("request_id", "tenant_id", "user_id")

# 探活请求不写访问日志
_QUIET_PATHS = ("/health", "/internal/health")


class JsonFormatter(logging.Formatter):
    def format(self, record):
        data = {
            "ts": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for field in _CONTEXT_FIELDS:
            value = getattr(record, field, "-")
            if value != "-":
                data[field] = value
        if record.exc_info:
            data["exc"] = self.formatException(record.exc_info)
        return json.dumps(data, ensure_ascii=False)


class RequestContextFilter(logging.Filter):
    """把当前请求的上下文字段挂到 LogRecord 上，请求外一律为 '-'。"""

    def filter(self, record):
        record.request_id = record.tenant_id = record.user_id = "-"
        if not has_request_context():
            return True
        record.request_id = getattr(g, _REQUEST_ID_KEY, "-")
        tenant = getattr(g, "tenant", None)
        if tenant is not None:
            record.tenant_id = tenant.id
        user = getattr(g, "current_user", None)
        if user is not None:
            record.user_id = user.id
        return True


def _ensure_request_id():
    if not hasattr(g, _REQUEST_ID_KEY):
        incoming = request.headers.get("X-Request-ID")
        setattr(g, _REQUEST_ID_KEY, incoming or uuid.uuid4().hex)
    return getattr(g, _REQUEST_ID_KEY)


def _formatter(as_json: bool) -> logging.Formatter:
    if as_json:
        return JsonFormatter()
    return logging.Formatter(
        "%(asctime)s | %(levelname)s | %(request_id)s | %(tenant_id)s | %(user_id)s | %(name)s | %(message)s",
        "%Y-%m-%d %H:%M:%S",
    )


def _mark(handler: logging.Handler, level, fmt: logging.Formatter) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(fmt)
    handler.addFilter(RequestContextFilter())
    setattr(handler, _HANDLER_MARK, True)
    return handler


def _install_handlers(cfg, level) -> bool:
    root = logging.getLogger()
    # create_app 在测试里会被反复调用，只装一次
    if any(getattr(h, _HANDLER_MARK, False) for h in root.handlers):
        return False

    log_dir = cfg["LOG_DIR"]
    os.makedirs(log_dir, exist_ok=True)
    root.setLevel(level)
    fmt = _formatter(cfg["LOG_JSON"])

    def rotating(filename):
        return RotatingFileHandler(
            os.path.join(log_dir, filename),
            maxBytes=cfg["LOG_MAX_BYTES"],
            backupCount=cfg["LOG_BACKUP_COUNT"],
            encoding="utf-8",
        )

    root.addHandler(_mark(logging.StreamHandler(sys.stdout), level, fmt))
    root.addHandler(_mark(rotating("app.log"), level, fmt))
    root.addHandler(_mark(rotating("error.log"), logging.ERROR, fmt))

    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("werkzeug").setLevel(logging.INFO)
    return True


def init_logger(app):
    cfg = app.config
    level = getattr(logging, cfg["LOG_LEVEL"].upper(), logging.INFO)
    slow_ms = cfg.get("LOG_SLOW_REQUEST_MS", 1000)

    if _install_handlers(cfg, level):
        app.logger.info("Logger initialized for %s", cfg.get("APP_NAME"))

    @app.before_request
    def _before():
        g._req_start = time.time()
        _ensure_request_id()
        if request.path not in _QUIET_PATHS:
            app.logger.info("REQ %s %s from %s", request.method, request.path, request.remote_addr)

    @app.after_request
    def _after(resp):
        resp.headers["X-Request-ID"] = getattr(g, _REQUEST_ID_KEY, "-")
        if request.path in _QUIET_PATHS:
            return resp
        duration = (time.time() - getattr(g, "_req_start", time.time())) * 1000
        log = app.logger.warning if duration >= slow_ms else app.logger.info
        log("RESP %s %s %s %.1fms", request.method, request.path, resp.status_code, duration)
        return resp

    @app.errorhandler(Exception)
    def _unhandled(e):
        from utils.response import error_response
        if isinstance(e, HTTPException):
            return error_response(code=e.code, message=e.description)
        app.logger.exception("UNHANDLED EXCEPTION")
        return error_response(code=500, message="服务器内部错误")
