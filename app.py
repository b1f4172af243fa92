# app.py
import logging

from flask import Flask
from config.settings import get_config
from extensions.database import db, migrate
from extensions.logger import init_logger
from utils.response import json_response, error_response
from utils.exceptions import BizError
from controllers.auth_controller import auth_bp
from controllers.post_controller import post_bp
from controllers.category_controller import category_bp
from controllers.tag_controller import tag_bp
from controllers.page_controller import page_bp
from controllers.comment_controller import comment_bp
from controllers.internal_controller import internal_bp
from controllers.stats_controller import stats_bp

import models  # noqa: F401  注册全部模型，供 Flask-Migrate 检测

logger = logging.getLogger(__name__)


def create_app(config_name="development"):
    app = Flask(__name__)
    app.config.from_object(get_config(config_name))

    # 初始化扩展
    db.init_app(app)
    migrate.init_app(app, db)
    init_logger(app)
    logger.info("当前数据库 URI: %s", app.config["SQLALCHEMY_DATABASE_URI"])

    # 登录 / 账号
    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    # 文章、分类、标签
    app.register_blueprint(post_bp)
    app.register_blueprint(category_bp)
    app.register_blueprint(tag_bp)
    # 页面与公告
    app.register_blueprint(page_bp)
    # 评论
    app.register_blueprint(comment_bp)
    # 集群内部：评论备份恢复
    app.register_blueprint(internal_bp)
    # 后台统计
    app.register_blueprint(stats_bp)

    @app.get("/health")
    def health():
        return json_response(data={"status": "ok", "service": app.config["APP_NAME"]})

    # 错误处理
    @app.errorhandler(404)
    def not_found(e):
        return error_response(message="接口不存在", code=404)

    @app.errorhandler(405)
    def method_not_allowed(e):
        return error_response(message="请求方法不被允许", code=405)

    @app.errorhandler(BizError)
    def _biz_err(e: BizError):
        return error_response(message=e.message, code=e.code, data=e.data)

    return app


if __name__ == "__main__":
    app = create_app()
    app.run(host="0.0.0.0", port=8888, debug=True)
