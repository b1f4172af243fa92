# controllers/auth_controller.py
from flask import Blueprint, request, g

from controllers.auth_helpers import auth_required, extract_bearer
from services.user_service import UserService
from utils.response import json_response


auth_bp = Blueprint("auth", __name__)


@auth_bp.post("/register")
def register():
    data = request.get_json(silent=True) or {}
    result = UserService.register(
        email=data.get("email"),
        password=data.get("password"),
        name=data.get("name"),
    )
    return json_response(data=result, code=201)


@auth_bp.post("/login")
def login():
    data = request.get_json(silent=True) or {}
    result = UserService.login(data.get("email"), data.get("password"))
    return json_response(data=result)


@auth_bp.post("/google")
def google_login():
    data = request.get_json(silent=True) or {}
    result = UserService.google_login(data.get("credential"))
    return json_response(data=result)


@auth_bp.get("/me")
@auth_required()
def me():
    user = UserService.get_me(g.current_user.id)
    return json_response(data=user.to_dict())


@auth_bp.put("/me")
@auth_required()
def update_me():
    data = request.get_json(silent=True) or {}
    user = UserService.update_me(g.current_user, data)
    return json_response(data=user.to_dict(), message="更新成功")


@auth_bp.post("/logout")
def logout():
    UserService.logout(extract_bearer(request.headers.get("Authorization")))
    return json_response(message="已退出登录")
