# utils/password.py
from werkzeug.security import generate_password_hash, check_password_hash
from flask import current_app


def hash_password(plain: str) -> str:
    return generate_password_hash(plain)


def verify_password(hashed: str | None, plain: str | None) -> bool:
    if not hashed or not plain:
        return False
    return check_password_hash(hashed, plain)


def validate_guest_password(pwd: str | None) -> list[str]:
    errs = []
    min_len = current_app.config.get("GUEST_PASSWORD_MIN_LENGTH", 4)
    if not pwd or len(pwd) < min_len:
        errs.append(f"密码长度至少 {min_len} 位")
    elif len(pwd) > 100:
        errs.append("密码长度不能超过 100 位")
    return errs
