from flask import jsonify


def json_response(data=None, message=None, code=200, meta=None):
    """
    成功响应：{"data": ..., "meta": ..., "message": ...}
    meta / message 为空时省略。
    """
    body = {"data": data}
    if meta is not None:
        body["meta"] = meta
    if message:
        body["message"] = message
    resp = jsonify(body)
    resp.status_code = code
    return resp


def error_response(message="服务器内部错误", code=500, data=None):
    body = {"status": "error", "statusCode": code, "message": message}
    if data is not None:
        body["data"] = data
    resp = jsonify(body)
    resp.status_code = code
    return resp


def page_meta(total: int, page: int, limit: int, **extra) -> dict:
    total_pages = (total + limit - 1) // limit if limit else 0
    meta = {
        "total": total,
        "page": page,
        "limit": limit,
        "totalPages": total_pages,
    }
    meta.update(extra)
    return meta
