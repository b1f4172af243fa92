import json
from typing import Optional, Dict, Any


class APIClient:
    """统一的API客户端（包装 Flask test client，返回体附带 _http_status）"""

    def __init__(self, client, default_headers: Optional[Dict] = None, verbose: bool = False):
        self.client = client
        self.token: Optional[str] = None
        self.default_headers = dict(default_headers or {})
        self.verbose = verbose

    def set_token(self, token: Optional[str]):
        """设置认证token"""
        self.token = token

    def request(self, method: str, path: str,
                params: Optional[Dict] = None,
                json_data: Optional[Any] = None,
                headers: Optional[Dict] = None,
                attach_token: bool = True) -> Dict[str, Any]:
        """统一的API请求方法"""
        request_headers = dict(self.default_headers)
        if headers:
            request_headers.update(headers)
        if attach_token and self.token:
            request_headers["Authorization"] = f"Bearer {self.token}"

        kwargs = {"method": method.upper(), "headers": request_headers, "query_string": params}
        if json_data is not None:
            kwargs["json"] = json_data
        response = self.client.open(path, **kwargs)

        body = response.get_json(silent=True)
        if isinstance(body, dict):
            result = dict(body)
        else:
            result = {"_raw_text": response.get_data(as_text=True)}
        result["_http_status"] = response.status_code
        result["_headers"] = dict(response.headers)

        if self.verbose:
            display = {k: v for k, v in result.items() if not k.startswith("_")}
            print(f"{method.upper()} {path} -> {response.status_code}")
            print(json.dumps(display, ensure_ascii=False, indent=2))
        return result
