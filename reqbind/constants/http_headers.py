"""HTTP头常量.

定义绑定与响应流程用到的HTTP头名称，避免魔法字符串。
"""


class HttpHeaders:
    """HTTP头常量."""

    CONTENT_LENGTH = "Content-Length"
    AUTHORIZATION = "Authorization"

    # 自定义头
    X_REQUEST_ID = "X-Request-ID"
    NO_VARY_SEARCH = "No-Vary-Search"


class ContentTypes:
    """绑定器识别的媒体类型."""

    FORM_URLENCODED = "application/x-www-form-urlencoded"
    MULTIPART_FORM = "multipart/form-data"
    OCTET_STREAM = "application/octet-stream"
