# tests/unit/conftest.py
"""单元测试专用 fixtures."""

import pytest
from flask import Flask

_REQBIND_ENV_VARS = (
    "REQBIND_MAX_BODY_SIZE",
    "REQBIND_MULTIPART_MEMORY",
    "REQBIND_JSON_DISALLOW_UNKNOWN_FIELDS",
    "REQBIND_JSON_DISALLOW_TRAILING_DATA",
    "REQBIND_SAFE_MODE",
    "REQBIND_ENVELOPE",
    "REQBIND_NO_VARY_SEARCH",
)


@pytest.fixture(autouse=True)
def _unit_test_env(monkeypatch):
    """为 unit tests 清理 REQBIND_* 环境变量, 避免本机配置影响断言."""
    for name in _REQBIND_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def flask_app() -> Flask:
    """构造临时 Flask 应用, 供 request context 与 jsonify 使用."""
    app = Flask(__name__)
    app.config["TESTING"] = True
    return app
