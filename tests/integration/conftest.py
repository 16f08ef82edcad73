# tests/integration/conftest.py
"""集成测试专用 fixtures.

每个测试使用独立的 Flask 应用, 通过 ``init_app`` 注册 reqbind.
"""

import pytest
from flask import Flask

from reqbind import Settings, init_app

# 集成测试使用较小的请求体上限, 便于构造超限请求
INTEGRATION_MAX_BODY_SIZE = 1024


@pytest.fixture
def settings() -> Settings:
    return Settings(max_body_size=INTEGRATION_MAX_BODY_SIZE, multipart_memory=512)


@pytest.fixture
def app(settings: Settings) -> Flask:
    """创建注册了 reqbind 的测试应用实例."""
    app = Flask(__name__)
    app.config["TESTING"] = True
    init_app(app, settings)
    return app
