import os

# 测试期间使用确定的默认配置, 不受开发者本机 .env 影响
os.environ.setdefault("REQBIND_APP_NAME", "reqbind-test")
os.environ.setdefault("REQBIND_ENABLE_DEBUG_LOG", "false")
