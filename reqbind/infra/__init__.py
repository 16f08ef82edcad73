"""Flask 集成层(请求日志等)."""
