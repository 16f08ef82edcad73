"""reqbind 工具模块."""
