"""结构化日志辅助模块."""
