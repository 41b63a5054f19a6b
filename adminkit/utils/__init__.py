"""工具模块.

包含渲染、取值、分页与日志等通用辅助函数.

主要工具:
- structlog_config: 结构化日志配置
- rendering: 包内模板渲染与属性拼装
- entity_access: 实体/行数据取值适配
- form_payload: 请求负载嵌套解析
- pagination_utils: 分页参数解析
- time_utils: 时间解析与相对时间
- route_safety: 视图异常兜底
"""
