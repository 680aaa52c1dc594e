"""配置、日志、异常与指标等公共基础设施。"""
