"""配置、数据模型与输出策略。"""
