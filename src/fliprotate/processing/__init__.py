"""解码、变换、编码与批处理协调。"""
