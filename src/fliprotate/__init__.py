"""批量翻转/旋转图片并重新编码保存的工具包。"""

__version__ = "0.1.0"
