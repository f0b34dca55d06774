"""项目内使用的自定义异常定义。"""


class FliprotateError(Exception):
    """基础异常类型。"""


class InvalidConfigurationError(FliprotateError):
    """配置不合法时抛出。"""


class ImageLoadError(FliprotateError):
    """源图片无法解码（文件损坏、格式不支持或路径不可读）。"""


class EncodeError(FliprotateError):
    """编码器没有产出任何数据。"""


class WriteError(FliprotateError):
    """输出文件写入失败。"""


class LibraryAddError(FliprotateError):
    """宿主图库拒绝登记新文件。"""


class ProcessingBusyError(FliprotateError):
    """上一批任务尚未结束时再次触发处理。"""
