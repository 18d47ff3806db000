"""
用途说明：视频管理后端的异常体系。
每个异常都携带对应的 HTTP 状态码和面向用户的提示信息，由 Flask 的统一异常句柄转换为 JSON 响应。
"""


class VideoManagerError(Exception):
    """用途说明：所有业务异常的基类。"""
    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(VideoManagerError):
    """用途说明：视频根目录未设置等配置缺失错误。"""
    status_code = 500


class NotFoundError(VideoManagerError):
    """用途说明：视频 ID 无法解析，或物理文件在 I/O 时已不存在。"""
    status_code = 404


class MalformedInputError(VideoManagerError):
    """用途说明：请求参数缺失或格式非法。"""
    status_code = 400


class MalformedRangeError(MalformedInputError):
    """用途说明：Range 请求头无法解析。流式接口统一按 500 处理。"""
    status_code = 500


class FileConflictError(VideoManagerError):
    """用途说明：目标文件名已存在。"""
    status_code = 409


class IOFailure(VideoManagerError):
    """用途说明：权限不足、磁盘错误或并发修改导致的文件操作失败。"""
    status_code = 500


class SettingValidationError(MalformedInputError):
    """用途说明：配置项取值不合法。"""
    status_code = 400
