import hashlib
import os
from datetime import datetime, timezone

class Utils:
    """
    用途：后端通用工具类
    """

    @staticmethod
    def get_runtime_path() -> str:
        """
        用途：获取程序运行时的根路径
        入参说明：无
        返回值说明：返回当前工作目录的绝对路径
        """
        return os.getcwd()

    @staticmethod
    def calculate_path_md5(file_path: str) -> str:
        """
        用途：根据文件绝对路径字符串计算 MD5，作为视频的稳定 ID。
        与文件内容无关，同一路径在任何进程、任何一次扫描中都得到相同结果。
        入参说明：file_path (str) - 文件路径（会先转换为绝对路径）
        返回值说明：str - 32 位 MD5 十六进制字符串
        """
        absolute_path = os.path.abspath(file_path)
        return hashlib.md5(absolute_path.encode('utf-8', 'surrogateescape')).hexdigest()

    @staticmethod
    def timestamp_to_datetime(timestamp: float) -> datetime:
        """
        用途：将 stat 返回的时间戳转换为 UTC 时区的 datetime
        """
        return datetime.fromtimestamp(timestamp, tz=timezone.utc)

    @staticmethod
    def format_iso_time(value: datetime) -> str:
        """
        用途：格式化为带毫秒的 ISO-8601 UTC 字符串，例如 2024-01-01T12:00:00.000Z
        """
        return value.astimezone(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')
