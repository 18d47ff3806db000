import re
from typing import BinaryIO, Iterator, Optional, Tuple

from video_manager.common.exceptions import MalformedRangeError
from video_manager.model.range_response import RangeResponse

# 扩展名 -> Content-Type 对照表
CONTENT_TYPES = {
    '.mp4': 'video/mp4',
    '.mkv': 'video/x-matroska',
    '.mov': 'video/quicktime',
    '.avi': 'video/x-msvideo',
    '.webm': 'video/webm',
    '.ts': 'video/mp2t',
}
DEFAULT_CONTENT_TYPE = 'video/mp4'

# 每次读取的块大小
CHUNK_SIZE = 64 * 1024

_RANGE_PATTERN = re.compile(r'bytes=(\d+)-(\d*)')


class RangeStreamer:
    """
    用途说明：HTTP Range 请求计算器。根据文件大小和 Range 请求头计算需要返回的字节窗口，
    并提供严格限定在该窗口内的读取迭代器。
    """

    @staticmethod
    def resolve_content_type(extension: str) -> str:
        """
        用途说明：根据扩展名查表获取 Content-Type，无法识别时返回 video/mp4。
        入参说明：extension (str): 含前导点的扩展名（如 .mkv），大小写不敏感。
        """
        return CONTENT_TYPES.get(extension.lower(), DEFAULT_CONTENT_TYPE)

    @staticmethod
    def parse_range_header(range_header: str, file_size: int) -> Tuple[int, int]:
        """
        用途说明：解析 bytes=<start>-<end>? 格式的 Range 请求头。
        入参说明：
            range_header (str): 原始请求头值。
            file_size (int): 请求时重新 stat 得到的文件大小。
        返回值说明：Tuple[int, int] - (start, end)，end 为闭区间；未指定 end 时为 file_size - 1，
            超出文件末尾的 end 截断为 file_size - 1。
        """
        match = _RANGE_PATTERN.fullmatch(range_header.strip())
        if not match:
            raise MalformedRangeError(f"无法解析的 Range 请求头: {range_header}")

        start = int(match.group(1))
        end = int(match.group(2)) if match.group(2) else file_size - 1
        if end < start:
            raise MalformedRangeError(f"Range 结束位置小于起始位置: {range_header}")
        if start >= file_size:
            raise MalformedRangeError(f"Range 起始位置超出文件大小 {file_size}: {range_header}")
        return start, min(end, file_size - 1)

    @classmethod
    def plan_response(cls, file_size: int, range_header: Optional[str], content_type: str) -> RangeResponse:
        """
        用途说明：计算视频流响应。
        入参说明：
            file_size (int): 文件总字节数。
            range_header (Optional[str]): Range 请求头，为空时返回整个文件。
            content_type (str): 响应的 Content-Type。
        返回值说明：RangeResponse - 无 Range 时状态码 200，有 Range 时 206。
            空文件没有可满足的字节区间，格式合法的 Range 按 200 返回空内容。
            Range 非法时抛出 MalformedRangeError。
        """
        if range_header and file_size == 0 and not _RANGE_PATTERN.fullmatch(range_header.strip()):
            raise MalformedRangeError(f"无法解析的 Range 请求头: {range_header}")

        if not range_header or file_size == 0:
            return RangeResponse(
                status_code=200,
                start=0,
                end=file_size - 1,
                content_length=file_size,
                is_partial=False,
                total_size=file_size,
                content_type=content_type
            )

        start, end = cls.parse_range_header(range_header, file_size)
        return RangeResponse(
            status_code=206,
            start=start,
            end=end,
            content_length=end - start + 1,
            is_partial=True,
            total_size=file_size,
            content_type=content_type
        )

    @staticmethod
    def iter_file_range(handle: BinaryIO, start: int, length: int, chunk_size: int = CHUNK_SIZE) -> Iterator[bytes]:
        """
        用途说明：从已打开的文件句柄中读取 [start, start + length) 的字节。
        生成器结束、被 close()（客户端断开）或中途异常时都会关闭句柄。
        入参说明：
            handle (BinaryIO): 以二进制模式打开的文件句柄，所有权转移给该生成器。
            start (int): 起始偏移。
            length (int): 需要读取的总字节数。
            chunk_size (int): 单次读取的最大字节数。
        """
        try:
            handle.seek(start)
            remaining = length
            while remaining > 0:
                data = handle.read(min(chunk_size, remaining))
                if not data:
                    break
                remaining -= len(data)
                yield data
        finally:
            handle.close()
