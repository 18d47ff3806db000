from dataclasses import dataclass
from typing import Dict

@dataclass(frozen=True)
class RangeResponse:
    """
    用途：视频流响应的计算结果（不含字节内容）。
    约束：0 <= start <= end <= total_size - 1，content_length = end - start + 1；
    文件为空且无 Range 时 end 为 -1，content_length 为 0。
    """
    status_code: int
    start: int
    end: int
    content_length: int
    is_partial: bool
    total_size: int
    content_type: str

    @property
    def headers(self) -> Dict[str, str]:
        """
        用途：生成对应的 HTTP 响应头。
        返回值说明：Dict[str, str] - 206 时包含 Content-Range 与 Accept-Ranges。
        """
        headers = {
            "Content-Length": str(self.content_length),
            "Content-Type": self.content_type,
        }
        if self.is_partial:
            headers["Content-Range"] = f"bytes {self.start}-{self.end}/{self.total_size}"
            headers["Accept-Ranges"] = "bytes"
        return headers
