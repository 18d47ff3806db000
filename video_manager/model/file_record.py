from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict

from video_manager.common.utils import Utils

@dataclass(frozen=True)
class FileRecord:
    """
    用途：一次扫描中发现的单个视频文件。每次扫描重新创建，创建后不可修改。
    入参说明：
        id (str): 由绝对路径计算出的稳定 ID。
        absolute_path (str): 所有 I/O 使用的文件路径。
        display_name (str): 含扩展名的文件名。
        parent_directory (str): 所在目录，仅用于展示和分组。
        size_bytes (int): 扫描时的文件大小。
        modified_at (datetime): 扫描时的修改时间。
        created_at (datetime): 扫描时的创建时间。
        extension (str): 小写扩展名，包含前导点。
    """
    id: str
    absolute_path: str
    display_name: str
    parent_directory: str
    size_bytes: int
    modified_at: datetime
    created_at: datetime
    extension: str

    def to_dict(self) -> Dict[str, Any]:
        """
        用途：转换为前端列表使用的字典结构。
        返回值说明：Dict[str, Any] - 键名与前端约定一致 (path/name/folder/size/modified/created)。
        """
        return {
            "id": self.id,
            "path": self.absolute_path,
            "name": self.display_name,
            "folder": self.parent_directory,
            "size": self.size_bytes,
            "modified": Utils.format_iso_time(self.modified_at),
            "created": Utils.format_iso_time(self.created_at),
            "extension": self.extension
        }
