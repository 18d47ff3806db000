from dataclasses import dataclass
from enum import Enum
from typing import Optional

class SortOrder(Enum):
    """
    用途：扫描结果的排序方式枚举。
    """
    CREATED_DESC = "newest"  # 按创建时间倒序
    NAME = "name"            # 按文件名（本地化排序规则）升序

    @classmethod
    def from_value(cls, value: Optional[str], default: "SortOrder" = None) -> "SortOrder":
        """
        用途：将配置或查询参数中的字符串转换为枚举，兼容 by-name / by-creation-time-desc 写法。
        入参说明：
            value (Optional[str]): 原始字符串。
            default (SortOrder): 无法识别时返回的默认值，为 None 时抛出 ValueError。
        返回值说明：SortOrder - 对应的枚举值。
        """
        aliases = {
            "newest": cls.CREATED_DESC,
            "by-creation-time-desc": cls.CREATED_DESC,
            "name": cls.NAME,
            "by-name": cls.NAME,
        }
        key = (value or "").strip().lower()
        if key in aliases:
            return aliases[key]
        if default is not None:
            return default
        raise ValueError(f"未知的排序方式: {value}")

@dataclass(frozen=True)
class ScanConfiguration:
    """
    用途：单次请求使用的扫描配置快照，扫描过程中不再读取全局配置。
    """
    root_directory: str
    restrict_to_subfolder: bool = False
    sort_order: SortOrder = SortOrder.CREATED_DESC
    restricted_subfolder_name: str = "qqq"
    exclusion_marker: str = "ggg"
