import locale
import os
from typing import List, Set, Tuple

from video_manager.common.log_utils import LogUtils
from video_manager.common.utils import Utils
from video_manager.model.file_record import FileRecord
from video_manager.model.scan_configuration import ScanConfiguration, SortOrder

# 支持的视频扩展名（小写，含前导点）
SUPPORTED_EXTENSIONS = frozenset({'.mp4', '.mkv', '.mov', '.avi', '.webm', '.ts'})


class FileIndexer:
    """
    用途说明：视频文件索引器。递归遍历根目录，过滤视频扩展名，计算稳定 ID 并返回排序后的文件快照。
    不在两次调用之间保留任何状态，每次列表请求都会重新遍历文件系统。
    """

    @staticmethod
    def compute_file_id(file_path: str) -> str:
        """
        用途说明：根据绝对路径计算视频 ID。
        入参说明：file_path (str): 文件路径。
        返回值说明：str - 32 位 MD5 字符串，同一路径结果恒定。
        """
        return Utils.calculate_path_md5(file_path)

    @staticmethod
    def is_supported(file_name: str) -> bool:
        """
        用途说明：判断文件名是否为支持的视频扩展名（大小写不敏感）。
        """
        return os.path.splitext(file_name)[1].lower() in SUPPORTED_EXTENSIONS

    @staticmethod
    def resolve_scan_root(config: ScanConfiguration) -> str:
        """
        用途说明：计算实际扫描起点。受限模式下为 <根目录>/<保留子目录>。
        """
        if config.restrict_to_subfolder:
            return os.path.join(config.root_directory, config.restricted_subfolder_name)
        return config.root_directory

    @classmethod
    def scan(cls, config: ScanConfiguration) -> List[FileRecord]:
        """
        用途说明：执行一次完整扫描。
        入参说明：config (ScanConfiguration): 本次请求的配置快照。
        返回值说明：List[FileRecord] - 排序后的视频记录。
            受限模式下保留子目录不存在时返回空列表；遍历中出现任何 I/O 错误时记录日志并返回空列表，
            不返回不完整的结果。
        """
        scan_root = cls.resolve_scan_root(config)
        if config.restrict_to_subfolder and not os.path.isdir(scan_root):
            LogUtils.debug(f"保留子目录不存在，视为空目录: {scan_root}")
            return []

        try:
            records = cls._walk(scan_root, config)
        except OSError as e:
            LogUtils.exception(f"扫描视频目录失败: {scan_root}", e)
            return []

        return cls.sort_records(records, config.sort_order)

    @classmethod
    def _walk(cls, scan_root: str, config: ScanConfiguration) -> List[FileRecord]:
        """
        用途说明：使用显式栈遍历目录树，并记录已访问目录的 (设备号, inode) 防止符号链接成环。
        """
        marker = config.exclusion_marker.lower()
        records: List[FileRecord] = []
        visited: Set[Tuple[int, int]] = set()
        stack: List[str] = [os.path.abspath(scan_root)]

        while stack:
            current_dir = stack.pop()
            dir_stat = os.stat(current_dir)
            identity = (dir_stat.st_dev, dir_stat.st_ino)
            if identity in visited:
                LogUtils.debug(f"跳过已访问目录（可能为符号链接环）: {current_dir}")
                continue
            visited.add(identity)

            with os.scandir(current_dir) as entries:
                for entry in entries:
                    if entry.is_dir():
                        stack.append(entry.path)
                        continue
                    if not entry.is_file() or not cls.is_supported(entry.name):
                        continue
                    if config.restrict_to_subfolder and marker and marker in entry.name.lower():
                        continue
                    records.append(cls._build_record(entry.path))

        return records

    @classmethod
    def _build_record(cls, file_path: str) -> FileRecord:
        """
        用途说明：通过一次新的 stat 调用构建 FileRecord。
        """
        stat_result = os.stat(file_path)
        # st_birthtime 仅部分平台提供，其余平台以 st_ctime 代替
        created = getattr(stat_result, 'st_birthtime', stat_result.st_ctime)
        name = os.path.basename(file_path)
        return FileRecord(
            id=cls.compute_file_id(file_path),
            absolute_path=file_path,
            display_name=name,
            parent_directory=os.path.dirname(file_path),
            size_bytes=stat_result.st_size,
            modified_at=Utils.timestamp_to_datetime(stat_result.st_mtime),
            created_at=Utils.timestamp_to_datetime(created),
            extension=os.path.splitext(name)[1].lower()
        )

    @staticmethod
    def name_sort_key(name: str) -> str:
        """
        用途说明：按当前 LC_COLLATE 生成本地化排序键。
        """
        return locale.strxfrm(name)

    @classmethod
    def sort_records(cls, records: List[FileRecord], sort_order: SortOrder) -> List[FileRecord]:
        """
        用途说明：在完整遍历结束后统一排序一次。相同创建时间或相同排序键时以路径作为第二排序键。
        入参说明：
            records (List[FileRecord]): 待排序记录。
            sort_order (SortOrder): 排序方式。
        返回值说明：List[FileRecord] - 新的已排序列表。
        """
        if sort_order == SortOrder.NAME:
            return sorted(records, key=lambda r: (cls.name_sort_key(r.display_name), r.absolute_path))
        by_path = sorted(records, key=lambda r: r.absolute_path)
        return sorted(by_path, key=lambda r: r.created_at, reverse=True)

    @staticmethod
    def apply_collation_locale(locale_name: str) -> bool:
        """
        用途说明：设置进程的 LC_COLLATE，使按名称排序符合部署地区（例如日文）。
        入参说明：locale_name (str): locale 名称，为空时使用系统环境默认值。
        返回值说明：bool - 是否设置成功；失败时保持原有排序规则。
        """
        try:
            locale.setlocale(locale.LC_COLLATE, locale_name)
            LogUtils.info(f"排序规则已设置为: {locale.setlocale(locale.LC_COLLATE)}")
            return True
        except locale.Error as e:
            LogUtils.error(f"设置排序 locale 失败 ({locale_name}): {e}")
            return False
