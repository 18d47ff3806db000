import os
import shutil
import threading
from typing import Dict

from video_manager.common.exceptions import (
    FileConflictError,
    IOFailure,
    MalformedInputError,
    NotFoundError,
)
from video_manager.common.log_utils import LogUtils
from video_manager.model.file_record import FileRecord
from video_manager.setting.setting_service import settingService
from video_manager.video.video_service import VideoService


class FileManagementService:
    """
    用途：视频文件管理服务类，提供重命名（追加后缀）、移动到保留子目录以及软删除（移动到删除目录）。
    所有操作均先通过最新扫描将 ID 解析为真实路径，并在进程级锁内执行，避免同一文件的并发修改交错。
    """

    # 锁，保证文件修改操作串行执行
    _lock = threading.Lock()

    @staticmethod
    def _ensure_source_exists(record: FileRecord) -> None:
        if not os.path.exists(record.absolute_path):
            raise NotFoundError(f"文件不存在: {record.absolute_path}")

    @staticmethod
    def _move_into(record: FileRecord, target_dir: str) -> str:
        """
        用途：将文件移动到目标目录（按需创建），同名文件已存在时抛出 FileConflictError。
        返回值说明：str - 移动后的完整路径。
        """
        destination = os.path.join(target_dir, record.display_name)
        if os.path.exists(destination):
            raise FileConflictError(f"同名文件已存在: {destination}")
        try:
            os.makedirs(target_dir, exist_ok=True)
            shutil.move(record.absolute_path, destination)
        except FileNotFoundError:
            raise NotFoundError(f"文件不存在: {record.absolute_path}")
        except OSError as e:
            raise IOFailure(f"移动文件失败: {e}") from e
        return destination

    @staticmethod
    def rename_with_suffix(video_id: str, suffix: str) -> Dict[str, str]:
        """
        用途：在原目录内将文件重命名为 <原文件名><后缀><扩展名>。
        入参说明：
            video_id (str): 视频 ID。
            suffix (str): 追加的后缀，例如 " ggg"。不允许包含路径分隔符。
        返回值说明：Dict[str, str] - 包含 newFileName。
        """
        if os.sep in suffix or "/" in suffix or (os.altsep and os.altsep in suffix):
            raise MalformedInputError("后缀中不能包含路径分隔符。")

        with FileManagementService._lock:
            record = VideoService.resolve_video(video_id)
            FileManagementService._ensure_source_exists(record)

            stem, ext = os.path.splitext(record.display_name)
            new_name = f"{stem}{suffix}{ext}"
            new_path = os.path.join(record.parent_directory, new_name)
            if os.path.exists(new_path):
                raise FileConflictError(f"同名文件已存在: {new_name}")

            try:
                os.rename(record.absolute_path, new_path)
            except FileNotFoundError:
                raise NotFoundError(f"文件不存在: {record.absolute_path}")
            except OSError as e:
                raise IOFailure(f"文件重命名失败: {e}") from e

        LogUtils.info(f"文件已重命名: {record.absolute_path} -> {new_path}")
        return {"newFileName": new_name}

    @staticmethod
    def move_to_subfolder(video_id: str) -> Dict[str, str]:
        """
        用途：将文件移动到 <视频根目录>/<保留子目录> 中。
        入参说明：video_id (str): 视频 ID。
        返回值说明：Dict[str, str] - 包含 destinationPath。
        """
        with FileManagementService._lock:
            config = settingService.get_scan_config()
            record = VideoService.resolve_video(video_id, config)
            FileManagementService._ensure_source_exists(record)

            target_dir = os.path.join(config.root_directory, config.restricted_subfolder_name)
            destination = FileManagementService._move_into(record, target_dir)

        LogUtils.info(f"文件已移动到保留子目录: {record.absolute_path} -> {destination}")
        return {"destinationPath": destination}

    @staticmethod
    def soft_delete(video_id: str) -> Dict[str, str]:
        """
        用途：软删除，将文件移动到删除目录，而不是物理删除。
        入参说明：video_id (str): 视频 ID。
        返回值说明：Dict[str, str] - 包含 destinationPath。
        """
        with FileManagementService._lock:
            record = VideoService.resolve_video(video_id)
            FileManagementService._ensure_source_exists(record)

            destination = FileManagementService._move_into(record, settingService.get_delete_dir())

        LogUtils.info(f"文件已移动到删除目录: {record.absolute_path} -> {destination}")
        return {"destinationPath": destination}
