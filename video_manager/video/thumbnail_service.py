import io
import os
import tempfile
from typing import Optional

import cv2
from PIL import Image

from video_manager.common.exceptions import IOFailure
from video_manager.common.log_utils import LogUtils
from video_manager.common.utils import Utils
from video_manager.model.file_record import FileRecord
from video_manager.setting.setting_service import settingService


class ThumbnailService:
    """
    用途说明：缩略图服务类。
    管理职责：
    1. 以视频 ID 为文件名缓存 JPEG 缩略图，命中缓存时直接返回。
    2. 未命中时通过 OpenCV 截取视频指定位置的一帧，并用 Pillow 等比缩放后编码为 JPEG。
    """
    _THUMBNAIL_DIR: str = os.path.join(Utils.get_runtime_path(), "cache", "thumbnail")

    @classmethod
    def get_thumbnail_path(cls, video_id: str) -> str:
        """用途说明：返回指定视频的缩略图缓存路径。"""
        return os.path.join(cls._THUMBNAIL_DIR, f"{video_id}.jpg")

    @classmethod
    def get_thumbnail(cls, record: FileRecord) -> bytes:
        """
        用途说明：获取缩略图字节内容，优先读取缓存。
        入参说明：record (FileRecord): 视频记录。
        返回值说明：bytes - JPEG 内容。生成失败时抛出 IOFailure。
        """
        thumb_path = cls.get_thumbnail_path(record.id)
        if os.path.exists(thumb_path):
            with open(thumb_path, 'rb') as f:
                return f.read()

        settings = settingService.get_config().thumbnail
        data = cls.generate_thumbnail(record.absolute_path, settings.width, settings.height, settings.seek_ratio)

        cls._write_cache(thumb_path, data)
        return data

    @classmethod
    def _write_cache(cls, thumb_path: str, data: bytes) -> None:
        """
        用途说明：先写入同目录下的临时文件，再用 os.replace 原子替换，读取方不会看到写了一半的 JPEG。
        缓存写入失败只记录日志，不影响本次返回。
        """
        tmp_path = None
        try:
            os.makedirs(cls._THUMBNAIL_DIR, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=".thumb-", suffix=".tmp", dir=cls._THUMBNAIL_DIR)
            with os.fdopen(fd, 'wb') as f:
                f.write(data)
            os.replace(tmp_path, thumb_path)
            tmp_path = None
        except OSError as e:
            LogUtils.error(f"缩略图缓存写入失败: {thumb_path}, 错误: {e}")
        finally:
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)

    @staticmethod
    def _grab_frame(video_path: str, seek_ratio: float) -> Optional[Image.Image]:
        """
        用途说明：截取视频时长 seek_ratio 处的一帧，读取失败时退回第一帧。
        返回值说明：Optional[Image.Image] - RGB 图像，无法读取任何画面时返回 None。
        """
        cap = cv2.VideoCapture(video_path)
        try:
            if not cap.isOpened():
                return None
            frame_count = cap.get(cv2.CAP_PROP_FRAME_COUNT) or 0
            if frame_count > 0 and seek_ratio > 0:
                cap.set(cv2.CAP_PROP_POS_FRAMES, int(frame_count * seek_ratio))
            success, frame = cap.read()
            if not success:
                cap.set(cv2.CAP_PROP_POS_FRAMES, 0)
                success, frame = cap.read()
            if not success:
                return None
            return Image.fromarray(cv2.cvtColor(frame, cv2.COLOR_BGR2RGB))
        finally:
            cap.release()

    @classmethod
    def generate_thumbnail(cls, video_path: str, width: int, height: int, seek_ratio: float) -> bytes:
        """
        用途说明：为单个视频生成缩略图。
        入参说明：
            video_path (str): 视频路径。
            width / height (int): 缩略图最大宽高（保持纵横比）。
            seek_ratio (float): 截帧位置占总时长的比例。
        返回值说明：bytes - JPEG 内容。
        """
        if not os.path.exists(video_path):
            raise IOFailure(f"视频文件不存在: {video_path}")

        image = cls._grab_frame(video_path, seek_ratio)
        if image is None:
            raise IOFailure(f"无法从视频中读取画面: {video_path}")

        image.thumbnail((width, height))
        buffer = io.BytesIO()
        image.save(buffer, "JPEG")
        LogUtils.debug(f"缩略图已生成: {video_path}")
        return buffer.getvalue()
