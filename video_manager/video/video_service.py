import os
from dataclasses import dataclass
from typing import Any, BinaryIO, Dict, Iterator, List, Optional

from video_manager.common.exceptions import IOFailure, NotFoundError
from video_manager.common.log_utils import LogUtils
from video_manager.model.file_record import FileRecord
from video_manager.model.range_response import RangeResponse
from video_manager.model.scan_configuration import ScanConfiguration
from video_manager.setting.setting_service import settingService
from video_manager.video.file_indexer import FileIndexer
from video_manager.video.range_streamer import RangeStreamer


@dataclass
class VideoStream:
    """
    用途：一次视频流请求的结果，包含响应描述、已打开的文件句柄及限定窗口的字节迭代器。
    """
    record: FileRecord
    plan: RangeResponse
    handle: BinaryIO
    body: Iterator[bytes]


class VideoService:
    """
    用途：视频业务服务类，封装列表查询、ID 解析和视频流打开逻辑。
    """

    THUMBNAIL_URL_TEMPLATE: str = "/api/videos/{id}/thumbnail"

    @staticmethod
    def list_videos(sort_override: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        用途：扫描视频目录并返回附带缩略图地址的列表。
        入参说明：sort_override (Optional[str]): 本次请求指定的排序方式。
        返回值说明：List[Dict[str, Any]] - 前端列表数据。未设置根目录时抛出 ConfigurationError。
        """
        config = settingService.get_scan_config(sort_override)
        videos = []
        for record in FileIndexer.scan(config):
            item = record.to_dict()
            item["thumbnailUrl"] = VideoService.THUMBNAIL_URL_TEMPLATE.format(id=record.id)
            videos.append(item)
        return videos

    @staticmethod
    def resolve_video(video_id: str, config: Optional[ScanConfiguration] = None) -> FileRecord:
        """
        用途：通过一次新的扫描将视频 ID 解析为文件记录。
        入参说明：
            video_id (str): 视频 ID。
            config (Optional[ScanConfiguration]): 扫描配置快照，为空时读取当前配置。
        返回值说明：FileRecord - 匹配的记录；找不到时抛出 NotFoundError。
        """
        if config is None:
            config = settingService.get_scan_config()
        for record in FileIndexer.scan(config):
            if record.id == video_id:
                return record
        raise NotFoundError(f"找不到视频。ID: {video_id}")

    @staticmethod
    def open_stream(video_id: str, range_header: Optional[str]) -> VideoStream:
        """
        用途：打开视频流。文件大小以请求时重新 stat 的结果为准，而非扫描时的记录。
        入参说明：
            video_id (str): 视频 ID。
            range_header (Optional[str]): Range 请求头原始值。
        返回值说明：VideoStream - 句柄已打开，调用方负责在响应结束时关闭。
            异常：NotFoundError (ID 未知或文件已消失)、MalformedRangeError、IOFailure。
        """
        record = VideoService.resolve_video(video_id)

        try:
            file_size = os.stat(record.absolute_path).st_size
        except FileNotFoundError:
            raise NotFoundError(f"文件不存在: {record.absolute_path}")
        except OSError as e:
            raise IOFailure(f"读取文件信息失败: {e}") from e

        content_type = RangeStreamer.resolve_content_type(record.extension)
        plan = RangeStreamer.plan_response(file_size, range_header, content_type)

        try:
            handle = open(record.absolute_path, 'rb')
        except FileNotFoundError:
            raise NotFoundError(f"文件不存在: {record.absolute_path}")
        except OSError as e:
            raise IOFailure(f"打开文件失败: {e}") from e

        LogUtils.debug(
            f"开始推流: {record.display_name}, 状态码: {plan.status_code}, "
            f"区间: {plan.start}-{plan.end}/{plan.total_size}"
        )
        body = RangeStreamer.iter_file_range(handle, plan.start, plan.content_length)
        return VideoStream(record=record, plan=plan, handle=handle, body=body)
