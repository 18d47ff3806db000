import fnmatch
import os
from datetime import datetime
from typing import Any, Dict, List, Optional

from video_manager.common.log_utils import LogUtils


class SystemService:
    """
    用途说明：系统管理服务类，负责日志读取及视频目录诊断等系统级操作。
    """

    @staticmethod
    def get_latest_logs(line_count: int = 200, keyword: Optional[str] = None, level: Optional[str] = None, exclude_api: bool = False) -> List[str]:
        """
        用途说明：读取当天的日志文件，并根据关键词、等级、API过滤标识进行过滤，返回末尾指定行数的内容。
        入参说明：
            line_count (int): 需要返回的末尾行数。
            keyword (str, 可选): 搜索关键词，支持 * 通配符。
            level (str, 可选): 日志等级（INFO/DEBUG/API/ERROR/ALL）。
            exclude_api (bool): 是否过滤 API 请求相关的日志，默认为 False。
        返回值说明：List[str]: 过滤后的日志行列表。
        """
        log_filename: str = LogUtils.get_log_filename(datetime.now().strftime('%Y%m%d'))
        log_path: str = os.path.join(LogUtils.get_log_dir(), log_filename)

        if not os.path.exists(log_path):
            return [f"[{datetime.now().strftime('%Y-%m-%d %H:%M:%S')}] 日志文件不存在: {log_filename}"]

        try:
            with open(log_path, 'r', encoding='utf-8') as f:
                filtered_lines: List[str] = f.readlines()
        except OSError as e:
            return [f"读取日志失败: {str(e)}"]

        # 1. 过滤 API 日志
        if exclude_api:
            filtered_lines = [line for line in filtered_lines if LogUtils.API_START not in line]

        # 2. 按等级过滤
        if level and level.upper() != 'ALL':
            level_tag: str = f" - {level.upper()} - "
            filtered_lines = [line for line in filtered_lines if level_tag in line]

        # 3. 按关键词过滤（支持通配符）
        if keyword:
            search_pattern: str = keyword if ('*' in keyword or '?' in keyword) else f"*{keyword}*"
            filtered_lines = [line for line in filtered_lines if fnmatch.fnmatch(line, search_pattern)]

        if line_count <= 0:
            return []
        return filtered_lines[-line_count:]

    @staticmethod
    def get_available_log_files() -> List[str]:
        """
        用途说明：获取当前系统中存在的所有日志文件列表，按日期倒序。
        返回值说明：List[str]: 文件名列表。
        """
        log_dir: str = LogUtils.get_log_dir()
        if not os.path.exists(log_dir):
            return []
        files: List[str] = [f for f in os.listdir(log_dir) if f.endswith('.log')]
        files.sort(reverse=True)
        return files

    @staticmethod
    def check_video_dir(video_dir: str, preview_count: int = 5) -> Dict[str, Any]:
        """
        用途说明：诊断视频根目录是否存在及可读，只列出第一层条目。
        入参说明：
            video_dir (str): 视频根目录。
            preview_count (int): 返回的条目名数量。
        返回值说明：Dict[str, Any]: videoDir、dirExists、fileCount、firstFewFiles；
            目录无法读取时附带 error 字段。
        """
        dir_exists: bool = os.path.isdir(video_dir)
        result: Dict[str, Any] = {
            "videoDir": video_dir,
            "dirExists": dir_exists,
            "fileCount": 0,
            "firstFewFiles": []
        }
        if not dir_exists:
            return result

        try:
            names: List[str] = sorted(os.listdir(video_dir))
        except OSError as e:
            LogUtils.exception(f"读取视频目录失败: {video_dir}", e)
            result["error"] = f"目录无法读取: {e.strerror or e}"
            return result

        result["fileCount"] = len(names)
        result["firstFewFiles"] = names[:preview_count]
        return result
