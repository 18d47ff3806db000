from flask import Blueprint, request

from video_manager.common.exceptions import ConfigurationError
from video_manager.common.response import success_response
from video_manager.setting.setting_service import settingService
from video_manager.system.system_service import SystemService
from config import GlobalConfig

# 创建系统管理模块的蓝图
system_bp = Blueprint('system', __name__)

@system_bp.route('/logs', methods=['GET'])
def get_logs():
    """
    用途说明：获取最新的系统日志，支持关键词、等级筛选以及 API 过滤。
    入参说明：
        Query 参数 lines (int, 可选) - 读取的行数，默认 200。
        Query 参数 keyword (str, 可选) - 搜索关键词，支持 *。
        Query 参数 level (str, 可选) - 日志等级 (INFO/DEBUG/API/ERROR/ALL)。
        Query 参数 exclude_api (str, 可选) - 是否过滤 API 日志 ("true"/"false")。
    返回值说明：JSON 响应，data 字段包含日志行列表。
    """
    lines: int = request.args.get('lines', default=200, type=int)
    keyword: str = request.args.get('keyword', default=None, type=str)
    level: str = request.args.get('level', default='ALL', type=str)
    exclude_api: bool = request.args.get('exclude_api', default='false', type=str).lower() == 'true'

    logs: list = SystemService.get_latest_logs(lines, keyword, level, exclude_api)
    return success_response("获取日志成功", data={"logs": logs}, log=False)

@system_bp.route('/logs/files', methods=['GET'])
def get_log_files():
    """
    用途说明：获取所有可用的日志文件列表。
    """
    files: list = SystemService.get_available_log_files()
    return success_response("获取日志文件列表成功", data={"files": files})

@system_bp.route('/version', methods=['GET'])
def get_app_version():
    """
    用途说明：获取当前应用的后端版本号。
    """
    return success_response("获取应用版本号成功", data={"version": GlobalConfig.APP_VERSION}, log=False)

@system_bp.route('/check_dir', methods=['GET'])
def check_video_dir():
    """
    用途说明：诊断当前配置的视频根目录。
    返回值说明：JSON 响应，data 字段包含 videoDir、dirExists、fileCount、firstFewFiles。
    """
    video_dir: str = settingService.get_video_dir()
    if not video_dir:
        raise ConfigurationError("视频目录未设置。")
    return success_response("目录检查完成", data=SystemService.check_video_dir(video_dir))
