from dataclasses import asdict

from flask import Blueprint, request

from video_manager.common.log_utils import LogUtils
from video_manager.common.response import success_response, error_response
from video_manager.setting.setting_service import settingService

# 创建设置模块的蓝图
setting_bp = Blueprint('setting', __name__)

@setting_bp.route('/get', methods=['GET'])
def get_setting():
    """
    用途：获取当前的配置信息
    入参说明：无
    返回值说明：包含全局配置信息 (AppConfig) 的 JSON 响应
    """
    config = settingService.get_config()
    return success_response("获取配置成功", data=asdict(config))

@setting_bp.route('/update', methods=['POST'])
def update_setting():
    """
    用途：更新并保存配置信息
    入参说明：JSON 对象，包含需要更新的配置项（app、video_library、thumbnail 或 system）
    返回值说明：操作结果响应；校验失败时由统一异常句柄返回 400
    """
    # 使用 silent=True 防止解析失败时直接返回 HTML 400 错误
    data = request.get_json(silent=True)
    if not data or not isinstance(data, dict):
        return error_response("请求数据不能为空或格式错误", 400)

    LogUtils.info("请求更新配置")

    if settingService.update_settings(data):
        system_data = data.get('system')
        if isinstance(system_data, dict) and 'debug_log_enabled' in system_data:
            LogUtils.set_level(settingService.get_config().system.debug_log_enabled)
        LogUtils.info("配置已更新并保存")
        return success_response("配置更新成功")
    return error_response("配置更新失败，请检查后端日志", 500)
