import logging
import traceback
from typing import Any, Tuple

from flask import Flask, request
from flask_cors import CORS
from waitress import serve

from video_manager.common.exceptions import VideoManagerError
from video_manager.common.log_utils import LogUtils
from video_manager.common.response import error_response
from video_manager.setting.setting_routes import setting_bp
from video_manager.setting.setting_service import settingService
from video_manager.system.system_routes import system_bp
from video_manager.video.file_indexer import FileIndexer
from video_manager.video.video_routes import video_bp
from config import GlobalConfig


# 初始化 Flask
app = Flask(__name__)

# 允许跨域
CORS(app, resources={r"/api/*": {"origins": "*"}}, allow_headers=["Content-Type", "Range"],
     expose_headers=["Content-Range", "Accept-Ranges", "Content-Length"])

@app.before_request
def log_request_info() -> None:
    """
    用途：记录接口请求信息
    """
    if request.path.startswith('/api'):
        data: Any = ""
        if request.is_json:
            data = request.get_json(silent=True)
        elif request.args:
            data = dict(request.args)
        range_header = request.headers.get('Range')
        suffix = f", Range: {range_header}" if range_header else ""
        LogUtils.api(f"方法: {request.method}, 路径: {request.path}, 参数: {data}{suffix}")

# --- 异常处理句柄 ---

@app.errorhandler(400)
def bad_request(e: Any) -> Tuple[Any, int]:
    return error_response("请求参数错误或格式非法", 400)

@app.errorhandler(404)
def page_not_found(e: Any) -> Any:
    if request.path.startswith('/api'):
        return error_response("请求的接口不存在", 404)
    return "404 Not Found", 404

@app.errorhandler(405)
def method_not_allowed(e: Any) -> Tuple[Any, int]:
    return error_response("请求方法不被允许", 405)

@app.errorhandler(VideoManagerError)
def handle_business_exception(e: VideoManagerError) -> Tuple[Any, int]:
    """
    用途：将业务异常按其携带的状态码转换为 {"error": message} 响应
    """
    LogUtils.error(f"业务异常 -> 路径: {request.path}, 状态码: {e.status_code}, 信息: {e.message}")
    return error_response(e.message, e.status_code)

@app.errorhandler(Exception)
def handle_global_exception(e: Exception) -> Tuple[Any, int]:
    """
    用途：【API层统一捕获】拦截所有未处理的异常，记录堆栈日志并返回 500
    入参说明：e (Exception): 异常对象
    返回值说明：Response: 统一格式的错误响应
    """
    error_stack: str = traceback.format_exc()
    LogUtils.error(f"系统触发未捕获异常 -> 路径: {request.path}\n{error_stack}")
    return error_response("服务器内部错误", 500)

# 注册蓝图
app.register_blueprint(video_bp, url_prefix='/api/videos')
app.register_blueprint(setting_bp, url_prefix='/api/setting')
app.register_blueprint(system_bp, url_prefix='/api/system')

def start_server() -> None:
    """
    用途：初始化日志与排序规则，并通过 waitress 启动服务
    """
    config = settingService.get_config()
    LogUtils.init(level=logging.DEBUG)
    LogUtils.set_level(config.system.debug_log_enabled)
    FileIndexer.apply_collation_locale(config.video_library.collation_locale)

    if not settingService.get_video_dir():
        LogUtils.error("视频目录未设置，请在 setting.json 的 VIDEO_LIBRARY.video_dir 或环境变量 VIDEO_DIR 中配置")

    LogUtils.info(f"系统服务正在启动 (Port: {GlobalConfig.SYSTEM_PORT})...")
    LogUtils.info(f"访问地址: http://localhost:{GlobalConfig.SYSTEM_PORT}")
    serve(app, host='0.0.0.0', port=GlobalConfig.SYSTEM_PORT, threads=8)

if __name__ == '__main__':
    start_server()
