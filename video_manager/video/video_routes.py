from flask import Blueprint, Response, jsonify, request

from video_manager.common.exceptions import ConfigurationError, NotFoundError, VideoManagerError
from video_manager.common.log_utils import LogUtils
from video_manager.common.response import success_response, error_response
from video_manager.setting.setting_service import settingService
from video_manager.video.file_management_service import FileManagementService
from video_manager.video.thumbnail_service import ThumbnailService
from video_manager.video.video_service import VideoService

# 创建视频模块的蓝图
video_bp = Blueprint('video', __name__)

STREAM_FAILED_MESSAGE = "视频流传输失败。"
THUMBNAIL_FAILED_MESSAGE = "缩略图生成失败。"


def _required_fields(data, *names):
    """
    用途说明：校验请求体中的必填字段，返回缺失的字段名列表。
    """
    if not isinstance(data, dict):
        return list(names)
    return [name for name in names if not data.get(name)]


@video_bp.route('', methods=['GET'])
def list_videos():
    """
    用途说明：获取视频列表，每条记录附带缩略图地址。
    入参说明：Query 参数 sort (newest/name, 可选) - 覆盖配置中的排序方式。
    返回值说明：{"videos": [...]}；根目录未设置时返回 500。
    """
    sort_override = request.args.get('sort', default=None, type=str)
    videos = VideoService.list_videos(sort_override)
    LogUtils.debug(f"视频列表返回 {len(videos)} 条记录")
    return jsonify({"videos": videos})


@video_bp.route('/<video_id>/stream', methods=['GET'])
def stream_video(video_id: str):
    """
    用途说明：按 Range 请求头推送视频字节流。
    入参说明：Header Range (可选) - bytes=<start>-<end>?
    返回值说明：200 全量 / 206 部分内容；ID 未知或文件消失返回 404；
        根目录未设置、Range 非法及其他 I/O 错误统一返回 500。
    """
    range_header = request.headers.get('Range')
    try:
        stream = VideoService.open_stream(video_id, range_header)
    except (ConfigurationError, NotFoundError) as e:
        LogUtils.error(f"视频流请求失败: {e.message}")
        return error_response(e.message, e.status_code)
    except Exception as e:
        LogUtils.exception(f"视频流传输失败 (ID: {video_id}, Range: {range_header})", e)
        return error_response(STREAM_FAILED_MESSAGE, 500)

    plan = stream.plan
    response = Response(stream.body, status=plan.status_code, direct_passthrough=True)
    for key, value in plan.headers.items():
        response.headers[key] = value
    # 生成器未被迭代时不会执行 finally，由响应关闭时兜底释放句柄
    response.call_on_close(stream.handle.close)
    return response


@video_bp.route('/<video_id>/thumbnail', methods=['GET'])
def get_thumbnail(video_id: str):
    """
    用途说明：获取视频缩略图（JPEG）。
    返回值说明：图片字节流；ID 未知返回 404；其他错误返回 500。
    """
    try:
        record = VideoService.resolve_video(video_id)
        data = ThumbnailService.get_thumbnail(record)
    except (ConfigurationError, NotFoundError) as e:
        return error_response(e.message, e.status_code)
    except Exception as e:
        LogUtils.exception(f"缩略图生成失败 (ID: {video_id})", e)
        return error_response(THUMBNAIL_FAILED_MESSAGE, 500)

    cache_seconds = settingService.get_config().thumbnail.cache_seconds
    response = Response(data, mimetype='image/jpeg')
    response.headers['Cache-Control'] = f"public, max-age={cache_seconds}"
    return response


@video_bp.route('/rename', methods=['POST'])
def rename_video():
    """
    用途说明：在文件名末尾（扩展名之前）追加后缀。
    入参说明：JSON 包含 videoId、fileName、suffix
    返回值说明：成功时包含 newFileName；400 缺少字段，404 未找到，409 同名冲突，500 I/O 失败。
    """
    data = request.get_json(silent=True)
    if _required_fields(data, 'videoId', 'fileName', 'suffix'):
        return error_response("videoId、fileName、suffix 为必填项。", 400)

    LogUtils.info(f"请求重命名文件: {data['fileName']} (后缀: {data['suffix']!r})")
    try:
        result = FileManagementService.rename_with_suffix(data['videoId'], data['suffix'])
    except VideoManagerError as e:
        LogUtils.error(f"文件重命名失败: {e.message}")
        return error_response(e.message, e.status_code)
    return success_response(f"文件名已修改为 \"{result['newFileName']}\"。", **result)


@video_bp.route('/move', methods=['POST'])
def move_video():
    """
    用途说明：将视频移动到保留子目录。
    入参说明：JSON 包含 videoId、fileName
    返回值说明：400 缺少字段，404 未找到，409 同名冲突，500 I/O 失败。
    """
    data = request.get_json(silent=True)
    if _required_fields(data, 'videoId', 'fileName'):
        return error_response("videoId 和 fileName 为必填项。", 400)

    LogUtils.info(f"请求移动文件到保留子目录: {data['fileName']}")
    try:
        result = FileManagementService.move_to_subfolder(data['videoId'])
    except VideoManagerError as e:
        LogUtils.error(f"文件移动失败: {e.message}")
        return error_response(e.message, e.status_code)
    folder = settingService.get_config().video_library.restricted_subfolder_name
    return success_response(f"文件 \"{data['fileName']}\" 已移动到 {folder} 文件夹。", **result)


@video_bp.route('/delete', methods=['POST'])
def delete_video():
    """
    用途说明：软删除视频，将其移动到删除目录。
    入参说明：JSON 包含 videoId、fileName
    返回值说明：400 缺少字段，404 未找到，409 同名冲突，500 I/O 失败。
    """
    data = request.get_json(silent=True)
    if _required_fields(data, 'videoId', 'fileName'):
        return error_response("videoId 和 fileName 为必填项。", 400)

    LogUtils.info(f"请求删除文件（移动到删除目录）: {data['fileName']}")
    try:
        result = FileManagementService.soft_delete(data['videoId'])
    except VideoManagerError as e:
        LogUtils.error(f"文件删除失败: {e.message}")
        return error_response(e.message, e.status_code)
    return success_response(f"文件 \"{data['fileName']}\" 已移动到删除目录。", **result)
