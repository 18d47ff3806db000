from typing import Any, Tuple

from flask import Response, jsonify

from video_manager.common.log_utils import LogUtils

def success_response(message: str = "操作成功", data: Any = None, log: bool = True, **extra: Any) -> Tuple[Response, int]:
    """
    用途：构建成功的 API 响应
    入参说明：
        - message: 成功提示信息，默认为"操作成功"
        - data: 返回的数据对象，可选
        - log: 是否以 debug 级别记录返回内容（大数据量接口可关闭）
        - extra: 需要平铺到响应顶层的附加字段
    返回值说明：JSON 格式的成功响应和 200 状态码
    """
    response = {
        "success": True,
        "message": message
    }
    if data is not None:
        response["data"] = data
    response.update(extra)

    if log:
        LogUtils.debug(f"Success Response: {response}")

    return jsonify(response), 200

def error_response(message: str, code: int = 400) -> Tuple[Response, int]:
    """
    用途：构建失败的 API 响应
    入参说明：
        - message: 错误提示信息
        - code: HTTP 状态码，默认为 400
    返回值说明：JSON 格式的错误响应 {"error": message} 和对应的状态码
    """
    return jsonify({"error": message}), code
