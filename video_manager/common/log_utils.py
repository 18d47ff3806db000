import logging
import os
import sys
import traceback
from datetime import datetime
from typing import Optional

# 定义自定义等级：API 设为 25，位于 INFO(20) 和 WARNING(30) 之间
LOG_LEVEL_API: int = 25
logging.addLevelName(LOG_LEVEL_API, "API")

class LogUtils:
    """
    用途说明：后端统一日志工具类，提供 DEBUG, INFO, API, ERROR 四种等级。
    API 等级专门用于记录接口请求；未调用 init 之前所有日志调用均为空操作。
    """
    LOGGER_NAME: str = "video_manager"

    _logger: Optional[logging.Logger] = None
    _log_dir: str = ""
    _current_log_date: str = ""
    _file_handler: Optional[logging.FileHandler] = None
    _console_handler: Optional[logging.StreamHandler] = None
    _formatter: logging.Formatter = logging.Formatter(
        fmt='%(asctime)s:%(msecs)03d - %(levelname)s - %(message)s',
        datefmt='%Y/%m/%d-%H:%M:%S'
    )

    API_START: str = "接口请求"

    @staticmethod
    def get_log_filename(date_str: str) -> str:
        """
        用途说明：根据日期字符串生成日志文件名。
        入参说明：date_str (str): %Y%m%d 格式的日期字符串。
        返回值说明：str: 生成的日志文件名（例如 "20231027.log"）。
        """
        return f"{date_str}.log"

    @classmethod
    def get_log_dir(cls) -> str:
        """用途说明：返回当前日志目录，未初始化时返回默认的运行时日志目录。"""
        if cls._log_dir:
            return cls._log_dir
        return os.path.join(os.getcwd(), "data", "log")

    @classmethod
    def _setup_file_handler(cls) -> None:
        """
        用途说明：封装获取文件名到生成 file_handler 的逻辑。
        生成成功时，以 %Y%m%d 格式记录当前日期。
        """
        if cls._logger is None:
            return

        log_dir: str = cls.get_log_dir()
        os.makedirs(log_dir, exist_ok=True)

        now_date: str = datetime.now().strftime('%Y%m%d')
        log_path: str = os.path.join(log_dir, cls.get_log_filename(now_date))

        # 如果旧的 handler 存在，则先移除并关闭，防止多文件写入冲突
        if cls._file_handler:
            cls._logger.removeHandler(cls._file_handler)
            cls._file_handler.close()

        cls._file_handler = logging.FileHandler(log_path, encoding='utf-8')
        cls._file_handler.setFormatter(cls._formatter)
        cls._logger.addHandler(cls._file_handler)

        cls._current_log_date = now_date

    @classmethod
    def _check_and_rotate(cls) -> None:
        """
        用途说明：检查当前日期，如果与记录的日期不符，则重新生成 file_handler。
        """
        if cls._logger is None:
            return
        now_date: str = datetime.now().strftime('%Y%m%d')
        if now_date != cls._current_log_date:
            cls._setup_file_handler()

    @classmethod
    def init(cls, level: int = logging.DEBUG, log_dir: Optional[str] = None) -> None:
        """
        用途说明：初始化日志配置，重复调用不会重复添加 handler。
        入参说明：
            level (int): 日志级别。
            log_dir (Optional[str]): 日志文件目录，默认为 <运行目录>/data/log。
        """
        if log_dir:
            cls._log_dir = log_dir
        if cls._logger is None:
            cls._logger = logging.getLogger(cls.LOGGER_NAME)
            cls._logger.setLevel(level)

            # 终端输出初始化
            cls._console_handler = logging.StreamHandler(sys.stdout)
            cls._console_handler.setFormatter(cls._formatter)
            cls._logger.addHandler(cls._console_handler)

            cls._setup_file_handler()
        else:
            cls._logger.setLevel(level)
            if log_dir:
                cls._setup_file_handler()

    @classmethod
    def set_level(cls, debug_enabled: bool) -> None:
        """
        用途说明：动态调整日志显示级别。关闭调试日志时只保留 ERROR。
        入参说明：debug_enabled (bool): 是否启用 DEBUG 及以上所有日志。
        """
        if cls._logger:
            level = logging.DEBUG if debug_enabled else logging.ERROR
            cls._logger.setLevel(level)

    @classmethod
    def info(cls, message: str) -> None:
        """用途说明：打印 INFO 级别日志。"""
        cls._check_and_rotate()
        if cls._logger: cls._logger.info(message)

    @classmethod
    def debug(cls, message: str) -> None:
        """用途说明：打印 DEBUG 级别日志。"""
        cls._check_and_rotate()
        if cls._logger: cls._logger.debug(message)

    @classmethod
    def api(cls, message: str) -> None:
        """用途说明：打印 API 级别日志（自定义等级 25）。"""
        cls._check_and_rotate()
        if cls._logger: cls._logger.log(LOG_LEVEL_API, f"{cls.API_START} - {message}")

    @classmethod
    def error(cls, message: str) -> None:
        """用途说明：打印 ERROR 级别日志。"""
        cls._check_and_rotate()
        if cls._logger: cls._logger.error(message)

    @classmethod
    def exception(cls, message: str, e: BaseException) -> None:
        """
        用途说明：打印 ERROR 级别日志，并附带原始异常的完整堆栈。
        入参说明：
            message (str): 日志描述。
            e (BaseException): 原始异常对象。
        """
        stack: str = "".join(traceback.format_exception(type(e), e, e.__traceback__))
        cls.error(f"{message}: {e}\n{stack}")
