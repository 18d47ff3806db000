import copy
import json
import os
import threading
from dataclasses import asdict, fields
from typing import Any, Dict, Optional

from video_manager.common.exceptions import ConfigurationError, SettingValidationError
from video_manager.common.log_utils import LogUtils
from video_manager.common.utils import Utils
from video_manager.model.scan_configuration import ScanConfiguration, SortOrder
from video_manager.setting.setting_models import AppConfig


class SettingService:
    """
    用途：配置服务类，负责管理系统配置的加载、保存、更新，并为每个请求生成不可变的扫描配置快照。
    """

    # 内部映射：JSON 键名 (大写) -> AppConfig 属性名 (小写)
    _SECTION_MAPPING = {
        "APP": "app",
        "VIDEO_LIBRARY": "video_library",
        "THUMBNAIL": "thumbnail",
        "SYSTEM": "system"
    }

    # 枚举类配置项的取值范围
    _ENUM_CONSTRAINTS = {
        ("app", "language"): ("ja", "en"),
        ("app", "theme"): ("light", "dark", "system"),
        ("video_library", "file_sort_order"): ("newest", "name"),
    }

    # 数值类配置项的取值范围 (最小值, 最大值)
    _RANGE_CONSTRAINTS = {
        ("thumbnail", "width"): (16, 4096),
        ("thumbnail", "height"): (16, 4096),
        ("thumbnail", "seek_ratio"): (0.0, 1.0),
        ("thumbnail", "cache_seconds"): (0, 31536000),
    }

    # 作为单层目录名或文件名片段使用的配置项
    _NAME_CONSTRAINTS = {
        ("video_library", "restricted_subfolder_name"),
        ("video_library", "exclusion_marker"),
    }

    ENV_VIDEO_DIR: str = "VIDEO_DIR"

    def __init__(self, config_path: Optional[str] = None) -> None:
        """
        用途：初始化配置服务，使用 AppConfig 数据类管理配置并尝试从本地加载。
        入参说明：config_path (Optional[str]): 配置文件路径，默认为 <运行目录>/setting.json。
        """
        self._config: AppConfig = AppConfig()
        self._lock = threading.Lock()
        self.config_path: str = config_path or os.path.join(Utils.get_runtime_path(), 'setting.json')
        self._load_config()

    def get_config(self) -> AppConfig:
        """
        用途：获取当前的配置对象。
        返回值：AppConfig 实例。
        """
        return self._config

    def _load_config(self) -> None:
        """
        用途：从本地 JSON 文件中加载配置信息。文件不存在时使用默认配置。
        """
        if not os.path.exists(self.config_path):
            LogUtils.info(f"未检测到配置文件，使用默认配置：{self.config_path}")
            return

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                loaded_json = json.load(f)
            self._parse_and_merge_config(loaded_json)
        except (OSError, ValueError) as e:
            LogUtils.error(f"加载配置文件时发生错误，使用默认配置: {e}")

    def _parse_and_merge_config(self, loaded_json: Dict[str, Any]) -> None:
        """
        用途：将从 JSON 解析出的字典数据合并到 AppConfig 数据类中，未知字段忽略。
        入参：loaded_json: 从文件读取的配置字典。
        """
        if not isinstance(loaded_json, dict):
            return

        for json_key, attr_name in self._SECTION_MAPPING.items():
            section_data = loaded_json.get(json_key)
            if isinstance(section_data, dict):
                target_obj = getattr(self._config, attr_name)
                field_types = {f.name: f.type for f in fields(target_obj)}
                for key, value in section_data.items():
                    if key not in field_types:
                        continue
                    try:
                        self._validate_value(attr_name, key, field_types[key], value)
                    except SettingValidationError as e:
                        # 非法值不覆盖默认值
                        LogUtils.error(f"配置文件中的值无效，使用默认值: {e.message}")
                        continue
                    setattr(target_obj, key, value)

    def save_config(self) -> bool:
        """
        用途：将当前内存中的配置持久化到磁盘，保持大写键名结构。
        返回值：是否保存成功。
        """
        config_to_save = {}
        for json_key, attr_name in self._SECTION_MAPPING.items():
            section_obj = getattr(self._config, attr_name)
            config_to_save[json_key] = asdict(section_obj)

        try:
            with open(self.config_path, 'w', encoding='utf-8') as f:
                json.dump(config_to_save, f, indent=4, ensure_ascii=False)
            return True
        except OSError as e:
            LogUtils.error(f"保存配置文件时发生错误: {e}")
            return False

    def _validate_value(self, section_name: str, field_name: str, field_type: type, value: Any) -> None:
        """
        用途：校验单个配置项的类型与取值范围。
        入参：section_name / field_name: 配置项位置；field_type: 数据类字段声明的类型；value: 待校验的值。
        """
        key = f"{section_name}.{field_name}"
        if field_type is bool:
            if not isinstance(value, bool):
                raise SettingValidationError(f"{key} 必须为布尔值")
        elif field_type is int:
            if isinstance(value, bool) or not isinstance(value, int):
                raise SettingValidationError(f"{key} 必须为整数")
        elif field_type is float:
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise SettingValidationError(f"{key} 必须为数字")
        elif field_type is str:
            if not isinstance(value, str):
                raise SettingValidationError(f"{key} 必须为字符串")

        allowed = self._ENUM_CONSTRAINTS.get((section_name, field_name))
        if allowed and value not in allowed:
            raise SettingValidationError(f"{key} 必须为以下值之一: {', '.join(allowed)}")

        bounds = self._RANGE_CONSTRAINTS.get((section_name, field_name))
        if bounds and not (bounds[0] <= value <= bounds[1]):
            raise SettingValidationError(f"{key} 必须在 {bounds[0]} 到 {bounds[1]} 之间")

        if (section_name, field_name) in self._NAME_CONSTRAINTS:
            has_separator = "/" in value or os.sep in value or (os.altsep and os.altsep in value)
            if not value.strip() or value in (".", "..") or has_separator:
                raise SettingValidationError(f"{key} 不能为空，也不能包含路径分隔符或为 . / ..")

    def update_settings(self, data: Dict[str, Any]) -> bool:
        """
        用途：批量更新配置项并持久化。先在副本上校验，全部合法后才替换当前配置。
        入参：data: 包含更新项的字典，其一级键名应与 AppConfig 字段名一致（如 'video_library'）。
        返回值：是否保存成功。校验失败时抛出 SettingValidationError。
        """
        with self._lock:
            new_config = copy.deepcopy(self._config)
            for section_field in fields(AppConfig):
                section_name = section_field.name
                section_data = data.get(section_name)
                if not isinstance(section_data, dict):
                    continue

                target_obj = getattr(new_config, section_name)
                field_types = {f.name: f.type for f in fields(target_obj)}
                for key, value in section_data.items():
                    if key not in field_types:
                        continue
                    self._validate_value(section_name, key, field_types[key], value)
                    setattr(target_obj, key, value)

            self._config = new_config
            return self.save_config()

    def get_video_dir(self) -> str:
        """
        用途：获取视频根目录，配置为空时读取环境变量 VIDEO_DIR。
        返回值：根目录字符串，未设置时为空字符串。
        """
        return self._config.video_library.video_dir or os.environ.get(self.ENV_VIDEO_DIR, "")

    def get_delete_dir(self) -> str:
        """
        用途：获取软删除目标目录。
        """
        delete_dir = self._config.video_library.delete_dir
        if delete_dir:
            return delete_dir
        return os.path.join(Utils.get_runtime_path(), "data", "delete")

    def get_scan_config(self, sort_override: Optional[str] = None) -> ScanConfiguration:
        """
        用途：生成当前请求使用的扫描配置快照。
        入参：sort_override: 请求参数中指定的排序方式，无法识别时使用配置值。
        返回值：ScanConfiguration 快照。根目录未设置时抛出 ConfigurationError。
        """
        video_dir = self.get_video_dir()
        if not video_dir:
            raise ConfigurationError("视频目录未设置。")

        library = self._config.video_library
        sort_order = SortOrder.from_value(library.file_sort_order, default=SortOrder.CREATED_DESC)
        if sort_override:
            sort_order = SortOrder.from_value(sort_override, default=sort_order)

        return ScanConfiguration(
            root_directory=video_dir,
            restrict_to_subfolder=bool(library.restrict_to_subfolder),
            sort_order=sort_order,
            restricted_subfolder_name=library.restricted_subfolder_name,
            exclusion_marker=library.exclusion_marker
        )

# 实例化单例
settingService = SettingService()
