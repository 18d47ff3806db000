from dataclasses import dataclass, field

@dataclass
class AppSettings:
    """
    用途：应用基础显示配置数据类
    """
    title: str = "Video File Manager"
    language: str = "ja"
    theme: str = "system"

@dataclass
class VideoLibrarySettings:
    """
    用途：视频库扫描及文件管理相关配置数据类
    """
    video_dir: str = ""                     # 视频根目录，为空时读取环境变量 VIDEO_DIR
    restrict_to_subfolder: bool = False     # 是否只显示保留子目录中的视频
    file_sort_order: str = "newest"         # newest / name
    restricted_subfolder_name: str = "qqq"
    exclusion_marker: str = "ggg"           # 受限模式下文件名包含该标记的视频不显示
    delete_dir: str = ""                    # 软删除目标目录，为空时使用 <运行目录>/data/delete
    collation_locale: str = ""              # 按名称排序使用的 locale，为空时使用系统默认

@dataclass
class ThumbnailSettings:
    """
    用途：缩略图生成相关配置数据类
    """
    width: int = 320
    height: int = 240
    seek_ratio: float = 0.1      # 截取视频时长 10% 处的画面
    cache_seconds: int = 3600

@dataclass
class SystemSettings:
    """
    用途：系统运行相关配置数据类
    """
    debug_log_enabled: bool = True

@dataclass
class AppConfig:
    """
    用途：系统全局配置汇总数据类
    """
    app: AppSettings = field(default_factory=AppSettings)
    video_library: VideoLibrarySettings = field(default_factory=VideoLibrarySettings)
    thumbnail: ThumbnailSettings = field(default_factory=ThumbnailSettings)
    system: SystemSettings = field(default_factory=SystemSettings)
