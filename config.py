class GlobalConfig:
    """
    用途说明：系统全局静态配置类，统一管理服务端口及版本号。
    """
    # 系统统一运行端口 (前后端共用)
    SYSTEM_PORT: int = 5000
    # 后端版本号
    APP_VERSION: str = "1.0.0"
