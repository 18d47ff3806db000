import sys
import os

# 确保项目根目录在 sys.path 中
project_root = os.path.dirname(os.path.abspath(__file__))
if project_root not in sys.path:
    sys.path.append(project_root)

from video_manager.main import start_server

if __name__ == "__main__":
    """
    用途说明：项目统一启动入口。
    入参说明：无
    返回值说明：无
    """
    try:
        start_server()
    except KeyboardInterrupt:
        print("\n[系统] 正在退出...")
        sys.exit(0)
