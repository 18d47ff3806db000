import logging

import pytest

from video_manager.common.log_utils import LogUtils
from video_manager.setting.setting_models import AppConfig
from video_manager.setting.setting_service import settingService
from video_manager.video.thumbnail_service import ThumbnailService


@pytest.fixture(scope="session", autouse=True)
def init_logging(tmp_path_factory):
    """Initialises LogUtils once, writing log files into a temporary directory."""
    LogUtils.init(level=logging.DEBUG, log_dir=str(tmp_path_factory.mktemp("log")))


@pytest.fixture
def video_root(tmp_path):
    root = tmp_path / "videos"
    root.mkdir()
    return root


@pytest.fixture
def app_config(monkeypatch, tmp_path, video_root):
    """Replaces the global settings with a fresh config pointing at a temporary video root."""
    config = AppConfig()
    config.video_library.video_dir = str(video_root)
    config.video_library.delete_dir = str(tmp_path / "deleted")
    monkeypatch.setattr(settingService, "_config", config)
    monkeypatch.setattr(settingService, "config_path", str(tmp_path / "setting.json"))
    monkeypatch.setattr(ThumbnailService, "_THUMBNAIL_DIR", str(tmp_path / "thumbnails"))
    monkeypatch.delenv("VIDEO_DIR", raising=False)
    return config


@pytest.fixture
def client(app_config):
    from video_manager.main import app
    app.config["TESTING"] = True
    with app.test_client() as c:
        yield c


def write_file(path, size):
    """Creates parent directories and writes `size` bytes of a repeating pattern."""
    path.parent.mkdir(parents=True, exist_ok=True)
    pattern = bytes(range(256))
    data = (pattern * (size // 256 + 1))[:size]
    path.write_bytes(data)
    return data
