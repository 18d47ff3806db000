import json

from conftest import write_file
from config import GlobalConfig
from video_manager.common.log_utils import LogUtils
from video_manager.video.file_indexer import FileIndexer


def test_version(client):
    resp = client.get("/api/system/version")
    assert resp.status_code == 200
    assert resp.get_json()["data"]["version"] == GlobalConfig.APP_VERSION


def test_check_dir_reports_first_level_entries(client, video_root):
    write_file(video_root / "b.mp4", 1)
    write_file(video_root / "a.mp4", 1)
    (video_root / "sub").mkdir()

    data = client.get("/api/system/check_dir").get_json()["data"]

    assert data["videoDir"] == str(video_root)
    assert data["dirExists"] is True
    assert data["fileCount"] == 3
    assert data["firstFewFiles"] == ["a.mp4", "b.mp4", "sub"]


def test_check_dir_without_root_is_500(client, app_config):
    app_config.video_library.video_dir = ""
    resp = client.get("/api/system/check_dir")
    assert resp.status_code == 500
    assert resp.get_json() == {"error": "视频目录未设置。"}


def test_logs_filter_by_keyword(client):
    LogUtils.info("keyword-marker-12345 appears here")

    resp = client.get("/api/system/logs?keyword=keyword-marker-12345&exclude_api=true")

    logs = resp.get_json()["data"]["logs"]
    assert logs
    assert all("keyword-marker-12345" in line for line in logs)


def test_log_files_listing(client):
    files = client.get("/api/system/logs/files").get_json()["data"]["files"]
    assert files
    assert all(f.endswith(".log") for f in files)


def test_setting_get_returns_sections(client):
    data = client.get("/api/setting/get").get_json()["data"]
    assert set(data) == {"app", "video_library", "thumbnail", "system"}
    assert data["video_library"]["restricted_subfolder_name"] == "qqq"


def test_setting_update_persists(client, app_config, tmp_path):
    resp = client.post("/api/setting/update", json={"video_library": {"file_sort_order": "name"}})

    assert resp.status_code == 200
    assert resp.get_json()["success"] is True
    saved = json.loads((tmp_path / "setting.json").read_text(encoding="utf-8"))
    assert saved["VIDEO_LIBRARY"]["file_sort_order"] == "name"


def test_setting_update_rejects_invalid_values(client):
    resp = client.post("/api/setting/update", json={"video_library": {"file_sort_order": "size"}})
    assert resp.status_code == 400
    assert "error" in resp.get_json()

    assert client.post("/api/setting/update", data="garbage").status_code == 400


def test_setting_update_rejects_traversal_in_subfolder_name(client, video_root):
    write_file(video_root / "clip.mp4", 10)

    resp = client.post("/api/setting/update", json={"video_library": {"restricted_subfolder_name": "../outside"}})
    assert resp.status_code == 400

    client.post("/api/videos/move", json={"videoId": FileIndexer.compute_file_id(str(video_root / "clip.mp4")),
                                          "fileName": "clip.mp4"})
    assert (video_root / "qqq" / "clip.mp4").exists()
    assert not (video_root.parent / "outside").exists()


def test_check_dir_reports_unreadable_root(client, video_root, monkeypatch):
    def denied(path):
        raise PermissionError(13, "Permission denied", path)

    monkeypatch.setattr("video_manager.system.system_service.os.listdir", denied)

    resp = client.get("/api/system/check_dir")

    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["dirExists"] is True
    assert data["fileCount"] == 0
    assert data["firstFewFiles"] == []
    assert "Permission denied" in data["error"]
