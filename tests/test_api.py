"""
Tests for the HTTP API.
"""
import pytest
from fastapi.testclient import TestClient

from ustarscan.modules.api import create_app
from ustarscan.modules.config import ARCHIVE_ENV_VAR, ScanSettings

from tests.conftest import A_TEXT, B_TEXT, BIG_DATA, SAMPLE_MEMBERS, build_archive


@pytest.fixture
def client(sample_tar_path):
    return TestClient(create_app(str(sample_tar_path)))


class TestApi:
    """Routes over one archive"""

    def test_check(self, client):
        resp = client.get("/check")
        assert resp.status_code == 200
        assert resp.json() == {"valid": True, "result": len(SAMPLE_MEMBERS)}

    def test_check_invalid(self, tmp_path, sample_tar):
        data = bytearray(sample_tar.getvalue())
        data[257] = ord("X")
        path = tmp_path / "bad.tar"
        path.write_bytes(bytes(data))

        resp = TestClient(create_app(str(path))).get("/check")
        assert resp.json() == {"valid": False, "result": -1}

    def test_exists(self, client):
        assert client.get("/exists", params={"path": "docs/"}).json()["exists"] is True
        assert client.get("/exists", params={"path": "docs"}).json()["exists"] is False

    def test_stat(self, client):
        resp = client.get("/stat", params={"path": "link_a"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["is_symlink"] is True
        assert body["is_file"] is False
        assert body["linkname"] == "docs/a.txt"
        assert body["type"] == "symlink"

    def test_stat_missing(self, client):
        assert client.get("/stat", params={"path": "nope"}).status_code == 404

    def test_list(self, client):
        resp = client.get("/list", params={"path": "docs"})
        assert resp.status_code == 200
        assert resp.json()["entries"] == ["a.txt", "b.txt", "sub/"]

    def test_list_capacity(self, client):
        body = client.get("/list", params={"path": "docs_link", "capacity": 1}).json()
        assert body["entries"] == ["a.txt"]
        assert body["truncated"] is True

    def test_list_missing(self, client):
        assert client.get("/list", params={"path": "docs/a.txt"}).status_code == 404

    def test_list_loop(self, client):
        assert client.get("/list", params={"path": "loop1"}).status_code == 508

    def test_read_window(self, client):
        resp = client.get("/read", params={"path": "docs/b.txt", "offset": 100, "length": 50})
        assert resp.status_code == 200
        assert resp.content == B_TEXT[100:150]
        assert resp.headers["X-Remaining"] == str(len(B_TEXT) - 150)

    def test_read_offset_out_of_range(self, client):
        resp = client.get("/read", params={"path": "docs/a.txt", "offset": len(A_TEXT) + 1})
        assert resp.status_code == 416

    def test_read_directory(self, client):
        assert client.get("/read", params={"path": "docs/"}).status_code == 404

    def test_carve(self, client):
        resp = client.get("/carve", params={"path": "link_a"})
        assert resp.status_code == 200
        assert resp.content == A_TEXT
        assert resp.headers["Content-Disposition"] == 'attachment; filename="link_a"'

    def test_carve_as_text(self, client):
        resp = client.get("/carve", params={"path": "docs/a.txt", "as_text": True})
        assert resp.headers["Content-Disposition"].startswith("inline")
        assert resp.text == A_TEXT.decode()

    def test_carve_follows_chain(self, client):
        assert client.get("/carve", params={"path": "chain"}).content == A_TEXT

    def test_carve_with_fewer_hops(self, sample_tar_path):
        client = TestClient(create_app(str(sample_tar_path), ScanSettings(max_symlink_hops=1)))
        assert client.get("/carve", params={"path": "chain"}).status_code == 508

    def test_carve_truncated_payload(self, tmp_path):
        data = build_archive([("file", "big.bin", BIG_DATA)]).getvalue()
        path = tmp_path / "cut.tar"
        path.write_bytes(data[:512 + 700])
        client = TestClient(create_app(str(path)))
        resp = client.get("/carve", params={"path": "big.bin"})
        assert resp.status_code == 500
        assert "Truncated payload" in resp.json()["detail"]


class TestApiConfiguration:
    """Archive selection through the environment"""

    def test_archive_from_environment(self, monkeypatch, sample_tar_path):
        monkeypatch.setenv(ARCHIVE_ENV_VAR, str(sample_tar_path))
        client = TestClient(create_app())
        assert client.get("/check").json()["valid"] is True

    def test_no_archive_configured(self, monkeypatch):
        monkeypatch.delenv(ARCHIVE_ENV_VAR, raising=False)
        client = TestClient(create_app())
        assert client.get("/check").status_code == 500
