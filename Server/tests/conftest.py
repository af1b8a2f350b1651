"""
Shared fixtures for UploadFiles Server tests
"""

import sys
from pathlib import Path

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from blob_bridge import BlobStore
from exceptions import UploadFilesBlobError
from models.infrastructure import BlobObject
from server_config import ServerConfig


WRITE_TOKEN = "write-secret"
READ_TOKEN = "read-secret"
WRITE_HEADERS = {"Authorization": f"Bearer {WRITE_TOKEN}"}
READ_HEADERS = {"Authorization": f"Bearer {READ_TOKEN}"}


class FakeBlobStore(BlobStore):
    """In-memory blob store keyed by URL"""

    def __init__(self):
        self.blobs = {}
        self.deleted = []
        self.fail_delete = False
        self.fail_fetch = set()

    def Add(self, pathname: str, data: bytes) -> str:
        url = f"https://store.public.blob.vercel-storage.com/{pathname}"
        self.blobs[url] = (pathname, data)
        return url

    def List(self):
        return [
            BlobObject(url=url, pathname=pathname, size=len(data))
            for url, (pathname, data) in self.blobs.items()
        ]

    def Fetch(self, url):
        if url in self.fail_fetch or url not in self.blobs:
            raise UploadFilesBlobError(f"Download failed: {url}")
        return self.blobs[url][1]

    def Delete(self, url):
        if self.fail_delete:
            raise UploadFilesBlobError("Blob store returned status 500")
        self.blobs.pop(url, None)
        self.deleted.append(url)


def WriteFile(path: Path, content: bytes = b"data") -> Path:
    """Create a file and its parent directories"""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    return path


@pytest.fixture
def uploads_root(tmp_path):
    root = tmp_path / "uploads"
    root.mkdir()
    return root


@pytest.fixture
def config(uploads_root, tmp_path):
    return ServerConfig(
        uploads_root=str(uploads_root),
        write_token=WRITE_TOKEN,
        read_token=READ_TOKEN,
        username="admin",
        password="hunter2",
        log_dir=str(tmp_path / "logs")
    )


@pytest.fixture
def blob_store():
    return FakeBlobStore()


@pytest.fixture
def client(config, blob_store):
    from fastapi.testclient import TestClient
    from server import CreateApp

    app = CreateApp(config)
    app.state.blob_store = blob_store
    with TestClient(app) as test_client:
        yield test_client
