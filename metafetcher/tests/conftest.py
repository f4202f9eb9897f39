from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, List, Union

import pytest
import requests

from metafetcher.config import Settings


class FakeResponse:
    """Stand-in for ``requests.Response`` used with ``stream=True``."""

    def __init__(self, status_code: int = 200, body: bytes = b"", read_error: Exception | None = None):
        self.status_code = status_code
        self._body = body
        self._read_error = read_error
        self.closed = False

    @property
    def content(self) -> bytes:
        if self._read_error is not None:
            raise self._read_error
        return self._body

    def close(self) -> None:
        self.closed = True

    def __enter__(self) -> "FakeResponse":
        return self

    def __exit__(self, *args) -> None:
        self.close()


Route = Union[FakeResponse, Exception]


class FakeSession:
    """Serve canned responses keyed by URL and record every request."""

    def __init__(self, routes: Dict[str, Route]):
        self.routes = routes
        self.headers: Dict[str, str] = {}
        self.calls: List[dict] = []
        self.closed = False

    def get(self, url: str, **kwargs) -> FakeResponse:
        self.calls.append({"url": url, **kwargs})
        route = self.routes.get(url)
        if route is None:
            return FakeResponse(status_code=404)
        if isinstance(route, Exception):
            raise route
        return route

    def close(self) -> None:
        self.closed = True


class SleepRecorder:
    def __init__(self) -> None:
        self.calls: List[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


META_URL = "https://cinemeta.test/meta/movie/{identifier}.json"


@pytest.fixture
def meta_url() -> str:
    return META_URL


@pytest.fixture
def fake_session() -> Callable[[Dict[str, Route]], FakeSession]:
    return FakeSession


@pytest.fixture
def fake_response() -> Callable[..., FakeResponse]:
    return FakeResponse


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def connection_error() -> Exception:
    return requests.ConnectionError("connection refused")


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    root = tmp_path / "data"
    (root / "metas").mkdir(parents=True)
    return root


@pytest.fixture
def settings(data_dir: Path) -> Settings:
    return Settings(
        data_dir=data_dir,
        meta_url_template=META_URL,
        request_delay=0.1,
        log_to_file=False,
    )


def write_csv(path: Path, rows: List[List[str]]) -> Path:
    path.write_text("\n".join(",".join(row) for row in rows) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def csv_writer() -> Callable[[Path, List[List[str]]], Path]:
    return write_csv
