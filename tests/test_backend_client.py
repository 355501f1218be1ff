import pytest
import requests

from config.settings import BackendSettings
from core.client.backend import BackendClient
from core.errors import BackendConnectionError, BackendResponseError, DeleteFailure, UploadFailure
from core.models.domain import UploadItem


class FakeResponse:
    def __init__(self, status_code=200, payload=None, content=b""):
        self.status_code = status_code
        self._payload = payload
        self.content = content
        self.text = "" if payload is None else str(payload)

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError("no JSON body")
        return self._payload


class FakeSession:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def request(self, method, url, **kwargs):
        self.requests.append((method, url, kwargs))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def close(self):
        pass


def _client(*responses):
    session = FakeSession(*responses)
    return BackendClient(BackendSettings(base_url="http://backend.test/"), session=session), session


def test_image_url_encodes_reference():
    client, _ = _client()
    assert client.image_url("photos/summer day.jpg") == "http://backend.test/image/photos%2Fsummer%20day.jpg"


def test_paginated_images():
    client, session = _client(FakeResponse(payload={"images": ["a.jpg", "b.jpg"], "total": 14}))
    page = client.paginated_images(2, 12)

    assert page.images == ("a.jpg", "b.jpg")
    assert page.total == 14
    method, url, kwargs = session.requests[0]
    assert (method, url) == ("GET", "http://backend.test/paginated_images")
    assert kwargs["params"] == {"page": 2, "page_size": 12}
    assert kwargs["timeout"] is None


def test_paginated_images_requires_images_field():
    client, _ = _client(FakeResponse(payload={"total": 3}))
    with pytest.raises(BackendResponseError):
        client.paginated_images(1, 12)


def test_search_accepts_both_payload_shapes_and_rounds():
    client, _ = _client(
        FakeResponse(payload=[{"path": "a.jpg", "similarity": 87.456}]),
        FakeResponse(payload={"results": [{"path": "b.jpg", "similarity": 50}]}),
    )
    assert client.search("dogs")[0].similarity == 87.46
    assert client.search("cats")[0].path == "b.jpg"


def test_list_images_and_storage():
    client, _ = _client(
        FakeResponse(payload={"images": ["a.jpg"]}),
        FakeResponse(payload={"size_bytes": 2048}),
    )
    assert client.list_images() == ("a.jpg",)
    assert client.storage_size().human_readable == "2.0KB"


def test_image_points_payload():
    client, _ = _client(
        FakeResponse(payload=[{"id": 0, "position": [1, 2, 3], "imageData": "data:image/png;base64,AAAA"}])
    )
    (point,) = client.image_points()
    assert point.id == 0
    assert point.position.tolist() == [1.0, 2.0, 3.0]
    assert point.image_ref is None
    assert point.image_data.startswith("data:")


def test_malformed_point_is_a_response_error():
    client, _ = _client(FakeResponse(payload=[{"id": 0, "position": [1, 2]}]))
    with pytest.raises(BackendResponseError):
        client.image_points()


def test_connection_failure_is_translated():
    client, _ = _client(requests.ConnectionError("refused"))
    with pytest.raises(BackendConnectionError):
        client.list_images()


def test_http_error_keeps_status_code():
    client, _ = _client(FakeResponse(status_code=503))
    with pytest.raises(BackendResponseError) as excinfo:
        client.storage_size()
    assert excinfo.value.status_code == 503


def test_invalid_json_is_a_response_error():
    client, _ = _client(FakeResponse(payload=None))
    with pytest.raises(BackendResponseError):
        client.list_images()


def test_upload_sends_one_files_field_per_item(tmp_path):
    first = tmp_path / "a.png"
    second = tmp_path / "b.png"
    first.write_bytes(b"one")
    second.write_bytes(b"two")
    client, session = _client(FakeResponse(status_code=200, payload={"status": "ok"}))

    client.upload([UploadItem.staged(first), UploadItem.staged(second)])

    method, url, kwargs = session.requests[0]
    assert (method, url) == ("POST", "http://backend.test/upload")
    assert [(field, name) for field, (name, _handle) in kwargs["files"]] == [("files", "a.png"), ("files", "b.png")]


def test_upload_rejection_fails_batch(tmp_path):
    path = tmp_path / "a.png"
    path.write_bytes(b"one")
    client, _ = _client(FakeResponse(status_code=500, payload={"error": "disk full"}))
    with pytest.raises(UploadFailure):
        client.upload([UploadItem.staged(path)])


def test_upload_of_missing_file_fails(tmp_path):
    client, session = _client()
    with pytest.raises(UploadFailure):
        client.upload([UploadItem.staged(tmp_path / "gone.png")])
    assert session.requests == []


def test_delete_all_failures():
    client, session = _client(FakeResponse(status_code=200), requests.Timeout("slow"), FakeResponse(status_code=500))
    client.delete_all()
    assert session.requests[0][:2] == ("POST", "http://backend.test/delete_all")
    with pytest.raises(DeleteFailure):
        client.delete_all()
    with pytest.raises(DeleteFailure):
        client.delete_all()
