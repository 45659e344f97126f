from http import HTTPStatus

import pytest

from webserv.http import html
from webserv.http.common import Method
from webserv.resource import (
    MultipartResource,
    Resource,
    ResourceIOError,
    make_directory_list,
    make_error_page,
    make_redirection,
)
from webserv.route import Route


def read_all(resource, size=7):
    chunks = []
    while chunk := resource.read(size):
        chunks.append(chunk)
    return b"".join(chunks)


@pytest.fixture
def route(tmp_path):
    return Route("/").redirect(tmp_path)


def test_make_error_page_has_length_and_body():
    body = html.error_page(404)
    page = make_error_page(404)
    assert page == f"Content-Length: {len(body)}\r\n\r\n{body}"


def test_make_directory_list(tmp_path):
    (tmp_path / "a.txt").write_text("x")
    body = html.directory_list(tmp_path)
    assert make_directory_list(tmp_path) == f"Content-Length: {len(body)}\r\n\r\n{body}"


def test_make_redirection_with_query_and_fragment():
    assert make_redirection("/new?x=1#top") == "Location: /new?x=1#top\r\n\r\n"
    assert make_redirection("/new") == "Location: /new\r\n\r\n"


def test_get_file(tmp_path, route):
    (tmp_path / "hello.txt").write_bytes(b"hello")
    with Resource() as res:
        assert res.open(Method.GET, route.follow("/hello.txt")) == HTTPStatus.OK
        data = read_all(res)
    assert data == (
        b"Connection: keep-alive\r\nContent-Type: text/plain\r\n"
        b"Content-Length: 5\r\n\r\nhello"
    )


def test_get_missing_file(route):
    res = Resource()
    assert res.open(Method.GET, route.follow("/missing.txt")) == HTTPStatus.NOT_FOUND


def test_get_directory_forbidden_by_default(route):
    res = Resource()
    assert res.open(Method.GET, route.follow("/")) == HTTPStatus.FORBIDDEN


def test_get_directory_listing(tmp_path, route):
    (tmp_path / "a.txt").write_text("x")
    route.list_directory()
    res = Resource()
    assert res.open(Method.GET, route.follow("/")) == HTTPStatus.OK
    assert read_all(res).decode() == make_directory_list(tmp_path)


def test_get_directory_default_file(tmp_path, route):
    (tmp_path / "index.html").write_bytes(b"<p>hi</p>")
    route.set_directory_file("index.html")
    res = Resource()
    assert res.open(Method.GET, route.follow("/")) == HTTPStatus.OK
    data = read_all(res)
    assert b"Content-Type: text/html\r\n" in data
    assert data.endswith(b"\r\n\r\n<p>hi</p>")


def test_post_writes_file(tmp_path, route):
    res = Resource()
    assert res.open(Method.POST, route.follow("/upload.txt")) == HTTPStatus.ACCEPTED
    assert res.write(b"data") == 4
    head = read_all(res)
    res.close()
    assert (tmp_path / "upload.txt").read_bytes() == b"data"
    assert head.startswith(b"Connection: keep-alive\r\nContent-Type: text/plain\r\n")
    assert head.endswith(b"Location: /upload.txt\r\n\r\n/upload.txt")


def test_post_into_missing_directory(route):
    res = Resource()
    status = res.open(Method.POST, route.follow("/nodir/file.txt"))
    assert status == HTTPStatus.INTERNAL_SERVER_ERROR


def test_delete(tmp_path, route):
    target = tmp_path / "gone.txt"
    target.write_bytes(b"x")
    res = Resource()
    assert res.open(Method.DELETE, route.follow("/gone.txt")) == HTTPStatus.NO_CONTENT
    assert not target.exists()
    assert read_all(res) == b"Connection: keep-alive\r\n\r\n"


def test_delete_missing(route):
    res = Resource()
    assert res.open(Method.DELETE, route.follow("/nope")) == HTTPStatus.NOT_FOUND


def test_other_method_not_implemented(route):
    res = Resource()
    assert res.open(Method.PUT, route.follow("/x")) == HTTPStatus.NOT_IMPLEMENTED


def test_open_error_builtin():
    res = Resource()
    res.open_error(404)
    assert read_all(res) == make_error_page(404).encode()


def test_open_error_missing_page_falls_back(tmp_path):
    res = Resource()
    res.open_error(500, tmp_path / "absent.html")
    assert read_all(res) == make_error_page(500).encode()


def test_open_error_custom_page(tmp_path):
    page = tmp_path / "404.html"
    page.write_bytes(b"custom")
    res = Resource()
    res.open_error(404, page)
    assert read_all(res).endswith(b"\r\n\r\ncustom")


def test_open_redirection():
    res = Resource()
    res.open_redirection("/elsewhere")
    assert read_all(res) == b"Location: /elsewhere\r\n\r\n"


def test_write_without_output_raises():
    with pytest.raises(ResourceIOError):
        Resource().write(b"x")


def test_close_in_discards_head():
    res = Resource()
    res.open_redirection("/elsewhere")
    res.close_in()
    assert res.read(100) == b""


MULTIPART = (
    b"--XyZ\r\n"
    b'Content-Disposition: form-data; name="f"; filename="a.txt"\r\n'
    b"\r\n"
    b"hello\r\n"
    b"--XyZ--"
)


@pytest.fixture
def upload_route(tmp_path):
    (tmp_path / "up").mkdir()
    return Route("/").redirect(tmp_path / "up")


def test_multipart_upload(tmp_path, upload_route):
    res = MultipartResource()
    assert res.open(Method.POST, upload_route.follow("/"), "XyZ") == HTTPStatus.CREATED
    assert res.write(MULTIPART) == len(MULTIPART)
    assert (tmp_path / "up" / "a.txt").read_bytes() == b"hello"
    head = read_all(res)
    assert head.startswith(b"Connection: keep-alive\r\nContent-Type: text/plain\r\n")


def test_multipart_upload_in_pieces(tmp_path, upload_route):
    res = MultipartResource()
    assert res.open(Method.POST, upload_route.follow("/"), "XyZ") == HTTPStatus.CREATED
    assert res.write(MULTIPART[:30]) == 30
    assert not (tmp_path / "up" / "a.txt").exists()
    assert res.write(MULTIPART[30:]) == len(MULTIPART) - 30
    assert (tmp_path / "up" / "a.txt").read_bytes() == b"hello"


def test_multipart_without_filename_is_skipped(tmp_path, upload_route):
    body = (
        b"--XyZ\r\n"
        b'Content-Disposition: form-data; name="f"\r\n'
        b"\r\n"
        b"hello\r\n"
        b"--XyZ--"
    )
    res = MultipartResource()
    res.open(Method.POST, upload_route.follow("/"), "XyZ")
    assert res.write(body) == len(body)
    assert list((tmp_path / "up").iterdir()) == []


def test_multipart_bad_boundary(upload_route):
    res = MultipartResource()
    res.open(Method.POST, upload_route.follow("/"), "XyZ")
    with pytest.raises(ResourceIOError):
        res.write(b"--Other\r\n")


def test_multipart_requires_post(upload_route):
    res = MultipartResource()
    assert res.open(Method.GET, upload_route.follow("/"), "XyZ") == HTTPStatus.BAD_REQUEST


def test_multipart_target_not_directory(tmp_path):
    route = Route("/").redirect(tmp_path / "missing")
    res = MultipartResource()
    status = res.open(Method.POST, route.follow("/"), "XyZ")
    assert status == HTTPStatus.INTERNAL_SERVER_ERROR


def test_multipart_close_empties_head(upload_route):
    res = MultipartResource()
    res.open(Method.POST, upload_route.follow("/"), "XyZ")
    res.close()
    assert res.read(100) == b""