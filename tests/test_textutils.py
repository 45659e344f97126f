import io

import pytest

from webserv.textutils import IncompleteLineError, getline, getline_core


def test_getline_strips_delimiter():
    stream = io.BytesIO(b"abc\r\ndef")
    assert getline(stream, b"\r\n") == b"abc"


def test_getline_incomplete_restores_position():
    stream = io.BytesIO(b"abc\r\ndef")
    getline(stream, b"\r\n")
    before = stream.tell()
    with pytest.raises(IncompleteLineError):
        getline(stream, b"\r\n")
    assert stream.tell() == before
    assert stream.read() == b"def"


def test_getline_delimiter_at_end_of_stream():
    stream = io.BytesIO(b"x\r\n")
    assert getline(stream, b"\r\n") == b"x"


def test_getline_empty_line():
    stream = io.BytesIO(b"\r\nrest\r\n")
    assert getline(stream, b"\r\n") == b""
    assert getline(stream, b"\r\n") == b"rest"


def test_getline_text_stream():
    stream = io.StringIO("one\ntwo\n")
    assert getline(stream, "\n") == "one"
    assert getline(stream, "\n") == "two"


def test_getline_core_reports_incomplete():
    stream = io.BytesIO(b"partial")
    assert getline_core(stream, b"\r\n") == (b"partial", False)


def test_getline_core_multichar_delimiter():
    stream = io.BytesIO(b"body--boundary")
    assert getline_core(stream, b"--boundary") == (b"body", True)