import io
import re
from http import HTTPStatus

import pytest

from webserv.http.common import Method
from webserv.http.message import Request
from webserv.logs import (
    DEFAULT_LEVEL,
    AccessLogger,
    ErrorLogger,
    Level,
    Variable,
    VariableType,
    level_from_string,
    level_to_string,
)

TS = r"\d{4}/\d{2}/\d{2} \d{2}:\d{2}:\d{2}[+-]\d{4}"


def mask_timestamps(text):
    return re.sub(TS, "TS", text)


def test_default_level_is_error():
    assert ErrorLogger(io.StringIO()).level is DEFAULT_LEVEL is Level.ERROR


def test_error_log_filters_lower_levels():
    out = io.StringIO()
    ErrorLogger(out).log(Level.INFO, "ignored")
    assert out.getvalue() == ""


def test_error_log_line_format():
    out = io.StringIO()
    ErrorLogger(out).log(Level.ERROR, "a", 1, 2.5)
    assert mask_timestamps(out.getvalue()) == "[error] [TS] a12.500000\n"


def test_error_log_level_can_be_lowered():
    out = io.StringIO()
    logger = ErrorLogger(out)
    logger.level = Level.DEBUG
    logger.log(Level.DEBUG, "details")
    assert mask_timestamps(out.getvalue()) == "[debug] [TS] details\n"


def test_error_log_defaults_to_stderr(capsys):
    ErrorLogger().log(Level.CRITICAL, "boom")
    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err.startswith("[critical] [")
    assert captured.err.endswith("boom\n")


@pytest.mark.parametrize("level", list(Level))
def test_level_string_round_trip(level):
    assert level_from_string(level_to_string(level)) is level


def test_level_to_string_value():
    assert level_to_string(Level.EMERGENCY) == "emergency"


def test_level_from_unknown_string():
    with pytest.raises(ValueError):
        level_from_string("verbose")


def test_timestamp_update():
    logger = ErrorLogger(io.StringIO())
    logger.timestamp_update()
    assert mask_timestamps(logger.timestamp) == "TS"


def test_attach_file_appends(tmp_path):
    path = tmp_path / "error.log"
    for text in ("first", "second"):
        with ErrorLogger(io.StringIO()) as logger:
            logger.attach_file(str(path))
            logger.log(Level.ALERT, text)
    lines = path.read_text(encoding="utf-8").splitlines()
    assert [line.rsplit(" ", 1)[1] for line in lines] == ["first", "second"]


def test_detach_file_restores_stream(tmp_path):
    out = io.StringIO()
    logger = ErrorLogger(out)
    logger.attach_file(str(tmp_path / "error.log"))
    logger.log(Level.ERROR, "to file")
    logger.detach_file()
    logger.log(Level.ERROR, "to stream")
    assert out.getvalue().endswith("to stream\n")
    assert "to file" not in out.getvalue()


def test_attach_file_failure(tmp_path):
    logger = ErrorLogger(io.StringIO())
    with pytest.raises(RuntimeError, match="could not open log"):
        logger.attach_file(str(tmp_path / "missing" / "error.log"))


def test_access_log_default_format():
    out = io.StringIO()
    request = Request(Method.GET, (1, 1), "/index.html")
    AccessLogger(out).log(request, "localhost", 8080, "127.0.0.1:5000")
    assert mask_timestamps(out.getvalue()) == (
        "[TS] Host: localhost:8080; Client: 127.0.0.1:5000; "
        "Request: GET /index.html\n"
    )


def test_access_log_custom_format_with_status():
    out = io.StringIO()
    logger = AccessLogger(
        out, [Variable(VariableType.STATUS), Variable.literal(" done")]
    )
    request = Request(Method.POST, (1, 1), "/upload")
    logger.log(request, "localhost", 80, "client", HTTPStatus.NOT_FOUND)
    assert out.getvalue() == "404 done\n"


def test_access_log_defaults_to_stdout(capsys):
    request = Request(Method.DELETE, (1, 1), "/gone")
    AccessLogger().log(request, "localhost", 80, "client")
    captured = capsys.readouterr()
    assert captured.out.endswith("Request: DELETE /gone\n")
    assert captured.err == ""