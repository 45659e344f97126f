# webserv

The pieces of a small HTTP/1.1 server as plain Python modules, to be used on
their own or put together into a server loop of your own.

## What is in the package

- `webserv.http.parse` – incremental parsers working on binary streams:
  `RequestParser` for the request line and headers (its `parse` returns a
  `ParserState`, and the parsed `Request` is kept in `parser.request`),
  `HeaderParser` for CRLF header blocks and LF-terminated CGI output headers,
  and `MultipartParser`, which yields one `BodyPart` at a time from a
  `multipart/*` body. `is_multipart` returns a request's multipart boundary,
  or `None` for other requests.
- `webserv.http.headers` – `Header` and `Headers`, a header map whose values
  are lists of distinct comma-separated items.
- `webserv.http.message` – `Request` and `Response`. `Message.expects_body`
  describes the body from `Content-Length` and `Transfer-Encoding: chunked`;
  `Response.serialize` gives the status line and headers.
- `webserv.http.common` – `Method`, versions, status codes and their
  descriptions, `Body`/`BodyType`, and small text helpers.
- `webserv.http.html` – built-in error pages and directory listings.
- `webserv.http.errors` – `ParseError` and its subclasses `MethodError`,
  `VersionError` and `HeaderError`.
- `webserv.route` – a tree of `Route` objects mapping request paths onto
  filesystem paths, with per-route allowed methods, directory handling
  (forbid, list, or a default file) and CGI extensions, inherited from the
  parent route unless set. `Route.follow` yields a `Location`.
- `webserv.resource` – `Resource`, which serves GET, POST and DELETE against
  a `Location`, redirections and error pages; `MultipartResource`, which
  stores the files of a multipart upload in a directory.
- `webserv.cgi` – `CGI`, which runs a script in its own directory as a child
  process connected through a socket pair registered with a `Poller`.
- `webserv.network` – `Poller`, `Event`, `EventType` and `Address` for
  readiness-based I/O.
- `webserv.logs` – `AccessLogger` with a format made of `Variable`s,
  `ErrorLogger` with severity `Level`s, and the shared instances `alog` and
  `elog`.
- `webserv.mime` – `get_type` maps a file name to its content type.
- `webserv.buffer` – `Buffer`, a fixed-capacity byte buffer.
- `webserv.textutils` – `getline`, which reads a delimited line from a
  seekable stream and raises `IncompleteLineError` if it is not complete.

## Examples

Parsing a request as bytes arrive:

```python
import io

from webserv.http.parse import ParserState, RequestParser

parser = RequestParser()
stream = io.BytesIO(b"GET /index.html HTTP/1.1\r\nHost: localhost\r\n\r\n")
if parser.parse(stream) is ParserState.DONE:
    request = parser.request
    print(request.method, request.uri, request.headers.at("Host").values)
```

Describing where requests go:

```python
from webserv.http.common import Method
from webserv.route import Route

root = Route("/")
root.allow_method(Method.GET)
site = root.extend("/site")
site.redirect("www/default")
site.set_directory_file("index.html")

location = root.follow("/site/about.html")
print(location.target)   # www/default/about.html
```

Looking up a content type:

```python
from webserv.mime import get_type

get_type("style.css")   # "text/css"
get_type("archive")     # "application/octet_stream"
```

## Errors

Malformed input and failed operations raise exceptions:
`webserv.http.errors.ParseError` and its subclasses for protocol errors,
`webserv.resource.ResourceError` and `ResourceIOError` for resource I/O,
`webserv.cgi.CGIError`, `WaitError` and `ForkError` for scripts, and
`webserv.network.NetworkError` for socket and poller failures.

## What the package does not do

- It has no server command, configuration file reader or accept loop; you
  combine `Poller`, the parsers, `Route` and the resources yourself.
- It does not decode chunked request bodies. `Message.expects_body` reports
  a chunked body, but reading it is left to the caller.