"""Building blocks for a small HTTP/1.1 server: parsing, routing, resources, CGI, polling and logging."""

__version__ = "0.1.0"