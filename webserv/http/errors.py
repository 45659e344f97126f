"""Errors raised while parsing HTTP messages."""


class ParseError(Exception):
    """A message could not be parsed."""


class MethodError(ParseError):
    """The request method is not recognised."""


class VersionError(ParseError):
    """The HTTP version is not supported."""


class HeaderError(ParseError):
    """A header is malformed."""