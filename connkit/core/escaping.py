"""
Value escaping for connection strings.

The keyword grammar follows libpq's conninfo rules: values containing
whitespace, either quote character or a backslash are single-quoted. Inside
the quotes only single quotes and backslashes are escaped by a backslash;
a double quote is literal to libpq. parse_keyword_dsn is the matching
unescaper and is used to validate assembled strings.
"""

from typing import Dict
from urllib.parse import quote, quote_plus

from ..exceptions import ConfigurationError

_ESCAPED = ("'", "\\")
_QUOTED = _ESCAPED + ('"',)


def _needs_quoting(value: str) -> bool:
    return any(ch.isspace() or ch in _QUOTED for ch in value)


def escape_value(value: str) -> str:
    """
    Escape a value for a space-delimited key=value connection string.

    Args:
        value: Raw parameter value

    Returns:
        str: The value verbatim when it is safe, '' for an empty value,
        otherwise the single-quoted and backslash-escaped form

    Example:
        escape_value("O'Brien \\pass")
        # Returns: 'O\\'Brien \\\\pass'
    """
    if value == "":
        return "''"
    if not _needs_quoting(value):
        return value

    # Single pass so an inserted backslash is never escaped again
    chars = []
    for ch in value:
        if ch in _ESCAPED:
            chars.append("\\")
        chars.append(ch)
    return "'" + "".join(chars) + "'"


def parse_keyword_dsn(dsn: str) -> Dict[str, str]:
    """
    Parse a keyword/value connection string back into its parameters.

    Args:
        dsn: String such as "host=db1 password='a b'"

    Returns:
        Dict[str, str]: Parameters in order of appearance; a repeated key
        keeps its last value

    Raises:
        ConfigurationError: On a missing '=', an empty key or an
        unterminated quoted value
    """
    params: Dict[str, str] = {}
    length = len(dsn)
    pos = 0

    while True:
        while pos < length and dsn[pos].isspace():
            pos += 1
        if pos >= length:
            break

        start = pos
        while pos < length and dsn[pos] != "=" and not dsn[pos].isspace():
            pos += 1
        key = dsn[start:pos]

        while pos < length and dsn[pos].isspace():
            pos += 1
        if pos >= length or dsn[pos] != "=":
            raise ConfigurationError(f"missing '=' after {key!r} in connection string")
        if not key:
            raise ConfigurationError("empty parameter name in connection string")
        pos += 1

        while pos < length and dsn[pos].isspace():
            pos += 1

        chars = []
        if pos < length and dsn[pos] == "'":
            pos += 1
            while True:
                if pos >= length:
                    raise ConfigurationError(f"unterminated quoted value for {key!r}")
                ch = dsn[pos]
                if ch == "'":
                    pos += 1
                    break
                if ch == "\\":
                    pos += 1
                    if pos >= length:
                        raise ConfigurationError(f"unterminated quoted value for {key!r}")
                    ch = dsn[pos]
                chars.append(ch)
                pos += 1
        else:
            while pos < length and not dsn[pos].isspace():
                ch = dsn[pos]
                if ch == "\\" and pos + 1 < length:
                    pos += 1
                    ch = dsn[pos]
                chars.append(ch)
                pos += 1

        params[key] = "".join(chars)

    return params


def quote_userinfo(value: str) -> str:
    """Percent-encode a username or password for the authority of a URL."""
    return quote(value, safe="")


def quote_query_value(value: str) -> str:
    """Encode a query-string key or value (spaces become '+')."""
    return quote_plus(value)
