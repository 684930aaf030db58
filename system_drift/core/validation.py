"""Helpers for turning raw request values into service arguments."""

from typing import Optional, Union


def query_int_or_raw(raw: Optional[str], default: int) -> Union[int, str]:
    """
    Parse an integer query parameter, leaving rejection to the service.

    Unparseable values are passed through unchanged so the service raises
    its own ``ValidationError`` for them, the same as for out-of-range ones.

    :param raw: Query string value, or None when the parameter was omitted
    :param default: Value used when the parameter was omitted
    :returns: The parsed integer, or ``raw`` when it is not an integer
    """
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return raw
