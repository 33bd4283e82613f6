"""
Parsers for terminal responses.

Example:
    >>> from mposlink.parsers import parse_response
    >>> response = parse_response("023037303030307C300348")
    >>> response.fields
    ('070000', '0')
"""

from mposlink.parsers.response_parser import parse_response

__all__ = [
    "parse_response",
]
