"""
Client address resolution shared by the rate limiter and the access log.

The API normally sits behind a proxy, so the first X-Forwarded-For entry
(the original client) wins over the socket peer.
"""

from starlette.requests import HTTPConnection


def client_address(conn: HTTPConnection) -> str:
    forwarded = conn.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return conn.client.host if conn.client else "unknown"
