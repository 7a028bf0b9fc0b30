"""JSON bodies shared by every endpoint."""

from __future__ import annotations

OK = "Ok"
BAD_REQUEST = "Bad Request"
INTERNAL_SERVER_ERROR = "Internal Server Error"


def ok(**extra) -> dict:
    body = {"description": OK}
    body.update(extra)
    return body


def error_body(description: str, message: str) -> dict:
    return {"description": description, "error": message}


def bad_request(message: str) -> dict:
    return error_body(BAD_REQUEST, message)


def internal_server(message: str) -> dict:
    return error_body(INTERNAL_SERVER_ERROR, message)


__all__ = [
    "OK",
    "BAD_REQUEST",
    "INTERNAL_SERVER_ERROR",
    "ok",
    "error_body",
    "bad_request",
    "internal_server",
]
