"""Request parsing and JSON bodies for the HTTP service."""

from __future__ import annotations

from typing import Any

from ..exceptions import ClassificationError


class RequestError(Exception):
    """The request body is not a well-formed classification request."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


def parse_dna_request(payload: Any) -> list[str]:
    """Extract the ``dna`` row list from a decoded JSON body.

    Only the request framing is checked here; grid shape and alphabet are
    left to the validator so their error codes reach the client.
    """
    if not isinstance(payload, dict):
        raise RequestError("Request body must be a JSON object")
    if "dna" not in payload or payload["dna"] is None:
        raise RequestError("Field 'dna' must not be null")
    dna = payload["dna"]
    if not isinstance(dna, list):
        raise RequestError("Field 'dna' must be an array of strings")
    if not all(isinstance(row, str) for row in dna):
        raise RequestError("Field 'dna' must contain only strings")
    return dna


def error_body(status: int, message: str, error_code: str | None = None) -> dict[str, Any]:
    body: dict[str, Any] = {"status": status, "message": message}
    if error_code is not None:
        body["error_code"] = error_code
    return body


def classification_error_body(status: int, exc: ClassificationError) -> dict[str, Any]:
    return error_body(status, exc.message, exc.code.value)
