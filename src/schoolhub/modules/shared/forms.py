"""
JSON-or-multipart request parsing.

Endpoints that accept uploads take either a JSON body or multipart form
fields plus any number of `files` parts. The fields are validated with
the same pydantic schema either way; form values are strings and rely on
pydantic's lax coercion ("true" -> True, "10" -> 10.0).
"""

import json
from typing import TypeVar

import pydantic
from fastapi import Request
from starlette.datastructures import UploadFile

from schoolhub.core.exceptions import ValidationError
from schoolhub.modules.shared.schemas import CamelModel

M = TypeVar("M", bound=CamelModel)

FILES_FIELD = "files"


def _first_error(exc: pydantic.ValidationError) -> str:
    error = exc.errors()[0]
    location = ".".join(str(part) for part in error.get("loc", ())) or "body"
    return f"{location}: {error.get('msg', 'invalid value')}"


def is_multipart(request: Request) -> bool:
    return request.headers.get("content-type", "").startswith("multipart/form-data")


async def parse_payload(
    request: Request, schema: type[M], *, partial: bool = False
) -> tuple[M, list[UploadFile]]:
    """
    Parse the request body into schema and the uploaded files.

    Args:
        partial: Treat an empty body as an empty object (updates)

    Raises:
        ValidationError: Malformed body or fields failing the schema
    """
    files: list[UploadFile] = []
    if is_multipart(request):
        form = await request.form()
        fields: dict = {}
        for key, value in form.multi_items():
            if isinstance(value, UploadFile):
                if value.filename:
                    files.append(value)
            elif key != FILES_FIELD:
                fields[key] = value
    else:
        body = await request.body()
        if not body.strip():
            if not partial:
                raise ValidationError("Request body is required")
            fields = {}
        else:
            try:
                fields = json.loads(body)
            except ValueError as e:
                raise ValidationError("Request body is not valid JSON") from e
            if not isinstance(fields, dict):
                raise ValidationError("Request body must be a JSON object")

    try:
        return schema.model_validate(fields), files
    except pydantic.ValidationError as e:
        raise ValidationError(_first_error(e)) from e
