"""
Multipart form parsing for endpoints that take fields plus image uploads

FastAPI's Form() parameters turn an empty string into "not sent", but the
update endpoints need to tell an omitted field from one explicitly cleared.
These helpers read the raw form and validate it against a pydantic schema.
"""
from typing import Dict, Iterable, Tuple, Type, TypeVar

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError
from starlette.datastructures import UploadFile

SchemaT = TypeVar("SchemaT", bound=BaseModel)


async def read_multipart(
    request: Request,
    file_fields: Iterable[str] = (),
) -> Tuple[Dict[str, str], Dict[str, UploadFile]]:
    """
    Split a submitted form into text fields and non-empty uploads

    Returns:
        (fields, files); file inputs submitted without a file are dropped
    """
    form = await request.form()
    wanted = set(file_fields)
    fields: Dict[str, str] = {}
    files: Dict[str, UploadFile] = {}
    for key, value in form.multi_items():
        if isinstance(value, UploadFile):
            if key in wanted and value.filename:
                files[key] = value
        elif key not in wanted and not key.startswith("_"):
            fields[key] = value
    return fields, files


def parse_form(schema: Type[SchemaT], fields: Dict[str, str]) -> SchemaT:
    """Validate form fields, reporting errors the same way as JSON bodies"""
    try:
        return schema.model_validate(fields)
    except ValidationError as exc:
        raise RequestValidationError(
            [{**err, "loc": ("body",) + tuple(err.get("loc", ()))} for err in exc.errors()]
        )


def require_files(files: Dict[str, UploadFile], names: Iterable[str]) -> None:
    missing = [name for name in names if name not in files]
    if missing:
        raise RequestValidationError(
            [
                {"type": "missing", "loc": ("body", name), "msg": f"The {name} field is required.", "input": None}
                for name in missing
            ]
        )
