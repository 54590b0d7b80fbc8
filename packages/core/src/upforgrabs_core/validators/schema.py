"""Structural validation of project files against the JSON schema.

jsonschema reports errors in terms of JSON pointers and validator keywords;
contributors editing a YAML file need the field name and what was expected,
so each error is rewritten into one plain sentence.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from jsonschema import Draft7Validator, FormatChecker
from jsonschema.exceptions import ValidationError

from upforgrabs_core.config import resolve_schema_path
from upforgrabs_core.validators.url import is_valid_url

if TYPE_CHECKING:
    from upforgrabs_core.models import Project

logger = logging.getLogger(__name__)

_format_checker = FormatChecker(formats=())


@_format_checker.checks("uri")
def _is_uri(instance) -> bool:
    # Non-strings are reported by the "type" keyword.
    return not isinstance(instance, str) or is_valid_url(instance)


def _join(*parts) -> str:
    return ".".join(str(p) for p in parts if p != "")


def _describe_type(expected) -> str:
    if isinstance(expected, list):
        return " or ".join(_describe_type(e) for e in expected)
    article = "an" if str(expected)[:1] in "aeiou" else "a"
    return f"{article} {expected}"


def format_error(error: ValidationError) -> list[str]:
    """Turn one jsonschema error into contributor-facing messages."""
    field = _join(*error.absolute_path)

    if error.validator == "required":
        instance = error.instance if isinstance(error.instance, dict) else {}
        missing = [p for p in error.validator_value if p not in instance]
        return [f"Required field '{_join(field, p)}' is missing" for p in missing]

    if error.validator == "type":
        if not field:
            return ["Expected the file to contain a mapping of project fields"]
        return [f"Field '{field}' expects {_describe_type(error.validator_value)} but instead found '{error.instance}'"]

    if error.validator == "format" and error.validator_value == "uri":
        return [f"Field '{field}' expects a URL but instead found '{error.instance}'. Please check and update this field."]

    return [f"Field '{field or '<root>'}': {error.message}"]


class SchemaValidator:
    """Validates parsed project files against a Draft 7 JSON schema."""

    def __init__(self, schema: dict):
        Draft7Validator.check_schema(schema)
        self._validator = Draft7Validator(schema, format_checker=_format_checker)

    @classmethod
    def from_path(cls, path: Path | str) -> SchemaValidator:
        with open(path, encoding="utf-8") as f:
            return cls(json.load(f))

    @classmethod
    def from_config(cls, config: dict) -> SchemaValidator:
        path = resolve_schema_path(config)
        logger.debug("Loading project schema from %s", path)
        return cls.from_path(path)

    def validate(self, project: Project) -> list[str]:
        """Return schema violations for the project; empty when it conforms."""
        if project.parse_error:
            return [project.parse_error]

        errors = sorted(
            self._validator.iter_errors(project.data),
            key=lambda e: (_join(*e.absolute_path), e.message),
        )
        messages: list[str] = []
        for error in errors:
            messages.extend(format_error(error))
        # Several required-errors on one object report the same missing keys.
        return list(dict.fromkeys(messages))
