# careerspage/schemas/base.py

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from careerspage.core.errors import ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


class CamelModel(BaseModel):
    """Payload model: snake_case in Python, camelCase on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


def parse_payload(model: type[ModelT], payload: dict[str, Any] | None) -> ModelT:
    """Validates an event payload, converting pydantic errors into a 400 ValidationError."""
    try:
        return model.model_validate(payload or {})
    except PydanticValidationError as e:
        problems = [
            {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
            for err in e.errors()
        ]
        first = problems[0] if problems else {"field": "", "message": "invalid payload"}
        message = f"Invalid '{first['field']}': {first['message']}" if first["field"] else first["message"]
        raise ValidationError(message, details=problems)
