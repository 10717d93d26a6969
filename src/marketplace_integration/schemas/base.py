from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Model exchanged with Vercel in camelCase, addressed in snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self) -> str:
        """Serialize with wire aliases, omitting unset optionals."""
        return self.model_dump_json(by_alias=True, exclude_none=True)
