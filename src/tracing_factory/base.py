from types import NoneType, UnionType
from typing import Union, get_args, get_origin

from pydantic import ValidationInfo, field_validator
from pydantic.fields import FieldInfo
from pydantic_settings import BaseSettings, SettingsConfigDict


def _is_nullable(info: FieldInfo) -> bool:
    return get_origin(info.annotation) in (Union, UnionType) and NoneType in get_args(
        info.annotation
    )


class BaseCustomSettings(BaseSettings):
    """
    - Customized configuration for all settings
    - Envs equal to 'null' or 'none' in nullable fields are parsed as None
    """

    @field_validator("*", mode="before")
    @classmethod
    def _parse_none(cls, v, info: ValidationInfo):
        # WARNING: In nullable fields, envs equal to null or none are parsed as None !!
        if (
            info.field_name
            and _is_nullable(cls.model_fields[info.field_name])
            and isinstance(v, str)
            and v.lower() in ("none",)
        ):
            return None
        return v

    model_config = SettingsConfigDict(
        case_sensitive=True,  # All must be capitalized
        extra="forbid",
        frozen=True,
        validate_default=True,
        arbitrary_types_allowed=True,
        env_parse_none_str="null",
    )

    @classmethod
    def create_from_envs(cls, **overrides):
        # Identical to the constructor.
        # More explicit when settings are captured from the environment
        return cls(**overrides)
