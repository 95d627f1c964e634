import os
from typing import Callable, Dict, TypeVar, Union

from dotenv import dotenv_values
from pydantic import BaseModel

from .env import Env

T = TypeVar("T", bound=BaseModel)

PrimaryType = Union[str, int, bool, float, bytes]
TypesMap = Dict[str, Callable[[str], PrimaryType]]


def load_env(default: type[Env] = Env, env_file: str | None = None, override: T | None = None) -> T:
    """
    Build settings from, in increasing precedence: model defaults,
    process environment, the .env file, and explicit overrides.
    Only fields set on the override take precedence.
    """
    types_map = default.types_map()

    values = _read_environment(types_map)
    values.update(_read_env_file(env_file or ".env", types_map))

    model = default
    if override is not None:
        values.update(override.model_dump(exclude_unset=True, exclude_none=True))
        model = type(override)

    return model(**values)


def _read_environment(types_map: TypesMap) -> Dict[str, PrimaryType]:
    values: Dict[str, PrimaryType] = {}
    for envar_name, envar_type in types_map.items():
        envar_value = os.getenv(envar_name)
        if envar_value:
            values[envar_name] = envar_type(envar_value)

    return values


def _read_env_file(env_file: str, types_map: TypesMap) -> Dict[str, PrimaryType]:
    if not os.path.exists(env_file):
        return {}

    # Keys this Env does not declare are ignored
    return {
        envar_name: types_map[envar_name](envar_value)
        for envar_name, envar_value in dotenv_values(dotenv_path=env_file).items()
        if envar_name in types_map and envar_value is not None
    }
