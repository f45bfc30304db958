from dataclasses import fields, replace

import yaml

from .errors import InvalidParameters
from .parameters import DEFAULT_PARAMETERS, DemoParameters


def _coerce(name: str, value, expected: type):
    if expected is int:
        # bool is an int, and a float would be truncated silently
        if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
            raise InvalidParameters(f"{name} must be an integer, got {value!r}", parameter=name)
        try:
            return int(value)
        except (TypeError, ValueError):
            raise InvalidParameters(
                f"{name} must be an integer, got {value!r}", parameter=name
            ) from None
    if expected is tuple:
        values = (value,) if isinstance(value, str) else value
        if not isinstance(values, (list, tuple)) or not all(isinstance(v, str) for v in values):
            raise InvalidParameters(f"{name} must be a list of names, got {value!r}", parameter=name)
        return tuple(values)
    if not isinstance(value, expected):
        raise InvalidParameters(
            f"{name} must be a {expected.__name__}, got {value!r}", parameter=name
        )
    return value


def parameters_from_mapping(values: dict, base: DemoParameters = DEFAULT_PARAMETERS) -> DemoParameters:
    expected = {f.name: type(f.default) for f in fields(DemoParameters)}
    unknown = sorted(set(values) - set(expected))
    if unknown:
        raise InvalidParameters(
            f"unknown configuration keys: {', '.join(unknown)}", parameter=unknown[0]
        )
    return replace(
        base, **{name: _coerce(name, value, expected[name]) for name, value in values.items()}
    )


def load_parameters(path, base: DemoParameters = DEFAULT_PARAMETERS) -> DemoParameters:
    with open(path, "r") as f:
        values = yaml.safe_load(f)
    if values is None:
        return base
    if not isinstance(values, dict):
        raise InvalidParameters(f"{path} must contain a mapping", parameter="config")
    return parameters_from_mapping(values, base)
