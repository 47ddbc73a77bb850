import dataclasses
import logging
import os
import re
import sys
import tomllib
import types
import typing


__all__ = [
    "ConfigError", "ConfigTypeError", "parse_config", "parse_config_obj",
]


class ConfigError(Exception):
    """Exception for critical configuration errors."""

    pass


class ConfigTypeError(ConfigError):
    def __init__(self, path: str, expected: str, got: object):
        msg = f"Expected {path} to be {expected}, got {type(got).__name__}"
        super().__init__(msg)


_T = typing.TypeVar("_T")


def parse_config(
    config_file_path: str, config_class: type[_T], allow_missing: bool = False
) -> _T:
    """Load a TOML config file into a config class, checking for type errors.

    config_class must be a dataclass whose fields are basic TOML types
    (str, int, float, bool), other dataclasses following the same
    rules, list[T], tuple[T, ...], dict[str, T], or optionals (T | None)
    of these. Dataclasses correspond to TOML tables. A trailing "_" in a
    field name is dropped to find the TOML key, so that keys clashing
    with python keywords (e.g. "global") can be used.

    config_file_path: path to the config TOML file.
    config_class: dataclass to load the configuration into.
    allow_missing: if the file does not exist, build config_class
        from its defaults instead of failing.

    return: an instance of config_class.

    """
    if allow_missing and not os.path.exists(config_file_path):
        logging.info(f"Configuration file {config_file_path} not found, "
                     f"using default values.")
        try:
            return parse_config_obj({}, config_class, "")
        except ConfigError as e:
            logging.critical(f"Cannot use default configuration: {e}")
            sys.exit(1)

    try:
        with open(config_file_path, "rb") as f:
            data = tomllib.load(f)
        return parse_config_obj(data, config_class, "")
    except FileNotFoundError:
        logging.critical(f"Cannot find configuration file {config_file_path}")
        sys.exit(1)
    except (ConfigError, tomllib.TOMLDecodeError) as e:
        # Don't show stacktrace for basic errors.
        logging.critical(f"Cannot load configuration file {config_file_path}: {e}")
        sys.exit(1)
    except Exception:
        logging.critical(
            f"Cannot load configuration file {config_file_path}", exc_info=True
        )
        sys.exit(1)


def format_key(key: str) -> str:
    if re.fullmatch(r"[A-Za-z0-9_-]+", key):
        return key
    # Good enough to be a readable TOML key in error messages.
    return repr(key)


def join_path(path: str, new_part: str) -> str:
    if path != "":
        return path + "." + new_part
    return new_part


def _is_required(field: dataclasses.Field) -> bool:
    return (field.default is dataclasses.MISSING
            and field.default_factory is dataclasses.MISSING)


def _parse_table(data: object, obj_class: type[_T], path: str) -> _T:
    if not isinstance(data, dict):
        raise ConfigTypeError(path, "a table", data)
    remaining = dict(data)
    kw_args = {}
    for field in dataclasses.fields(obj_class):
        if not field.init:
            continue
        config_name = field.name.removesuffix("_")
        field_path = join_path(path, format_key(config_name))
        if config_name not in remaining:
            if _is_required(field):
                raise ConfigError(f"Key {field_path} is required")
            continue
        kw_args[field.name] = parse_config_obj(
            remaining.pop(config_name),
            typing.cast(type[_T], field.type), field_path)

    for k in remaining:
        thispath = join_path(path, format_key(k))
        logging.warning(f"Unrecognized key {thispath} in config, ignoring.")

    return obj_class(**kw_args)


def _parse_mapping(data: object, obj_class: type[_T], path: str) -> _T:
    key_type, value_type = typing.get_args(obj_class)
    assert key_type is str
    if not isinstance(data, dict):
        raise ConfigTypeError(path, "a table", data)
    result = {
        k: parse_config_obj(v, value_type, join_path(path, format_key(k)))
        for k, v in data.items()
    }
    return typing.cast(_T, result)


def _parse_sequence(data: object, obj_class: type[_T], path: str) -> _T:
    origin = typing.get_origin(obj_class)
    args = typing.get_args(obj_class)
    if not isinstance(data, list):
        raise ConfigTypeError(path, "a list", data)

    # tuple[T, ...] and list[T] are homogeneous, any other tuple is a
    # fixed-length record.
    homogeneous = origin is list or (len(args) == 2 and args[1] is Ellipsis)
    if homogeneous:
        result = [parse_config_obj(x, args[0], path + f"[{i}]")
                  for i, x in enumerate(data)]
    else:
        if len(args) != len(data):
            raise ConfigError(
                f"Expected {path} to have {len(args)} elements, got {len(data)}"
            )
        result = [parse_config_obj(x, type_, path + f"[{i}]")
                  for i, (type_, x) in enumerate(zip(args, data))]
    return origin(result)  # type: ignore


def parse_config_obj(data: object, obj_class: type[_T], path: str) -> _T:
    """Parse the TOML value data as an instance of obj_class.

    data: a value as returned by tomllib.
    obj_class: the type the value should have.
    path: dotted position of data in the file, for error messages.

    raise (ConfigError): if data does not match obj_class.

    """
    if typing.get_origin(obj_class) in (typing.Union, types.UnionType):
        # Only "T | None" is supported. TOML has no null, so a present
        # value must match T.
        args = typing.get_args(obj_class)
        assert len(args) == 2 and args[1] is type(None)
        obj_class = args[0]

    origin = typing.get_origin(obj_class)
    if dataclasses.is_dataclass(obj_class):
        return _parse_table(data, obj_class, path)
    elif origin is dict:
        return _parse_mapping(data, obj_class, path)
    elif origin in (tuple, list):
        return _parse_sequence(data, obj_class, path)
    elif obj_class is bool:
        if not isinstance(data, bool):
            raise ConfigTypeError(path, "bool", data)
        return typing.cast(_T, data)
    elif obj_class in (str, int):
        # bool is a subclass of int, but true is not a number.
        if not isinstance(data, obj_class) or isinstance(data, bool):
            raise ConfigTypeError(path, obj_class.__name__, data)
        return typing.cast(_T, data)
    elif obj_class is float:
        # Allow specifying floats as ints.
        if not isinstance(data, int | float) or isinstance(data, bool):
            raise ConfigTypeError(path, "float", data)
        return typing.cast(_T, float(data))
    else:
        raise AssertionError(f"Unsupported type found in configuration: {obj_class}")
