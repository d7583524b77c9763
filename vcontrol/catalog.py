"""The catalogue of commands, value mappings and devices."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Mapping, Optional, TypeVar, Union

import yaml

from .command import Command
from .device import Device, DeviceIdRange, detect_device
from .device_id import DeviceId, DeviceIdF0
from .enums import AccessMode, Conversion, DataType, Parameter
from .errors import InvalidFormatError, UnknownEnumVariantError

TRANSLATIONS_FILE = "translations.used.yml"
MAPPINGS_FILE = "mappings.used.yml"
COMMANDS_FILE = "event_types.used.yml"
SYSTEM_COMMANDS_FILE = "system_event_types.used.yml"
DEVICES_FILE = "devices.used.yml"

E = TypeVar("E", bound=Enum)


def _as_mapping(data: Any, what: str) -> Mapping[Any, Any]:
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise InvalidFormatError(f"{what} must be a mapping")
    return data


def _int(value: Any, what: str) -> int:
    if isinstance(value, bool):
        raise InvalidFormatError(f"{what} is not an integer: {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidFormatError(f"{what} is not an integer: {value!r}") from None


def _optional_int(value: Any, what: str) -> Optional[int]:
    return None if value is None else _int(value, what)


def _optional_float(value: Any, what: str) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise InvalidFormatError(f"{what} is not a number: {value!r}") from None


def _required(data: Mapping[str, Any], key: str, context: str) -> Any:
    try:
        value = data[key]
    except KeyError:
        raise InvalidFormatError(f"{context}: missing field {key!r}") from None
    if value is None:
        raise InvalidFormatError(f"{context}: missing field {key!r}")
    return value


def _enum(enum_cls: type[E], value: Any, context: str) -> E:
    try:
        return enum_cls(value)
    except ValueError:
        raise UnknownEnumVariantError(f"{context}: unknown {enum_cls.__name__} {value!r}") from None


def _resolve_mapping(mappings: Mapping[int, Mapping[int, str]], reference: Any, context: str) -> Mapping[int, str]:
    key = _int(reference, f"{context}: mapping")
    try:
        return mappings[key]
    except KeyError:
        raise InvalidFormatError(f"{context}: unknown mapping {reference!r}") from None


def _build_command(data: Any, mappings: Mapping[int, Mapping[int, str]], context: str) -> Command:
    data = _as_mapping(data, context)
    conversion = Conversion.from_mapping(data) if data.get("conversion") is not None else None
    mapping_ref = data.get("mapping")
    unit = data.get("unit")
    return Command(
        addr=_int(_required(data, "addr", context), f"{context}: addr"),
        mode=_enum(AccessMode, _required(data, "mode", context), context),
        data_type=_enum(DataType, _required(data, "data_type", context), context),
        parameter=_enum(Parameter, _required(data, "parameter", context), context),
        block_count=_optional_int(data.get("block_count"), f"{context}: block_count"),
        block_len=_int(_required(data, "block_len", context), f"{context}: block_len"),
        byte_len=_int(_required(data, "byte_len", context), f"{context}: byte_len"),
        byte_pos=_int(_required(data, "byte_pos", context), f"{context}: byte_pos"),
        bit_pos=_int(_required(data, "bit_pos", context), f"{context}: bit_pos"),
        bit_len=_optional_int(data.get("bit_len"), f"{context}: bit_len"),
        conversion=conversion,
        lower_bound=_optional_float(data.get("lower_border"), f"{context}: lower_border"),
        upper_bound=_optional_float(data.get("upper_border"), f"{context}: upper_border"),
        unit=None if unit is None else str(unit),
        mapping=None if mapping_ref is None else _resolve_mapping(mappings, mapping_ref, context),
    )


def _id_range(data: Mapping[str, Any], context: str) -> DeviceIdRange:
    ident = _int(_required(data, "id", context), f"{context}: id")
    id_ext = _optional_int(data.get("id_ext"), f"{context}: id_ext")
    id_ext_till = _optional_int(data.get("id_ext_till"), f"{context}: id_ext_till")
    return DeviceIdRange(
        group_id=(ident & 0xFF00) >> 8,
        id=ident & 0x00FF,
        hardware_index=None if id_ext is None else (id_ext >> 8) & 0xFF,
        hardware_index_till=None if id_ext_till is None else (id_ext_till >> 8) & 0xFF,
        software_index=None if id_ext is None else id_ext & 0xFF,
        software_index_till=None if id_ext_till is None else id_ext_till & 0xFF,
        f0=_optional_int(data.get("f0"), f"{context}: f0"),
        f0_till=_optional_int(data.get("f0_till"), f"{context}: f0_till"),
    )


@dataclass
class Catalog:
    """Commands, value mappings and devices known to the package."""

    translations: dict[int, str]
    mappings: dict[int, dict[int, str]]
    commands: dict[int, Command]
    system_commands: dict[str, Command]
    devices: list[tuple[DeviceIdRange, Device]]
    max_payload_len: int

    @classmethod
    def load(cls, directory: Union[str, Path]) -> Catalog:
        """Read the catalogue from the YAML files in ``directory``."""
        path = Path(directory)

        def read(name: str) -> Any:
            with (path / name).open(encoding="utf-8") as handle:
                return yaml.safe_load(handle)

        return cls.from_data(
            read(TRANSLATIONS_FILE),
            read(MAPPINGS_FILE),
            read(COMMANDS_FILE),
            read(SYSTEM_COMMANDS_FILE),
            read(DEVICES_FILE),
        )

    @classmethod
    def from_data(
        cls,
        translations: Any,
        mappings: Any,
        commands: Any,
        system_commands: Any,
        devices: Any,
    ) -> Catalog:
        """Build the catalogue from already parsed data."""
        translation_table = {
            _int(key, "translation id"): str(text)
            for key, text in sorted(_as_mapping(translations, "translations").items(), key=lambda kv: int(kv[0]))
        }

        mapping_tables: dict[int, dict[int, str]] = {}
        for key, entries in _as_mapping(mappings, "mappings").items():
            mapping_id = _int(key, "mapping id")
            table: dict[int, str] = {}
            for code, translation_id in _as_mapping(entries, f"mapping {mapping_id}").items():
                translation_key = _int(translation_id, f"mapping {mapping_id}: translation")
                try:
                    table[_int(code, f"mapping {mapping_id}: code")] = translation_table[translation_key]
                except KeyError:
                    raise InvalidFormatError(
                        f"mapping {mapping_id}: unknown translation {translation_id!r}"
                    ) from None
            mapping_tables[mapping_id] = table

        command_table: dict[int, Command] = {}
        command_names: dict[int, str] = {}
        for key, data in _as_mapping(commands, "commands").items():
            command_id = _int(key, "command id")
            context = f"command {command_id}"
            data = _as_mapping(data, context)
            command_names[command_id] = str(_required(data, "name", context))
            command_table[command_id] = _build_command(data, mapping_tables, context)
        max_payload_len = max((c.block_len for c in command_table.values()), default=0)

        system_table = {
            str(name): _build_command(data, mapping_tables, f"system command {name}")
            for name, data in sorted(_as_mapping(system_commands, "system commands").items())
        }

        device_list: list[tuple[DeviceIdRange, Device]] = []
        for name, data in sorted(_as_mapping(devices, "devices").items()):
            context = f"device {name}"
            data = _as_mapping(data, context)
            device_commands: dict[str, Command] = {}
            for command_id in data.get("commands") or []:
                key = _int(command_id, f"{context}: command")
                if key not in command_table:
                    raise InvalidFormatError(f"{context}: unknown command {command_id!r}")
                device_commands[command_names[key]] = command_table[key]
            errors = _resolve_mapping(mapping_tables, _required(data, "error_mapping", context), context)
            device = Device(name=str(name), commands=device_commands, errors=errors)
            device_list.append((_id_range(data, context), device))

        return cls(
            translations=translation_table,
            mappings=mapping_tables,
            commands=command_table,
            system_commands=system_table,
            devices=device_list,
            max_payload_len=max_payload_len,
        )

    def system_command(self, name: str) -> Optional[Command]:
        """Get a system command by name."""
        return self.system_commands.get(name)

    def detect_device(self, device_id: DeviceId, device_id_f0: Optional[DeviceIdF0] = None) -> Optional[Device]:
        """Detect a device by its identifiers."""
        return detect_device(self.devices, device_id, device_id_f0)