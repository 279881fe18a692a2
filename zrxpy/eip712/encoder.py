"""
EIP-712 structured data hashing.

A schema maps each type name to its ordered ``(name, type)`` entries. Entry
order is part of the type hash and the struct encoding, so it must match the
verifying contract exactly.
"""

import re
from collections.abc import Mapping, Sequence
from typing import Any, NamedTuple

from eth_abi import encode
from eth_abi.exceptions import EncodingError
from eth_utils import keccak, to_bytes

from zrxpy.exceptions import SchemaError
from zrxpy.model.domain import EIP712Domain

DOMAIN_TYPE = "EIP712Domain"
STRUCTURED_DATA_PREFIX = b"\x19\x01"

_ATOMIC_TYPE_PATTERN = re.compile(r"^(address|bool|u?int(\d{1,3})|bytes([1-9]|[12]\d|3[0-2]))$")
_ARRAY_TYPE_PATTERN = re.compile(r"^(.+)\[(\d*)\]$")
_DYNAMIC_TYPES = ("string", "bytes")


class Entry(NamedTuple):
    name: str
    type: str


TypedDataSchema = Mapping[str, Sequence[Entry | tuple[str, str] | Mapping[str, str]]]


def _to_entry(field) -> Entry:
    if isinstance(field, Mapping):
        try:
            return Entry(field["name"], field["type"])
        except KeyError:
            raise SchemaError(f"Malformed entry {dict(field)!r}.")

    elif isinstance(field, str) or len(field) != 2:
        raise SchemaError(f"Malformed entry {field!r}.")

    return Entry(*field)


def _entries(schema: TypedDataSchema, type_name: str) -> list[Entry]:
    try:
        fields = schema[type_name]
    except KeyError:
        raise SchemaError(f"Type '{type_name}' is not defined in the schema.")

    return [_to_entry(field) for field in fields]


def _base_type(type_name: str) -> str:
    while match := _ARRAY_TYPE_PATTERN.match(type_name):
        type_name = match.group(1)

    return type_name


def _is_atomic(type_name: str) -> bool:
    if not (match := _ATOMIC_TYPE_PATTERN.match(type_name)):
        return False

    if bits := match.group(2):
        size = int(bits)
        return 8 <= size <= 256 and size % 8 == 0

    return True


def _is_known_type(schema: TypedDataSchema, type_name: str) -> bool:
    base = _base_type(type_name)
    return base in _DYNAMIC_TYPES or _is_atomic(base) or base in schema


def find_dependencies(
    schema: TypedDataSchema, type_name: str, found: set[str] | None = None
) -> set[str]:
    """
    Collect ``type_name`` and every struct type it references, transitively.
    """
    found = set() if found is None else found
    type_name = _base_type(type_name)
    if type_name in found or type_name not in schema:
        return found

    found.add(type_name)
    for entry in _entries(schema, type_name):
        find_dependencies(schema, entry.type, found)

    return found


def encode_type(schema: TypedDataSchema, type_name: str) -> str:
    """
    The canonical type string: the type itself first, then each referenced
    struct type in alphabetical order, e.g.
    ``Mail(Person from,Person to,string contents)Person(string name,address wallet)``.
    """
    dependencies = find_dependencies(schema, type_name)
    dependencies.discard(type_name)
    result = ""
    for name in [type_name, *sorted(dependencies)]:
        fields = ",".join(f"{entry.type} {entry.name}" for entry in _entries(schema, name))
        result += f"{name}({fields})"

    return result


def type_hash(schema: TypedDataSchema, type_name: str) -> bytes:
    return keccak(text=encode_type(schema, type_name))


def encode_field(schema: TypedDataSchema, type_name: str, value: Any) -> bytes:
    """
    Encode one value as a 32-byte word.
    """
    if type_name in schema:
        return struct_hash(schema, type_name, value)

    elif match := _ARRAY_TYPE_PATTERN.match(type_name):
        item_type, length = match.group(1), match.group(2)
        if isinstance(value, str | bytes) or not isinstance(value, Sequence):
            raise SchemaError(f"Expected a sequence for '{type_name}', got {type(value)}.")

        elif length and int(length) != len(value):
            raise SchemaError(f"Expected {length} items for '{type_name}', got {len(value)}.")

        return keccak(b"".join(encode_field(schema, item_type, item) for item in value))

    elif type_name == "string":
        if not isinstance(value, str):
            raise SchemaError(f"Expected a str for 'string', got {type(value)}.")

        return keccak(text=value)

    elif type_name == "bytes":
        return keccak(_to_bytes(value))

    elif _is_atomic(type_name):
        if type_name.startswith("bytes") and isinstance(value, str):
            value = _to_bytes(value)

        try:
            return encode([type_name], [value])
        except (EncodingError, TypeError, ValueError) as err:
            raise SchemaError(f"Cannot encode {value!r} as '{type_name}': {err}") from err

    raise SchemaError(f"Unknown type '{type_name}'.")


def _to_bytes(value: Any) -> bytes:
    if isinstance(value, bytes | bytearray):
        return bytes(value)

    elif isinstance(value, str):
        try:
            return to_bytes(hexstr=value)
        except ValueError as err:
            raise SchemaError(f"Invalid hex data '{value}'.") from err

    raise SchemaError(f"Expected bytes, got {type(value)}.")


def encode_data(schema: TypedDataSchema, type_name: str, values: Mapping[str, Any]) -> bytes:
    parts = [type_hash(schema, type_name)]
    for entry in _entries(schema, type_name):
        if entry.name not in values:
            raise SchemaError(f"Missing field '{entry.name}' for type '{type_name}'.")

        parts.append(encode_field(schema, entry.type, values[entry.name]))

    return b"".join(parts)


def struct_hash(schema: TypedDataSchema, type_name: str, values: Mapping[str, Any]) -> bytes:
    if not isinstance(values, Mapping):
        raise SchemaError(f"Expected a mapping for struct '{type_name}', got {type(values)}.")

    return keccak(encode_data(schema, type_name, values))


def domain_separator(schema: TypedDataSchema, domain: EIP712Domain | Mapping[str, Any]) -> bytes:
    return struct_hash(schema, DOMAIN_TYPE, _domain_message(domain))


def _domain_message(domain: EIP712Domain | Mapping[str, Any]) -> Mapping[str, Any]:
    return domain.to_message() if isinstance(domain, EIP712Domain) else domain


def validate_structured_data(
    schema: TypedDataSchema,
    primary_type: str,
    message: Mapping[str, Any],
    domain: EIP712Domain | Mapping[str, Any] | None = None,
) -> None:
    """
    Check that the schema defines the domain and primary types, that every
    referenced type is known, and that the message (and domain, when given)
    carries exactly the declared fields.

    Raises:
        :class:`~zrxpy.exceptions.SchemaError`: On the first problem found.
    """
    if DOMAIN_TYPE not in schema:
        raise SchemaError(f"Schema is missing '{DOMAIN_TYPE}'.")

    elif primary_type not in schema:
        raise SchemaError(f"Schema is missing the primary type '{primary_type}'.")

    for type_name, fields in schema.items():
        seen = set()
        for field in fields:
            entry = _to_entry(field)
            if entry.name in seen:
                raise SchemaError(f"Duplicate field '{entry.name}' in '{type_name}'.")

            elif not _is_known_type(schema, entry.type):
                raise SchemaError(
                    f"Field '{entry.name}' of '{type_name}' has undefined type '{entry.type}'."
                )

            seen.add(entry.name)

    _validate_values(schema, primary_type, message)
    if domain is not None:
        _validate_values(schema, DOMAIN_TYPE, _domain_message(domain))


def _validate_values(schema: TypedDataSchema, type_name: str, values: Any) -> None:
    if not isinstance(values, Mapping):
        raise SchemaError(f"Expected a mapping for struct '{type_name}', got {type(values)}.")

    entries = _entries(schema, type_name)
    declared = {entry.name for entry in entries}
    if missing := [entry.name for entry in entries if entry.name not in values]:
        raise SchemaError(f"Missing field(s) {', '.join(missing)} for type '{type_name}'.")

    elif extra := sorted(set(values) - declared):
        raise SchemaError(f"Undeclared field(s) {', '.join(extra)} for type '{type_name}'.")

    for entry in entries:
        base = _base_type(entry.type)
        if base not in schema:
            continue

        value = values[entry.name]
        if base == entry.type:
            _validate_values(schema, base, value)
            continue

        if isinstance(value, str | bytes) or not isinstance(value, Sequence):
            raise SchemaError(f"Expected a sequence for '{entry.name}', got {type(value)}.")

        for item in value:
            # Nested arrays of structs are checked when encoded.
            if isinstance(item, Mapping):
                _validate_values(schema, base, item)


def hash_structured_data(
    schema: TypedDataSchema,
    primary_type: str,
    message: Mapping[str, Any],
    domain: EIP712Domain | Mapping[str, Any],
) -> bytes:
    """
    The 32-byte digest ``keccak256(0x1901 ‖ domainSeparator ‖ structHash(message))``.
    The message is validated first; a malformed message is never hashed.
    """
    validate_structured_data(schema, primary_type, message, domain=domain)
    return keccak(
        STRUCTURED_DATA_PREFIX
        + domain_separator(schema, domain)
        + struct_hash(schema, primary_type, message)
    )
