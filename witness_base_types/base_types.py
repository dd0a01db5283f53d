"""Value types of the JSON-RPC wire format: quantities, byte strings, addresses and hashes."""

from typing import Any, ClassVar, SupportsBytes, Type, TypeVar

from pydantic import GetCoreSchemaHandler
from pydantic_core.core_schema import (
    PlainValidatorFunctionSchema,
    no_info_plain_validator_function,
    to_string_ser_schema,
)

from .conversions import (
    BytesConvertible,
    FixedSizeBytesConvertible,
    NumberConvertible,
    to_bytes,
    to_fixed_size_bytes,
    to_number,
)


class ToStringSchema:
    """
    Pydantic schema shared by the value types: validated by calling the class constructor
    and serialized with `str`.
    """

    @staticmethod
    def __get_pydantic_core_schema__(
        source_type: Any, handler: GetCoreSchemaHandler
    ) -> PlainValidatorFunctionSchema:
        """Validate with the class constructor, serialize to the string representation."""
        return no_info_plain_validator_function(
            source_type,
            serialization=to_string_ser_schema(),
        )


class Number(int, ToStringSchema):
    """Integer parsed from a decimal or `0x`-hex string, printed in decimal."""

    def __new__(cls, input_number: NumberConvertible):
        """Create a new Number object."""
        return super(Number, cls).__new__(cls, to_number(input_number))

    def __str__(self) -> str:
        """Return the decimal representation of the number."""
        return str(int(self))

    def hex(self) -> str:
        """Return the hexadecimal representation of the number."""
        return hex(self)


class HexNumber(Number):
    """JSON-RPC quantity: an integer always printed as `0x`-hex without leading zeros."""

    def __str__(self) -> str:
        """Return the hexadecimal representation of the number."""
        return self.hex()


class Bytes(bytes, ToStringSchema):
    """Byte string of any length, printed as lowercase `0x`-hex."""

    def __new__(cls, input_bytes: BytesConvertible = b""):
        """Create a new Bytes object."""
        if type(input_bytes) is cls:
            return input_bytes
        return super(Bytes, cls).__new__(cls, to_bytes(input_bytes))

    def __hash__(self) -> int:
        return super(Bytes, self).__hash__()

    def __str__(self) -> str:
        return self.hex()

    def hex(self, *args, **kwargs) -> str:
        """Return the `0x`-prefixed hexadecimal representation of the bytes."""
        return "0x" + super().hex(*args, **kwargs)


FixedSizeBytesType = TypeVar("FixedSizeBytesType", bound="FixedSizeBytes")


class FixedSizeBytes(Bytes):
    """
    Byte string of a fixed length, e.g. `FixedSizeBytes[20]`.

    Compares equal to any value that converts to the same bytes, so an address can be
    compared with its hex string or its integer value.
    """

    byte_length: ClassVar[int]
    _sized_: ClassVar[Type["FixedSizeBytes"]]

    def __class_getitem__(cls, length: int) -> Type["FixedSizeBytes"]:
        """Return a subclass holding exactly `length` bytes."""

        class Sized(cls):  # type: ignore
            byte_length = length

        Sized._sized_ = Sized
        return Sized

    def __new__(cls, input_bytes: FixedSizeBytesConvertible | FixedSizeBytesType):
        """Create a new FixedSizeBytes object."""
        if type(input_bytes) is cls:
            return input_bytes
        return super(FixedSizeBytes, cls).__new__(
            cls,
            to_fixed_size_bytes(input_bytes, cls.byte_length),
        )

    def __hash__(self) -> int:
        return super(FixedSizeBytes, self).__hash__()

    def __eq__(self, other: object) -> bool:
        if other is None:
            return False
        if not isinstance(other, FixedSizeBytes):
            if not isinstance(other, (str, int, bytes, SupportsBytes)):
                return NotImplemented
            try:
                other = self._sized_(other)
            except ValueError:
                return False
        return super().__eq__(other)

    def __ne__(self, other: object) -> bool:
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result


class Address(FixedSizeBytes[20]):  # type: ignore
    """
    20-byte account address.

    Addresses are kept as raw bytes, so two spellings of the same address that only differ in
    the case of their hex digits compare and hash equal, and both serialize to the lowercase
    `0x`-prefixed form.
    """

    pass


class Hash(FixedSizeBytes[32]):  # type: ignore
    """32-byte hash: block and transaction hashes, state roots and storage keys."""

    pass
