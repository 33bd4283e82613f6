"""
Pydantic models for POS terminal commands and responses.

This module defines the core data structures used throughout the library,
implemented as immutable Pydantic models with validation.

Design principles:
- All models are frozen (immutable)
- Value objects enforce protocol limits at construction time
- Commands render to their wire body text via the ``body`` property
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator, model_validator

from mposlink.protocol.constants import Opcode, ProtocolConstants


class Command(BaseModel):
    """
    A protocol command: opcode followed by its fields.

    The body is the opcode and fields joined by ``|``. Empty fields are
    significant and kept, so ``Command(opcode=Opcode.TOTALS, fields=("", ""))``
    renders as ``"0700||"``.

    Example:
        >>> cmd = Command(opcode=Opcode.LAST_SALE, fields=("0",))
        >>> cmd.body
        '0250|0'
    """

    model_config = ConfigDict(frozen=True)

    opcode: Opcode
    fields: tuple[str, ...] = ()

    @field_validator("fields")
    @classmethod
    def validate_fields(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Reject fields that would shift the field layout."""
        for field in v:
            if ProtocolConstants.FIELD_SEPARATOR in field:
                raise ValueError(f"Field must not contain the separator: {field!r}")
        return v

    @property
    def body(self) -> str:
        """Wire text of the command, opcode first."""
        return ProtocolConstants.FIELD_SEPARATOR.join((self.opcode.value, *self.fields))

    def __str__(self) -> str:
        return self.body

    def __repr__(self) -> str:
        return f"Command({self.opcode.name}, {self.body!r})"


class SaleAmount(BaseModel):
    """
    Sale amount in whole currency units.

    Valid range: 50 to 999,999,999.

    Example:
        >>> str(SaleAmount(value=1500))
        '1500'
    """

    model_config = ConfigDict(frozen=True)

    value: int = Field(
        ge=ProtocolConstants.MIN_SALE_AMOUNT,
        le=ProtocolConstants.MAX_SALE_AMOUNT,
        description="Sale amount",
    )

    def __str__(self) -> str:
        return str(self.value)


class OperationNumber(BaseModel):
    """
    Terminal operation number referenced by a refund.

    Only the upper bound is enforced here; the lower bound depends on the
    refund validation mode chosen by the command builder.
    """

    model_config = ConfigDict(frozen=True)

    value: int = Field(
        le=ProtocolConstants.MAX_OPERATION_NUMBER,
        description="Operation number of the original sale",
    )

    def __str__(self) -> str:
        return str(self.value)


class SecurityConfig(BaseModel):
    """
    TLS settings handed to the transport when a session starts.

    TLS is disabled by default. When enabled, a certificate name is
    required; the passphrase is kept as a secret and never shown in reprs.
    """

    model_config = ConfigDict(frozen=True)

    tls_enabled: bool = False
    certificate_name: str | None = None
    certificate_password: SecretStr | None = None

    @model_validator(mode="after")
    def validate_certificate(self) -> SecurityConfig:
        """TLS needs a certificate to present."""
        if self.tls_enabled and not self.certificate_name:
            raise ValueError("certificate_name is required when TLS is enabled")
        return self


class SerialSettings(BaseModel):
    """
    Serial link settings for a terminal attached over a serial/USB port.
    """

    model_config = ConfigDict(frozen=True)

    port: str = Field(min_length=1, description="Serial port path, e.g. /dev/ttyACM0")
    baudrate: int = Field(default=ProtocolConstants.DEFAULT_BAUD_RATE, gt=0)
    timeout: float = Field(default=ProtocolConstants.DEFAULT_RECEIVE_TIMEOUT, gt=0)


class TerminalResponse(BaseModel):
    """
    A decoded terminal response.

    Attributes:
        raw_hex: Response exactly as delivered by the transport.
        text: Decoded text, control characters included.
        fields: Body split on ``|`` (STX/ETX/LRC stripped when present).
        lrc_valid: LRC check result, or None if the response carried no
            complete frame.
    """

    model_config = ConfigDict(frozen=True)

    raw_hex: str
    text: str
    fields: tuple[str, ...] = ()
    lrc_valid: bool | None = None

    @property
    def opcode(self) -> str | None:
        """First field of the response, if any."""
        if not self.fields or not self.fields[0]:
            return None
        return self.fields[0]

    def field(self, index: int, default: str = "") -> str:
        """Get a field by position, or default if the response is shorter."""
        if 0 <= index < len(self.fields):
            return self.fields[index]
        return default

    def __str__(self) -> str:
        return self.text
