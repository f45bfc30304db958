from dataclasses import dataclass

import galois

from .errors import InvalidParameters


@dataclass(frozen=True)
class Field:
    """A finite field F_{p^e}, described only by its size.

    bit_size is the bit length of the base field characteristic, and
    extension_degree the degree e of the extension the verifier samples from.
    """

    name: str
    bit_size: int
    extension_degree: int = 1

    def __post_init__(self):
        if self.bit_size <= 0:
            raise InvalidParameters(
                f"field bit size must be positive, got {self.bit_size}",
                parameter="bit_size",
            )
        if self.extension_degree <= 0:
            raise InvalidParameters(
                f"extension degree must be positive, got {self.extension_degree}",
                parameter="extension_degree",
            )

    @property
    def effective_bits(self) -> int:
        return self.bit_size * self.extension_degree

    @classmethod
    def from_prime(cls, name: str, prime: int, extension_degree: int = 1) -> "Field":
        if not galois.is_prime(prime):
            raise InvalidParameters(f"{prime} is not prime", parameter="prime")
        return cls(name, prime.bit_length(), extension_degree)

    @classmethod
    def from_galois(cls, GF, name: str | None = None) -> "Field":
        # GF(p^e): characteristic p, degree e
        return cls(
            name if name is not None else GF.name,
            int(GF.characteristic).bit_length(),
            int(GF.degree),
        )

    def with_extension(self, extension_degree: int) -> "Field":
        return Field(self.name, self.bit_size, extension_degree)

    def __str__(self):
        return (
            f"{self.extension_degree}-extension of {self.name} "
            f"- {self.bit_size} bits base"
        )
