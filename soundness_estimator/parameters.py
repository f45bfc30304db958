import math
from dataclasses import dataclass
from enum import Enum

from .constants import DEFAULT_DIGEST_SIZE_BITS
from .errors import InvalidParameters


class ProtocolVariant(Enum):
    STIR = "stir"
    WHIR = "whir"
    FRI = "fri"
    BASEFOLD = "basefold"

    @classmethod
    def from_string(cls, value: str) -> "ProtocolVariant":
        try:
            return cls(value.lower())
        except ValueError:
            raise InvalidParameters(
                f"unknown protocol '{value}'", parameter="protocol"
            ) from None

    @property
    def display_name(self) -> str:
        return {
            ProtocolVariant.STIR: "STIR",
            ProtocolVariant.WHIR: "WHIR",
            ProtocolVariant.FRI: "FRI",
            ProtocolVariant.BASEFOLD: "Basefold",
        }[self]


class BudgetSplit(Enum):
    """How the target error is shared between rounds."""

    EVEN = "even"
    GEOMETRIC = "geometric"

    def round_levels(self, security_level: float, num_rounds: int) -> list[float]:
        # Round i must reach security_level - log2(w_i), with sum(w_i) = 1
        if self is BudgetSplit.EVEN:
            return [security_level + math.log2(num_rounds)] * num_rounds
        weights = [2.0**-i for i in range(num_rounds)]
        total = sum(weights)
        return [security_level - math.log2(w / total) for w in weights]


def domain_shift_rates(log_rate: int, folding_factors) -> list[int]:
    """Rates of the oracles after each fold when every new domain is half the previous one."""
    rates = []
    for folding_factor in folding_factors:
        log_rate += folding_factor - 1
        rates.append(log_rate)
    return rates


@dataclass(frozen=True)
class LowDegreeParameters:
    """The (batched) low-degree test being estimated."""

    log_degree: int
    log_rate: int
    batch_size: int = 1
    # Degree of the constraint folded by sumcheck (0 for plain proximity testing)
    constraint_degree: int = 0

    def __post_init__(self):
        if self.log_degree < 0:
            raise InvalidParameters(
                f"log_degree must be non-negative, got {self.log_degree}",
                parameter="log_degree",
            )
        if self.log_rate <= 0:
            raise InvalidParameters(
                f"rate 2^-{self.log_rate} must be below 1", parameter="log_rate"
            )
        if self.batch_size < 1:
            raise InvalidParameters(
                f"batch_size must be positive, got {self.batch_size}",
                parameter="batch_size",
            )
        if self.constraint_degree < 0:
            raise InvalidParameters(
                f"constraint_degree must be non-negative, got {self.constraint_degree}",
                parameter="constraint_degree",
            )

    @property
    def starting_domain_log_size(self) -> int:
        return self.log_degree + self.log_rate

    def __str__(self):
        return (
            f"Degree: 2^{self.log_degree}, rate: 2^-{self.log_rate}, "
            f"batch_size: {self.batch_size}"
        )


@dataclass(frozen=True)
class ProtocolParameters:
    """Protocol-specific knobs layered on top of LowDegreeParameters.

    folding_factors is the folding schedule, one log2 arity per folding round.
    When num_queries is None, queries and grinding are solved per round against
    security_level, and pow_bits is the grinding ceiling. Otherwise every round
    uses exactly num_queries queries and pow_bits bits of grinding.
    """

    folding_factors: tuple[int, ...]
    security_level: int = 100
    pow_bits: int = 20
    digest_size_bits: int = DEFAULT_DIGEST_SIZE_BITS
    ood: bool = True
    # Per folding round rate of the next oracle (STIR/WHIR only)
    log_rates: tuple[int, ...] | None = None
    num_queries: int | None = None
    max_queries: int = 1024
    budget_split: BudgetSplit = BudgetSplit.EVEN

    def __post_init__(self):
        object.__setattr__(self, "folding_factors", tuple(self.folding_factors))
        if self.log_rates is not None:
            object.__setattr__(self, "log_rates", tuple(self.log_rates))
        if self.security_level <= 0:
            raise InvalidParameters(
                f"security level must be positive, got {self.security_level}",
                parameter="security_level",
            )
        if self.pow_bits < 0:
            raise InvalidParameters(
                f"pow_bits must be non-negative, got {self.pow_bits}",
                parameter="pow_bits",
            )
        if self.digest_size_bits <= 0:
            raise InvalidParameters(
                f"digest size must be positive, got {self.digest_size_bits}",
                parameter="digest_size_bits",
            )
        if self.num_queries is not None and self.num_queries <= 0:
            raise InvalidParameters(
                f"num_queries must be positive, got {self.num_queries}",
                parameter="num_queries",
            )
        if self.max_queries <= 0:
            raise InvalidParameters(
                f"max_queries must be positive, got {self.max_queries}",
                parameter="max_queries",
            )

    @classmethod
    def fixed_folding(
        cls, log_degree: int, folding_factor: int, stopping_log_degree: int = 0, **kwargs
    ) -> "ProtocolParameters":
        """Fold by 2^folding_factor until the degree would drop below the stopping degree."""
        if folding_factor <= 0:
            raise InvalidParameters(
                "folding factors should be non zero", parameter="folding_factor"
            )
        num_rounds = max(0, log_degree - stopping_log_degree) // folding_factor
        return cls(folding_factors=(folding_factor,) * num_rounds, **kwargs)

    @classmethod
    def fixed_domain_shift(
        cls, log_rate: int, folding_factors, **kwargs
    ) -> "ProtocolParameters":
        """The domain halves every round, so the rate improves by 2^(f-1)."""
        return cls(
            folding_factors=tuple(folding_factors),
            log_rates=tuple(domain_shift_rates(log_rate, folding_factors)),
            **kwargs,
        )

    @classmethod
    def fixed_rate(cls, log_rate: int, folding_factors, **kwargs) -> "ProtocolParameters":
        """Every oracle keeps the starting rate (a worse version of FRI)."""
        return cls(
            folding_factors=tuple(folding_factors),
            log_rates=(log_rate,) * len(folding_factors),
            **kwargs,
        )


@dataclass(frozen=True)
class DemoParameters:
    """Demonstration values used by the command line front-end."""

    field: str = "goldilocks-2"
    log_degree: int = 26
    log_rate: int = 1
    batch_size: int = 1
    constraint_degree: int = 0
    assumption: str = "CapacityBound"
    security_level: int = 100
    pow_bits: int = 20
    folding_factor: int = 4
    stopping_log_degree: int = 0
    digest_size_bits: int = DEFAULT_DIGEST_SIZE_BITS
    protocols: tuple[str, ...] = ("fri", "stir", "whir", "basefold")


DEFAULT_PARAMETERS = DemoParameters()
