import math
from enum import Enum

from .constants import MAX_OOD_SAMPLES
from .errors import InvalidParameters

LOG2_10 = math.log2(10)


class SecurityAssumption(Enum):
    """Decoding regime used to bound the error of every round.

    UNIQUE_DECODING is provable with list size 1. JOHNSON_BOUND is provable up
    to 1 - sqrt(rate) with a list-size penalty. CAPACITY_BOUND is conjectured
    and only meant for reporting conjectured security.
    """

    UNIQUE_DECODING = "UniqueDecoding"
    JOHNSON_BOUND = "JohnsonBound"
    CAPACITY_BOUND = "CapacityBound"

    @classmethod
    def from_string(cls, value: str) -> "SecurityAssumption":
        normalised = value.replace("_", "").replace("-", "").lower()
        for assumption in cls:
            if normalised in (
                assumption.value.lower(),
                assumption.name.replace("_", "").lower(),
            ):
                return assumption
        raise InvalidParameters(
            f"unknown security assumption: {value}", parameter="assumption"
        )

    @property
    def is_list_decoding(self) -> bool:
        return self is not SecurityAssumption.UNIQUE_DECODING

    def log_eta(self, log_rate: int) -> float:
        """Distance slack eta (log2) below the decoding radius for a rate."""
        if self is SecurityAssumption.UNIQUE_DECODING:
            return 0.0
        if self is SecurityAssumption.JOHNSON_BOUND:
            # eta = sqrt(rate) / 20
            return -(0.5 * log_rate + LOG2_10 + 1.0)
        # eta = rate / 2
        return -(log_rate + 1.0)

    def radius(self, log_rate: int) -> float:
        """Relative decoding radius theta for the code of rate 2^-log_rate."""
        if log_rate <= 0:
            raise InvalidParameters(
                f"rate 2^-{log_rate} must be below 1", parameter="log_rate"
            )
        rate = 2.0**-log_rate
        if self is SecurityAssumption.UNIQUE_DECODING:
            theta = (1 - rate) / 2
        elif self is SecurityAssumption.JOHNSON_BOUND:
            theta = 1 - math.sqrt(rate) - 2.0 ** self.log_eta(log_rate)
        else:
            theta = 1 - rate - 2.0 ** self.log_eta(log_rate)

        if theta <= 0:
            raise InvalidParameters(
                f"{self.value} radius is not positive at rate 2^-{log_rate}",
                parameter="log_rate",
            )
        return theta

    def log2_survival(self, log_rate: int) -> float:
        """log2 of the probability that one query misses a far point, log2(1 - theta)."""
        return math.log2(1 - self.radius(log_rate))

    def list_size_bits(self, log_degree: int, log_rate: int) -> float:
        """log2 of the list size of the RS code at the decoding radius."""
        log_eta = self.log_eta(log_rate)
        if self is SecurityAssumption.UNIQUE_DECODING:
            return 0.0
        if self is SecurityAssumption.JOHNSON_BOUND:
            # 1 / (2 eta sqrt(rate))
            return log_rate / 2 - (1.0 + log_eta)
        # degree / (rate * eta)
        return (log_degree + log_rate) - log_eta

    def log2_prox_gaps_error(
        self, log_dimension: int, log_rate: int, field_size_bits: int, folding_factor: int
    ) -> float:
        """Proximity-gaps error of a random fold of arity 2^folding_factor."""
        if self is SecurityAssumption.UNIQUE_DECODING:
            error = log_dimension + log_rate
        elif self is SecurityAssumption.JOHNSON_BOUND:
            error = LOG2_10 + 3.5 * log_rate + 2.0 * log_dimension
        else:
            error = (log_dimension + log_rate) - self.log_eta(log_rate)
        return error + folding_factor - field_size_bits

    def log2_ood_error(
        self, log_degree: int, log_rate: int, field_size_bits: int, ood_samples: int
    ) -> float:
        """Chance that two list elements agree on every out-of-domain sample."""
        list_size_bits = self.list_size_bits(log_degree, log_rate)
        return 2.0 * list_size_bits - 1.0 + ood_samples * (log_degree - field_size_bits)

    def ood_samples(
        self, security_level: float, log_degree: int, log_rate: int, field_size_bits: int
    ) -> int | None:
        """Fewest OOD samples reaching the level, None if 64 samples are not enough."""
        if not self.is_list_decoding:
            return 0
        for ood_samples in range(1, MAX_OOD_SAMPLES + 1):
            error = self.log2_ood_error(log_degree, log_rate, field_size_bits, ood_samples)
            if -error >= security_level:
                return ood_samples
        return None

    def queries(self, security_level: float, log_rate: int) -> int:
        """Number of queries for which the query error alone reaches the level."""
        if security_level <= 0:
            return 1
        return max(1, math.ceil(security_level / -self.log2_survival(log_rate)))

    def query_error_bits(self, log_rate: int, num_queries: int) -> float:
        return -num_queries * self.log2_survival(log_rate)

    def log2_degree_correction_error(
        self, log_degree: int, log_rate: int, field_size_bits: int, num_terms: int
    ) -> float:
        """Error of folding the answers to num_terms points into the next STIR oracle."""
        return self.log2_prox_gaps_error(
            log_degree, log_rate, field_size_bits, math.ceil(math.log2(num_terms))
        )

    def log2_constraint_combination_error(
        self, log_degree: int, log_rate: int, field_size_bits: int, num_terms: int
    ) -> float:
        """Error of batching num_terms WHIR constraints with one random challenge."""
        # Union over the list of codewords within the radius
        return self.list_size_bits(log_degree, log_rate) + math.log2(num_terms) - field_size_bits

    def __str__(self):
        return self.value
