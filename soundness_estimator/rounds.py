"""Per-round proof size and soundness accounting.

Every protocol variant is expressed as a sequence of Round values; the size
and error of a round only depend on the round, the field, the digest size and
the security assumption, so all variants share round_cost and solve_round.
Errors are carried as log2 probabilities throughout.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum

from .assumptions import SecurityAssumption
from .errors import InvalidParameters
from .field import Field
from .utils import log2_difference, log2_sum, security_bits_from_log2_error

logger = logging.getLogger(__name__)


class Combination(Enum):
    """How the query and OOD answers of a round are merged for the next oracle."""

    NONE = "none"
    # STIR quotients the answers out and corrects the degree
    DEGREE_CORRECTION = "degree_correction"
    # WHIR adds one constraint per answer to the sumcheck claim
    CONSTRAINTS = "constraints"


@dataclass(frozen=True)
class RoundShape:
    """Geometry of a round, before queries, grinding and OOD samples are chosen."""

    index: int
    domain_log_size: int
    folding_factor: int
    log_degree: int
    log_rate: int
    uses_ood: bool = False
    batch_size: int = 1
    message_elements: int = 0
    sumcheck_degree: int = 0
    combination: Combination = Combination.NONE
    is_final: bool = False

    def to_round(self, num_queries: int, pow_bits: int, ood_samples: int = 0) -> "Round":
        return Round(
            index=self.index,
            domain_log_size=self.domain_log_size,
            folding_factor=self.folding_factor,
            num_queries=num_queries,
            pow_bits=pow_bits,
            uses_ood=ood_samples > 0,
            ood_samples=ood_samples,
            log_degree=self.log_degree,
            log_rate=self.log_rate,
            batch_size=self.batch_size,
            message_elements=self.message_elements,
            sumcheck_degree=self.sumcheck_degree,
            combination=self.combination,
            is_final=self.is_final,
        )


@dataclass(frozen=True)
class Round:
    index: int
    domain_log_size: int
    folding_factor: int
    num_queries: int
    pow_bits: int
    uses_ood: bool
    ood_samples: int
    log_degree: int
    log_rate: int
    batch_size: int = 1
    message_elements: int = 0
    sumcheck_degree: int = 0
    combination: Combination = Combination.NONE
    is_final: bool = False

    def __post_init__(self):
        if not 0 <= self.folding_factor <= self.domain_log_size:
            raise InvalidParameters(
                f"folding factor {self.folding_factor} exceeds the domain size 2^{self.domain_log_size}",
                round_index=self.index,
                parameter="folding_factor",
            )
        if self.folding_factor > self.log_degree:
            raise InvalidParameters(
                f"folding factor {self.folding_factor} exceeds the remaining degree 2^{self.log_degree}",
                round_index=self.index,
                parameter="folding_factor",
            )
        if self.num_queries <= 0:
            raise InvalidParameters(
                "num_queries must be positive", round_index=self.index, parameter="num_queries"
            )
        if self.pow_bits < 0:
            raise InvalidParameters(
                "pow_bits must be non-negative", round_index=self.index, parameter="pow_bits"
            )
        if self.ood_samples < 0 or self.uses_ood != (self.ood_samples > 0):
            raise InvalidParameters(
                "uses_ood must match a positive number of OOD samples",
                round_index=self.index,
                parameter="ood_samples",
            )
        if self.batch_size < 1:
            raise InvalidParameters(
                "batch_size must be positive", round_index=self.index, parameter="batch_size"
            )

    @property
    def folded_log_degree(self) -> int:
        return self.log_degree - self.folding_factor


@dataclass(frozen=True)
class ProofSizeBreakdown:
    merkle_digest_bits: int = 0
    merkle_path_bits: int = 0
    opened_field_elements_bits: int = 0
    pow_bits: int = 0
    ood_bits: int = 0

    @property
    def total(self) -> int:
        return (
            self.merkle_digest_bits
            + self.merkle_path_bits
            + self.opened_field_elements_bits
            + self.pow_bits
            + self.ood_bits
        )

    def __add__(self, other: "ProofSizeBreakdown") -> "ProofSizeBreakdown":
        return ProofSizeBreakdown(
            merkle_digest_bits=self.merkle_digest_bits + other.merkle_digest_bits,
            merkle_path_bits=self.merkle_path_bits + other.merkle_path_bits,
            opened_field_elements_bits=self.opened_field_elements_bits
            + other.opened_field_elements_bits,
            pow_bits=self.pow_bits + other.pow_bits,
            ood_bits=self.ood_bits + other.ood_bits,
        )


@dataclass(frozen=True)
class RoundCost:
    proof_size: ProofSizeBreakdown
    log2_error: float

    @property
    def error_probability(self) -> float:
        """2^log2_error, as a float.

        Underflows to 0.0 past ~1074 bits of security; compare log2_error
        or security_bits instead.
        """
        return 2.0**self.log2_error

    @property
    def security_bits(self) -> float:
        return security_bits_from_log2_error(self.log2_error)


def round_proof_size(round: Round, field: Field, digest_size_bits: int) -> ProofSizeBreakdown:
    opened_elements = (
        round.num_queries * (1 << round.folding_factor) * round.batch_size
        + round.message_elements
    )
    return ProofSizeBreakdown(
        merkle_digest_bits=digest_size_bits,
        # One authentication path per query, as long as the domain
        merkle_path_bits=round.domain_log_size * digest_size_bits * round.num_queries,
        opened_field_elements_bits=opened_elements * field.effective_bits,
        # The nonce is negligible
        pow_bits=0,
        ood_bits=round.ood_samples * field.effective_bits,
    )


def _log2_fixed_error(shape, field: Field, assumption: SecurityAssumption) -> float:
    """Error terms a round cannot buy down with queries: folding, batching, sumcheck."""
    field_bits = field.effective_bits
    terms = []
    if shape.folding_factor > 0:
        terms.append(
            assumption.log2_prox_gaps_error(
                shape.log_degree - shape.folding_factor,
                shape.log_rate,
                field_bits,
                shape.folding_factor,
            )
        )
    if shape.batch_size > 1:
        terms.append(
            assumption.log2_prox_gaps_error(shape.log_degree, shape.log_rate, field_bits, 0)
            + math.log2(shape.batch_size - 1)
        )
    if shape.sumcheck_degree > 0 and shape.folding_factor > 0:
        terms.append(math.log2(shape.folding_factor * shape.sumcheck_degree) - field_bits)
    return log2_sum(terms)


def _log2_combination_error(
    shape, num_queries: int, ood_samples: int, field: Field, assumption: SecurityAssumption
) -> float:
    """Error of merging the round's answers, which grows with their number."""
    num_terms = num_queries + ood_samples
    if shape.combination is Combination.DEGREE_CORRECTION:
        return assumption.log2_degree_correction_error(
            shape.log_degree, shape.log_rate, field.effective_bits, num_terms
        )
    if shape.combination is Combination.CONSTRAINTS:
        return assumption.log2_constraint_combination_error(
            shape.log_degree, shape.log_rate, field.effective_bits, num_terms
        )
    return -math.inf


def _log2_query_error(shape, num_queries: int, uses_ood: bool, assumption: SecurityAssumption) -> float:
    return _list_penalty(shape, uses_ood, assumption) - assumption.query_error_bits(
        shape.log_rate, num_queries
    )


def _list_penalty(shape, uses_ood: bool, assumption: SecurityAssumption) -> float:
    # Without OOD samples the prover may aim at any codeword in the list,
    # unless the polynomial itself is sent
    if uses_ood or shape.is_final:
        return 0.0
    return assumption.list_size_bits(shape.log_degree, shape.log_rate)


def _log2_list_decoding_error(
    shape, num_queries: int, ood_samples: int, field: Field, assumption: SecurityAssumption
) -> float:
    return log2_sum(
        [
            _log2_query_error(shape, num_queries, ood_samples > 0, assumption),
            _log2_fixed_error(shape, field, assumption),
            _log2_combination_error(shape, num_queries, ood_samples, field, assumption),
        ]
    )


def _log2_round_error(
    shape, num_queries: int, pow_bits: int, ood_samples: int, field: Field, assumption: SecurityAssumption
) -> float:
    list_decoding = _log2_list_decoding_error(shape, num_queries, ood_samples, field, assumption)
    terms = [list_decoding - pow_bits]
    if ood_samples > 0:
        terms.append(
            assumption.log2_ood_error(
                shape.log_degree, shape.log_rate, field.effective_bits, ood_samples
            )
        )
    return min(0.0, log2_sum(terms))


def round_cost(
    round: Round, field: Field, assumption: SecurityAssumption, digest_size_bits: int
) -> RoundCost:
    return RoundCost(
        proof_size=round_proof_size(round, field, digest_size_bits),
        log2_error=_log2_round_error(
            round, round.num_queries, round.pow_bits, round.ood_samples, field, assumption
        ),
    )


def solve_round(
    shape: RoundShape,
    security_level: float,
    field: Field,
    assumption: SecurityAssumption,
    max_pow_bits: int,
    max_queries: int,
) -> Round | None:
    """Cheapest round meeting 2^-security_level, or None when the bounds cannot reach it.

    OOD samples take half of the budget, queries are sized with grinding at
    its ceiling, and grinding is then lowered to the least that still fits.
    The combination error grows with the number of queries, so the query
    count is raised until it covers the combination error it causes.
    """
    budget = -security_level
    ood_samples = 0
    if shape.uses_ood and assumption.is_list_decoding:
        ood_samples = assumption.ood_samples(
            security_level + 1, shape.log_degree, shape.log_rate, field.effective_bits
        )
        if ood_samples is None:
            logger.debug("round %d: no OOD sample count reaches %.1f bits", shape.index, security_level)
            return None
        ood_error = assumption.log2_ood_error(
            shape.log_degree, shape.log_rate, field.effective_bits, ood_samples
        )
        budget = log2_difference(budget, ood_error)

    fixed_error = _log2_fixed_error(shape, field, assumption)
    list_penalty = _list_penalty(shape, ood_samples > 0, assumption)
    num_queries = 1
    while True:
        other_errors = log2_sum(
            [
                fixed_error,
                _log2_combination_error(shape, num_queries, ood_samples, field, assumption),
            ]
        )
        # Largest query error allowed once grinding is maxed out
        query_budget = log2_difference(budget + max_pow_bits, other_errors)
        if query_budget == -math.inf:
            logger.debug(
                "round %d: folding error 2^%.1f cannot reach %.1f bits",
                shape.index,
                other_errors,
                security_level,
            )
            return None
        needed = assumption.queries(list_penalty - query_budget, shape.log_rate)
        if needed <= num_queries:
            break
        num_queries = needed
        if num_queries > max_queries:
            logger.debug(
                "round %d: %d queries needed, bound is %d", shape.index, num_queries, max_queries
            )
            return None

    list_decoding = _log2_list_decoding_error(shape, num_queries, ood_samples, field, assumption)
    pow_bits = min(max_pow_bits, max(0, math.ceil(list_decoding - budget)))
    return shape.to_round(num_queries, pow_bits, ood_samples)
