"""Search for the smallest proof meeting a security target.

For a fixed folding schedule the queries and grinding of each round follow
analytically from its share of the target error (see rounds.solve_round), so
only the schedule is searched: a starting folding factor followed by a
number of rounds with a common folding factor. The grid is bounded, and a
candidate is abandoned as soon as its partial proof is already larger than
the best complete one.
"""

import logging
from dataclasses import dataclass, field as dataclass_field

from .assumptions import SecurityAssumption
from .constants import DEFAULT_DIGEST_SIZE_BITS
from .derivation import round_levels, shape_rounds
from .errors import InvalidParameters, SearchExhausted
from .field import Field
from .parameters import BudgetSplit, LowDegreeParameters, ProtocolParameters, ProtocolVariant
from .protocol import Protocol
from .rounds import round_proof_size, solve_round

logger = logging.getLogger(__name__)


def default_max_pow(log_degree: int, log_rate: int) -> int:
    """Default ceiling on grinding; anything above it hints at a misconfiguration."""
    return max(0, log_degree + log_rate - 3)


@dataclass(frozen=True)
class SearchBounds:
    min_folding_factor: int = 1
    max_folding_factor: int = 6
    max_rounds: int = 12
    # None selects default_max_pow
    max_pow_bits: int | None = None
    max_queries: int = 1024
    max_candidates: int = 20000
    budget_split: BudgetSplit = BudgetSplit.EVEN
    # Drop a candidate once its partial proof outgrows the best one
    prune: bool = True

    def __post_init__(self):
        if not 1 <= self.min_folding_factor <= self.max_folding_factor:
            raise InvalidParameters(
                f"folding factor bounds [{self.min_folding_factor}, {self.max_folding_factor}] are empty",
                parameter="folding_factor",
            )
        if self.max_rounds < 0:
            raise InvalidParameters("max_rounds must be non-negative", parameter="max_rounds")
        if self.max_pow_bits is not None and self.max_pow_bits < 0:
            raise InvalidParameters("max_pow_bits must be non-negative", parameter="max_pow_bits")
        if self.max_queries <= 0:
            raise InvalidParameters("max_queries must be positive", parameter="max_queries")
        if self.max_candidates <= 0:
            raise InvalidParameters("max_candidates must be positive", parameter="max_candidates")


@dataclass(frozen=True)
class BuilderTarget:
    target_security_bits: float
    variant: ProtocolVariant
    field: Field
    params: LowDegreeParameters
    assumption: SecurityAssumption
    bounds: SearchBounds = dataclass_field(default_factory=SearchBounds)
    digest_size_bits: int = DEFAULT_DIGEST_SIZE_BITS
    ood: bool = True

    def __post_init__(self):
        if self.target_security_bits <= 0:
            raise InvalidParameters(
                f"target security must be positive, got {self.target_security_bits}",
                parameter="target_security_bits",
            )

    @property
    def max_pow_bits(self) -> int:
        if self.bounds.max_pow_bits is not None:
            return self.bounds.max_pow_bits
        return default_max_pow(self.params.log_degree, self.params.log_rate)


def candidate_schedules(log_degree: int, bounds: SearchBounds):
    """Folding schedules of the grid, fewest rounds first."""
    factors = range(bounds.min_folding_factor, bounds.max_folding_factor + 1)
    for num_rounds in range(bounds.max_rounds + 1):
        for starting_factor in factors:
            if num_rounds == 0:
                if starting_factor <= log_degree:
                    yield (starting_factor,)
                continue
            for folding_factor in factors:
                if starting_factor + num_rounds * folding_factor <= log_degree:
                    yield (starting_factor,) + (folding_factor,) * num_rounds


class ProtocolBuilder:
    def __init__(self, target: BuilderTarget):
        self.target = target
        self.candidates_tried = 0
        self.candidates_pruned = 0

    def _parameters(self, folding_factors) -> ProtocolParameters:
        target = self.target
        return ProtocolParameters(
            folding_factors=folding_factors,
            security_level=target.target_security_bits,
            pow_bits=target.max_pow_bits,
            digest_size_bits=target.digest_size_bits,
            ood=target.ood,
            max_queries=target.bounds.max_queries,
            budget_split=target.bounds.budget_split,
        )

    def _evaluate(self, folding_factors, best_size: int | None) -> Protocol | None:
        target = self.target
        parameters = self._parameters(folding_factors)
        shapes = shape_rounds(target.variant, target.params, parameters)

        rounds = []
        size = target.digest_size_bits
        for shape, level in zip(shapes, round_levels(parameters, len(shapes))):
            round = solve_round(
                shape,
                level,
                target.field,
                target.assumption,
                max_pow_bits=parameters.pow_bits,
                max_queries=parameters.max_queries,
            )
            if round is None:
                return None
            rounds.append(round)
            size += round_proof_size(round, target.field, target.digest_size_bits).total
            if target.bounds.prune and best_size is not None and size >= best_size:
                self.candidates_pruned += 1
                return None

        protocol = Protocol(
            name=f"{target.variant.display_name} protocol",
            variant=target.variant,
            field=target.field,
            params=target.params,
            assumption=target.assumption,
            rounds=tuple(rounds),
            digest_size_bits=target.digest_size_bits,
        )
        if not protocol.meets_target(target.target_security_bits):
            return None
        return protocol

    def build(self) -> Protocol:
        target = self.target
        # Check the rate and batching before searching
        target.assumption.radius(target.params.log_rate)
        shape_rounds(target.variant, target.params, self._parameters((1,)))

        # No round can beat a random guess of a field element, even after grinding
        ceiling = target.field.effective_bits + target.max_pow_bits
        if target.target_security_bits > ceiling:
            raise SearchExhausted(
                f"{target.target_security_bits} bits exceeds what a {target.field.effective_bits}-bit "
                f"field with {target.max_pow_bits} bits of grinding can reach ({ceiling} bits)",
                parameter="target_security_bits",
            )

        best = None
        best_size = None
        capped = False
        for folding_factors in candidate_schedules(target.params.log_degree, target.bounds):
            if self.candidates_tried >= target.bounds.max_candidates:
                capped = True
                break
            self.candidates_tried += 1
            protocol = self._evaluate(folding_factors, best_size)
            if protocol is None:
                continue
            size = protocol.total_proof_size_bits()
            # Schedules come fewest rounds first, so ties keep the simpler one
            if best_size is None or size < best_size:
                logger.debug("new best schedule %s: %d bits", folding_factors, size)
                best, best_size = protocol, size

        logger.debug(
            "%d candidates tried, %d pruned", self.candidates_tried, self.candidates_pruned
        )
        if best is None:
            reason = "candidate cap reached" if capped else "search space exhausted"
            raise SearchExhausted(
                f"no {target.variant.display_name} configuration reaches "
                f"{target.target_security_bits} bits ({reason} after {self.candidates_tried} candidates)"
            )
        if capped:
            logger.warning(
                "stopped after %d candidates, the result may not be optimal", self.candidates_tried
            )
        logger.info(
            "%s: folding schedule %s, %d bits, %.1f bits of security",
            best.name,
            [r.folding_factor for r in best.rounds if not r.is_final],
            best_size,
            best.total_security_bits(),
        )
        return best


def build_protocol(target: BuilderTarget) -> Protocol:
    return ProtocolBuilder(target).build()
