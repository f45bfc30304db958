from dataclasses import dataclass

from .assumptions import SecurityAssumption
from .errors import InvalidParameters
from .field import Field
from .parameters import LowDegreeParameters, ProtocolVariant
from .rounds import ProofSizeBreakdown, Round, RoundCost, round_cost
from .utils import log2_sum, security_bits_from_log2_error


@dataclass(frozen=True)
class Protocol:
    """A fully shaped protocol instance: parameters plus its ordered rounds.

    Totals are recomputed from the rounds on every call.
    """

    name: str
    variant: ProtocolVariant
    field: Field
    params: LowDegreeParameters
    assumption: SecurityAssumption
    rounds: tuple[Round, ...]
    digest_size_bits: int

    def __post_init__(self):
        object.__setattr__(self, "rounds", tuple(self.rounds))
        if not self.rounds:
            raise InvalidParameters(f"{self.name} has no rounds", parameter="rounds")

    def round_costs(self) -> list[RoundCost]:
        return [
            round_cost(r, self.field, self.assumption, self.digest_size_bits)
            for r in self.rounds
        ]

    def round_breakdown(self) -> list[tuple[Round, RoundCost]]:
        return list(zip(self.rounds, self.round_costs()))

    def proof_size_breakdown(self) -> ProofSizeBreakdown:
        # The initial commitment is a single digest
        total = ProofSizeBreakdown(merkle_digest_bits=self.digest_size_bits)
        for cost in self.round_costs():
            total = total + cost.proof_size
        return total

    def total_proof_size_bits(self) -> int:
        return self.proof_size_breakdown().total

    def total_log2_error(self) -> float:
        # Union bound over the rounds
        return min(0.0, log2_sum(cost.log2_error for cost in self.round_costs()))

    def total_security_bits(self) -> float:
        return security_bits_from_log2_error(self.total_log2_error())

    def meets_target(self, target_bits: float) -> bool:
        return self.total_security_bits() >= target_bits

    def weakest_round(self) -> tuple[Round, RoundCost]:
        return max(self.round_breakdown(), key=lambda pair: pair[1].log2_error)

    @property
    def num_folding_rounds(self) -> int:
        return sum(1 for r in self.rounds if not r.is_final)

    @property
    def final_log_degree(self) -> int:
        return self.rounds[-1].folded_log_degree
