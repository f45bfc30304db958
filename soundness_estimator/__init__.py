from .assumptions import SecurityAssumption
from .builder import BuilderTarget, SearchBounds, build_protocol
from .derivation import derive_protocol
from .errors import ArithmeticDomainError, EstimatorError, InvalidParameters, SearchExhausted
from .field import Field
from .parameters import BudgetSplit, LowDegreeParameters, ProtocolParameters, ProtocolVariant
from .protocol import Protocol
from .rounds import Combination, ProofSizeBreakdown, Round, RoundCost, round_cost

__all__ = [
    "ArithmeticDomainError",
    "BudgetSplit",
    "BuilderTarget",
    "Combination",
    "EstimatorError",
    "Field",
    "InvalidParameters",
    "LowDegreeParameters",
    "ProofSizeBreakdown",
    "Protocol",
    "ProtocolParameters",
    "ProtocolVariant",
    "Round",
    "RoundCost",
    "SearchBounds",
    "SearchExhausted",
    "SecurityAssumption",
    "build_protocol",
    "derive_protocol",
    "round_cost",
]
