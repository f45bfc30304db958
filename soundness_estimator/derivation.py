"""Round shaping for the four protocol variants.

The variants only differ in how their rounds are shaped (domains, rates, OOD
sampling, sumcheck messages). Each shaping strategy is a plain function
registered under its ProtocolVariant; derive_protocol then fills the shapes
with queries, grinding and OOD samples.
"""

import logging

from .assumptions import SecurityAssumption
from .errors import InvalidParameters, SearchExhausted
from .field import Field
from .parameters import (
    LowDegreeParameters,
    ProtocolParameters,
    ProtocolVariant,
    domain_shift_rates,
)
from .protocol import Protocol
from .rounds import Combination, Round, RoundShape, solve_round

logger = logging.getLogger(__name__)

# Keeps a union of per-round budgets from landing a hair under the target
LEVEL_SLACK = 1e-6

SUPPORTS_BATCHING = {
    ProtocolVariant.FRI: False,
    ProtocolVariant.STIR: True,
    ProtocolVariant.WHIR: True,
    ProtocolVariant.BASEFOLD: False,
}


def _check_schedule(
    variant: ProtocolVariant, ldt: LowDegreeParameters, parameters: ProtocolParameters
):
    folding_factors = parameters.folding_factors
    if not folding_factors:
        raise InvalidParameters(
            f"{variant.display_name} needs at least one folding round",
            parameter="folding_factors",
        )
    if ldt.batch_size > 1 and not SUPPORTS_BATCHING[variant]:
        raise InvalidParameters(
            f"{variant.display_name} does not support batching, got batch_size={ldt.batch_size}",
            parameter="batch_size",
        )

    # We cannot fold too much
    remaining = ldt.log_degree
    for index, folding_factor in enumerate(folding_factors):
        if folding_factor <= 0:
            raise InvalidParameters(
                "folding factors should be non zero",
                round_index=index,
                parameter="folding_factor",
            )
        if folding_factor > remaining:
            raise InvalidParameters(
                f"folding factor {folding_factor} exceeds the remaining degree 2^{remaining}",
                round_index=index,
                parameter="folding_factor",
            )
        remaining -= folding_factor

    if parameters.log_rates is not None:
        if len(parameters.log_rates) != len(folding_factors):
            raise InvalidParameters(
                f"{len(parameters.log_rates)} rates given for {len(folding_factors)} folding rounds",
                parameter="log_rates",
            )
        for index, log_rate in enumerate(parameters.log_rates):
            if log_rate <= 0:
                raise InvalidParameters(
                    f"rate 2^-{log_rate} must be below 1",
                    round_index=index + 1,
                    parameter="log_rates",
                )


def _final_shape(index: int, log_degree: int, log_rate: int) -> RoundShape:
    # Send the folded polynomial in the clear and check it against the last oracle
    return RoundShape(
        index=index,
        domain_log_size=log_degree + log_rate,
        folding_factor=0,
        log_degree=log_degree,
        log_rate=log_rate,
        message_elements=1 << log_degree,
        is_final=True,
    )


def _sumcheck_degree(ldt: LowDegreeParameters) -> int:
    return max(2, ldt.constraint_degree)


def fri_shapes(ldt: LowDegreeParameters, parameters: ProtocolParameters) -> list[RoundShape]:
    shapes = []
    log_degree = ldt.log_degree
    for index, folding_factor in enumerate(parameters.folding_factors):
        shapes.append(
            RoundShape(
                index=index,
                domain_log_size=log_degree + ldt.log_rate,
                folding_factor=folding_factor,
                log_degree=log_degree,
                log_rate=ldt.log_rate,
            )
        )
        log_degree -= folding_factor
    shapes.append(_final_shape(len(shapes), log_degree, ldt.log_rate))
    return shapes


def basefold_shapes(ldt: LowDegreeParameters, parameters: ProtocolParameters) -> list[RoundShape]:
    # Each variable folded is one sumcheck round, never any OOD sample
    sumcheck_degree = _sumcheck_degree(ldt)
    shapes = []
    log_degree = ldt.log_degree
    for index, folding_factor in enumerate(parameters.folding_factors):
        shapes.append(
            RoundShape(
                index=index,
                domain_log_size=log_degree + ldt.log_rate,
                folding_factor=folding_factor,
                log_degree=log_degree,
                log_rate=ldt.log_rate,
                message_elements=folding_factor * (sumcheck_degree + 1),
                sumcheck_degree=sumcheck_degree,
            )
        )
        log_degree -= folding_factor
    shapes.append(_final_shape(len(shapes), log_degree, ldt.log_rate))
    return shapes


def _shifting_shapes(
    ldt: LowDegreeParameters,
    parameters: ProtocolParameters,
    ood_in_first_round: bool,
    sumcheck_degree: int,
    combination: Combination,
) -> list[RoundShape]:
    folding_factors = parameters.folding_factors
    log_rates = (
        list(parameters.log_rates)
        if parameters.log_rates is not None
        else domain_shift_rates(ldt.log_rate, folding_factors)
    )

    shapes = []
    log_degree = ldt.log_degree
    log_rate = ldt.log_rate
    for index, folding_factor in enumerate(folding_factors):
        shapes.append(
            RoundShape(
                index=index,
                domain_log_size=log_degree + log_rate,
                folding_factor=folding_factor,
                log_degree=log_degree,
                log_rate=log_rate,
                uses_ood=parameters.ood and (index > 0 or ood_in_first_round),
                # The first oracle commits to every function of the batch
                batch_size=ldt.batch_size if index == 0 else 1,
                message_elements=folding_factor * (sumcheck_degree + 1) if sumcheck_degree else 0,
                sumcheck_degree=sumcheck_degree,
                # Every answer is merged into the next oracle
                combination=combination,
            )
        )
        # Queries are set w.r.t. the old rate, the next oracle uses the new one
        log_degree -= folding_factor
        log_rate = log_rates[index]
    shapes.append(_final_shape(len(shapes), log_degree, log_rate))
    return shapes


def stir_shapes(ldt: LowDegreeParameters, parameters: ProtocolParameters) -> list[RoundShape]:
    return _shifting_shapes(
        ldt,
        parameters,
        ood_in_first_round=False,
        sumcheck_degree=0,
        combination=Combination.DEGREE_CORRECTION,
    )


def whir_shapes(ldt: LowDegreeParameters, parameters: ProtocolParameters) -> list[RoundShape]:
    return _shifting_shapes(
        ldt,
        parameters,
        ood_in_first_round=True,
        sumcheck_degree=_sumcheck_degree(ldt),
        combination=Combination.CONSTRAINTS,
    )


SHAPING_STRATEGIES = {
    ProtocolVariant.FRI: fri_shapes,
    ProtocolVariant.STIR: stir_shapes,
    ProtocolVariant.WHIR: whir_shapes,
    ProtocolVariant.BASEFOLD: basefold_shapes,
}


def shape_rounds(
    variant: ProtocolVariant, ldt: LowDegreeParameters, parameters: ProtocolParameters
) -> list[RoundShape]:
    _check_schedule(variant, ldt, parameters)
    shapes = SHAPING_STRATEGIES[variant](ldt, parameters)
    for shape in shapes:
        logger.debug("%s %s", variant.display_name, shape)
    return shapes


def round_levels(parameters: ProtocolParameters, num_rounds: int) -> list[float]:
    return [
        level + LEVEL_SLACK
        for level in parameters.budget_split.round_levels(parameters.security_level, num_rounds)
    ]


def _fixed_round(
    shape: RoundShape,
    parameters: ProtocolParameters,
    field: Field,
    assumption: SecurityAssumption,
) -> Round:
    ood_samples = 0
    if shape.uses_ood:
        ood_samples = assumption.ood_samples(
            parameters.security_level, shape.log_degree, shape.log_rate, field.effective_bits
        )
        if ood_samples is None:
            raise SearchExhausted(
                f"no number of OOD samples reaches {parameters.security_level} bits",
                round_index=shape.index,
                parameter="ood_samples",
            )
    return shape.to_round(parameters.num_queries, parameters.pow_bits, ood_samples)


def derive_protocol(
    variant: ProtocolVariant,
    field: Field,
    ldt: LowDegreeParameters,
    assumption: SecurityAssumption,
    parameters: ProtocolParameters,
) -> Protocol:
    """Shape the rounds of `variant` and size their queries, grinding and OOD samples."""
    assumption.radius(ldt.log_rate)
    shapes = shape_rounds(variant, ldt, parameters)

    if parameters.num_queries is not None:
        rounds = [_fixed_round(shape, parameters, field, assumption) for shape in shapes]
    else:
        rounds = []
        for shape, level in zip(shapes, round_levels(parameters, len(shapes))):
            round = solve_round(
                shape,
                level,
                field,
                assumption,
                max_pow_bits=parameters.pow_bits,
                max_queries=parameters.max_queries,
            )
            if round is None:
                raise SearchExhausted(
                    f"no queries up to {parameters.max_queries} with at most "
                    f"{parameters.pow_bits} bits of grinding reach {level:.1f} bits",
                    round_index=shape.index,
                )
            rounds.append(round)

    return Protocol(
        name=f"{variant.display_name} protocol",
        variant=variant,
        field=field,
        params=ldt,
        assumption=assumption,
        rounds=tuple(rounds),
        digest_size_bits=parameters.digest_size_bits,
    )
