import pytest

from soundness_estimator.assumptions import SecurityAssumption
from soundness_estimator.derivation import derive_protocol, shape_rounds
from soundness_estimator.errors import InvalidParameters
from soundness_estimator.parameters import (
    BudgetSplit,
    LowDegreeParameters,
    ProtocolParameters,
    ProtocolVariant,
    domain_shift_rates,
)

from .conftest import ALL_ASSUMPTIONS

UNIQUE = SecurityAssumption.UNIQUE_DECODING
JOHNSON = SecurityAssumption.JOHNSON_BOUND


def test_fri_folds_down_to_a_constant(goldilocks_2, ldt_parameters):
    protocol = derive_protocol(
        ProtocolVariant.FRI,
        goldilocks_2,
        ldt_parameters,
        UNIQUE,
        ProtocolParameters.fixed_folding(20, 2),
    )
    folding_rounds = [r for r in protocol.rounds if not r.is_final]
    assert len(folding_rounds) == 10
    assert protocol.num_folding_rounds == 10
    domains = [r.domain_log_size for r in protocol.rounds]
    assert domains == list(range(22, 0, -2))
    assert all(a > b for a, b in zip(domains, domains[1:]))
    assert protocol.rounds[-1].is_final
    assert protocol.rounds[-1].log_degree == 0
    assert protocol.final_log_degree == 0
    assert protocol.meets_target(100)


def test_whir_ood_beats_stir_without_ood(goldilocks_3, ldt_parameters):
    def fixed(**kwargs):
        return ProtocolParameters.fixed_folding(
            20, 2, num_queries=30, pow_bits=0, security_level=100, **kwargs
        )

    whir = derive_protocol(ProtocolVariant.WHIR, goldilocks_3, ldt_parameters, JOHNSON, fixed())
    stir = derive_protocol(
        ProtocolVariant.STIR, goldilocks_3, ldt_parameters, JOHNSON, fixed(ood=False)
    )
    assert whir.total_security_bits() > stir.total_security_bits()
    assert whir.proof_size_breakdown().ood_bits > 0
    assert stir.proof_size_breakdown().ood_bits == 0
    assert all(not r.uses_ood for r in stir.rounds)


def test_fri_rejects_batching(goldilocks_2):
    ldt = LowDegreeParameters(log_degree=20, log_rate=2, batch_size=4)
    with pytest.raises(InvalidParameters) as info:
        derive_protocol(
            ProtocolVariant.FRI, goldilocks_2, ldt, UNIQUE, ProtocolParameters.fixed_folding(20, 2)
        )
    assert info.value.parameter == "batch_size"


def test_basefold_rejects_batching(goldilocks_2):
    ldt = LowDegreeParameters(log_degree=20, log_rate=2, batch_size=2)
    with pytest.raises(InvalidParameters):
        shape_rounds(ProtocolVariant.BASEFOLD, ldt, ProtocolParameters.fixed_folding(20, 2))


@pytest.mark.parametrize("variant", [ProtocolVariant.STIR, ProtocolVariant.WHIR])
def test_batched_commitment_opens_every_function(goldilocks_3, variant):
    single = LowDegreeParameters(log_degree=20, log_rate=2)
    batched = LowDegreeParameters(log_degree=20, log_rate=2, batch_size=4)
    parameters = ProtocolParameters.fixed_folding(20, 4, num_queries=40, pow_bits=0)
    plain = derive_protocol(variant, goldilocks_3, single, UNIQUE, parameters)
    protocol = derive_protocol(variant, goldilocks_3, batched, UNIQUE, parameters)
    assert protocol.rounds[0].batch_size == 4
    assert all(r.batch_size == 1 for r in protocol.rounds[1:])
    assert protocol.total_proof_size_bits() > plain.total_proof_size_bits()


def test_rejects_rate_one(goldilocks_2):
    with pytest.raises(InvalidParameters):
        LowDegreeParameters(log_degree=20, log_rate=0)


def test_folding_past_the_degree_names_the_round(ldt_parameters):
    parameters = ProtocolParameters(folding_factors=(4, 4, 4, 4, 4, 4))
    with pytest.raises(InvalidParameters) as info:
        shape_rounds(ProtocolVariant.STIR, ldt_parameters, parameters)
    assert info.value.round_index == 5
    assert info.value.parameter == "folding_factor"


def test_zero_folding_factor_names_the_round(ldt_parameters):
    with pytest.raises(InvalidParameters) as info:
        shape_rounds(ProtocolVariant.FRI, ldt_parameters, ProtocolParameters(folding_factors=(2, 0)))
    assert info.value.round_index == 1


def test_empty_schedule_is_rejected(ldt_parameters):
    with pytest.raises(InvalidParameters):
        shape_rounds(ProtocolVariant.WHIR, ldt_parameters, ProtocolParameters(folding_factors=()))


def test_mismatched_rates_are_rejected(ldt_parameters):
    parameters = ProtocolParameters(folding_factors=(4, 4), log_rates=(3,))
    with pytest.raises(InvalidParameters) as info:
        shape_rounds(ProtocolVariant.STIR, ldt_parameters, parameters)
    assert info.value.parameter == "log_rates"


@pytest.mark.parametrize("variant", list(ProtocolVariant))
@pytest.mark.parametrize("assumption", ALL_ASSUMPTIONS)
@pytest.mark.parametrize("folding_factor", [2, 3, 4])
def test_schedule_stays_within_the_degree(goldilocks_3, ldt_parameters, variant, assumption, folding_factor):
    protocol = derive_protocol(
        variant,
        goldilocks_3,
        ldt_parameters,
        assumption,
        ProtocolParameters.fixed_folding(20, folding_factor),
    )
    assert sum(r.folding_factor for r in protocol.rounds) <= ldt_parameters.log_degree
    assert protocol.final_log_degree >= 0
    assert protocol.final_log_degree == 20 % folding_factor
    assert [r.index for r in protocol.rounds] == list(range(len(protocol.rounds)))
    assert protocol.meets_target(100)


@pytest.mark.parametrize("variant", list(ProtocolVariant))
def test_derivation_is_deterministic(goldilocks_3, ldt_parameters, variant):
    def derive():
        return derive_protocol(
            variant, goldilocks_3, ldt_parameters, JOHNSON, ProtocolParameters.fixed_folding(20, 4)
        )

    first, second = derive(), derive()
    assert first.rounds == second.rounds
    assert first.total_proof_size_bits() == second.total_proof_size_bits()
    assert first.total_security_bits() == second.total_security_bits()


def test_stir_rate_improves_every_round(ldt_parameters):
    shapes = shape_rounds(
        ProtocolVariant.STIR, ldt_parameters, ProtocolParameters.fixed_folding(20, 2)
    )
    assert [s.log_rate for s in shapes] == list(range(2, 13))
    # The domain only halves while the degree drops by 4
    assert [s.domain_log_size for s in shapes] == list(range(22, 11, -1))


def test_explicit_rates_are_followed(ldt_parameters):
    parameters = ProtocolParameters.fixed_rate(2, (4, 4, 4))
    shapes = shape_rounds(ProtocolVariant.STIR, ldt_parameters, parameters)
    assert [s.log_rate for s in shapes] == [2, 2, 2, 2]

    parameters = ProtocolParameters.fixed_domain_shift(2, (4, 4, 4))
    shapes = shape_rounds(ProtocolVariant.WHIR, ldt_parameters, parameters)
    assert [s.log_rate for s in shapes] == [2, 5, 8, 11]


def test_ood_placement(ldt_parameters):
    parameters = ProtocolParameters.fixed_folding(20, 4)
    stir = shape_rounds(ProtocolVariant.STIR, ldt_parameters, parameters)
    whir = shape_rounds(ProtocolVariant.WHIR, ldt_parameters, parameters)
    fri = shape_rounds(ProtocolVariant.FRI, ldt_parameters, parameters)
    basefold = shape_rounds(ProtocolVariant.BASEFOLD, ldt_parameters, parameters)

    assert not stir[0].uses_ood
    assert all(s.uses_ood for s in stir[1:-1])
    assert all(s.uses_ood for s in whir[:-1])
    assert not stir[-1].uses_ood and not whir[-1].uses_ood
    assert not any(s.uses_ood for s in fri + basefold)


def test_sumcheck_messages(ldt_parameters):
    parameters = ProtocolParameters.fixed_folding(20, 4)
    basefold = shape_rounds(ProtocolVariant.BASEFOLD, ldt_parameters, parameters)
    assert [s.message_elements for s in basefold[:-1]] == [12] * 5
    assert basefold[-1].message_elements == 1

    cubic = LowDegreeParameters(log_degree=20, log_rate=2, constraint_degree=3)
    whir = shape_rounds(ProtocolVariant.WHIR, cubic, parameters)
    assert whir[0].sumcheck_degree == 3
    assert whir[0].message_elements == 16


def test_unique_decoding_needs_no_ood(goldilocks_3, ldt_parameters):
    protocol = derive_protocol(
        ProtocolVariant.WHIR,
        goldilocks_3,
        ldt_parameters,
        UNIQUE,
        ProtocolParameters.fixed_folding(20, 4),
    )
    assert protocol.proof_size_breakdown().ood_bits == 0


@pytest.mark.parametrize("budget_split", list(BudgetSplit))
def test_budget_splits_meet_the_level(goldilocks_3, ldt_parameters, budget_split):
    protocol = derive_protocol(
        ProtocolVariant.WHIR,
        goldilocks_3,
        ldt_parameters,
        JOHNSON,
        ProtocolParameters.fixed_folding(20, 4, budget_split=budget_split),
    )
    assert protocol.meets_target(100)


def test_fixed_queries_are_used_verbatim(goldilocks_3, ldt_parameters):
    protocol = derive_protocol(
        ProtocolVariant.FRI,
        goldilocks_3,
        ldt_parameters,
        UNIQUE,
        ProtocolParameters.fixed_folding(20, 4, num_queries=17, pow_bits=3),
    )
    assert {r.num_queries for r in protocol.rounds} == {17}
    assert {r.pow_bits for r in protocol.rounds} == {3}


def test_stir_rounds_pay_for_degree_correction(goldilocks_2, ldt_parameters):
    protocol = derive_protocol(
        ProtocolVariant.STIR,
        goldilocks_2,
        ldt_parameters,
        JOHNSON,
        ProtocolParameters.fixed_folding(20, 4, num_queries=60, pow_bits=0),
    )
    for r, cost in protocol.round_breakdown()[:-1]:
        correction = JOHNSON.log2_degree_correction_error(
            r.log_degree, r.log_rate, 128, r.num_queries + r.ood_samples
        )
        assert cost.security_bits <= -correction

    # Degree 2^16 at rate 2^-5, 60 queries and 2 OOD samples folded with arity 2^6
    second, cost = protocol.round_breakdown()[1]
    assert (second.log_degree, second.log_rate, second.ood_samples) == (16, 5, 2)
    assert cost.security_bits == pytest.approx(-JOHNSON.log2_prox_gaps_error(16, 5, 128, 6), abs=0.01)
    assert cost.security_bits == pytest.approx(69.2, abs=0.05)


def test_whir_rounds_pay_for_constraint_combination(goldilocks_2, ldt_parameters):
    protocol = derive_protocol(
        ProtocolVariant.WHIR,
        goldilocks_2,
        ldt_parameters,
        JOHNSON,
        ProtocolParameters.fixed_folding(20, 4, num_queries=60, pow_bits=0),
    )
    for r, cost in protocol.round_breakdown()[:-1]:
        combination = JOHNSON.log2_constraint_combination_error(
            r.log_degree, r.log_rate, 128, r.num_queries + r.ood_samples
        )
        assert cost.security_bits <= -combination


def test_domain_shift_is_the_default_schedule(ldt_parameters):
    assert ProtocolParameters.fixed_domain_shift(2, (4, 4, 4)).log_rates == tuple(
        domain_shift_rates(2, (4, 4, 4))
    )
    default = shape_rounds(
        ProtocolVariant.STIR, ldt_parameters, ProtocolParameters(folding_factors=(4, 4, 4))
    )
    explicit = shape_rounds(
        ProtocolVariant.STIR, ldt_parameters, ProtocolParameters.fixed_domain_shift(2, (4, 4, 4))
    )
    assert default == explicit
