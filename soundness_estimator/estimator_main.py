import logging

from .assumptions import SecurityAssumption
from .builder import BuilderTarget, SearchBounds, build_protocol
from .constants import FIELD_PRESETS
from .derivation import derive_protocol
from .errors import InvalidParameters
from .parameters import DemoParameters, LowDegreeParameters, ProtocolParameters, ProtocolVariant
from .protocol import Protocol
from .report import format_protocol

logger = logging.getLogger(__name__)


def lookup_field(name: str):
    try:
        return FIELD_PRESETS[name.lower()]
    except KeyError:
        raise InvalidParameters(
            f"unknown field '{name}', expected one of {', '.join(FIELD_PRESETS)}",
            parameter="field",
        ) from None


def estimate(demo: DemoParameters, variant: ProtocolVariant, build: bool = False) -> Protocol:
    field = lookup_field(demo.field)
    assumption = SecurityAssumption.from_string(demo.assumption)
    ldt_parameters = LowDegreeParameters(
        log_degree=demo.log_degree,
        log_rate=demo.log_rate,
        batch_size=demo.batch_size,
        constraint_degree=demo.constraint_degree,
    )

    if build:
        target = BuilderTarget(
            target_security_bits=demo.security_level,
            variant=variant,
            field=field,
            params=ldt_parameters,
            assumption=assumption,
            bounds=SearchBounds(max_pow_bits=demo.pow_bits),
            digest_size_bits=demo.digest_size_bits,
        )
        return build_protocol(target)

    protocol_parameters = ProtocolParameters.fixed_folding(
        demo.log_degree,
        demo.folding_factor,
        demo.stopping_log_degree,
        security_level=demo.security_level,
        pow_bits=demo.pow_bits,
        digest_size_bits=demo.digest_size_bits,
    )
    return derive_protocol(variant, field, ldt_parameters, assumption, protocol_parameters)


def run_estimator(demo: DemoParameters, build: bool = False) -> list[str]:
    reports = []
    for name in demo.protocols:
        variant = ProtocolVariant.from_string(name)
        logger.info("estimating %s", variant.display_name)
        protocol = estimate(demo, variant, build)
        reports.append(format_protocol(protocol))
    return reports
