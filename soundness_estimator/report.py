from .protocol import Protocol
from .utils import display_size


def format_config_summary(protocol: Protocol) -> list[str]:
    lines = [
        f"{protocol.name}",
        f"Field: {protocol.field}, {protocol.params}",
        f"Security assumption: {protocol.assumption}, digest: {protocol.digest_size_bits} bits",
    ]
    for r in protocol.rounds:
        if r.is_final:
            lines.append(
                f"Final round: polynomial of degree 2^{r.log_degree}, domain_size: 2^{r.domain_log_size}, "
                f"rate: 2^-{r.log_rate}, num_queries: {r.num_queries}, pow_bits: {r.pow_bits}"
            )
            continue
        lines.append(
            f"Round {r.index}: folding factor: {r.folding_factor}, domain_size: 2^{r.domain_log_size}, "
            f"rate: 2^-{r.log_rate}, num_queries: {r.num_queries}, ood_samples: {r.ood_samples}, "
            f"pow_bits: {r.pow_bits}"
        )
    return lines


def format_rbr_summary(protocol: Protocol) -> list[str]:
    lines = [
        "------------------------------------",
        "Round by round soundness analysis:",
        "------------------------------------",
    ]
    for r, cost in protocol.round_breakdown():
        lines.append(
            f"{cost.security_bits:.1f} bits -- round {r.index}, pow: {r.pow_bits}, "
            f"size: {display_size(cost.proof_size.total)}"
        )
    weakest, _ = protocol.weakest_round()
    lines.append(
        f"Total: {protocol.total_security_bits():.1f} bits (weakest round: {weakest.index})"
    )
    return lines


def format_proof_size(protocol: Protocol) -> list[str]:
    breakdown = protocol.proof_size_breakdown()
    return [
        f"Proof size: {display_size(breakdown.total)} ({breakdown.total} bits)",
        f"  merkle digests: {display_size(breakdown.merkle_digest_bits)}",
        f"  merkle paths: {display_size(breakdown.merkle_path_bits)}",
        f"  field elements: {display_size(breakdown.opened_field_elements_bits)}",
        f"  ood answers: {display_size(breakdown.ood_bits)}",
    ]


def format_protocol(protocol: Protocol) -> str:
    lines = format_config_summary(protocol)
    lines.extend(format_rbr_summary(protocol))
    lines.extend(format_proof_size(protocol))
    return "\n".join(lines)
