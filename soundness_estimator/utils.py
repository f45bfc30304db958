import math

import numpy as np

from .errors import ArithmeticDomainError


def log2_sum(log_terms):
    """log2 of a sum of probabilities given by their log2 values."""
    terms = np.asarray([t for t in log_terms if t is not None], dtype=np.float64)
    if terms.size == 0:
        return -math.inf
    return float(np.logaddexp2.reduce(terms))



def log2_difference(log_a, log_b):
    """log2(2^log_a - 2^log_b), -inf when the difference is not positive."""
    if log_b == -math.inf:
        return log_a
    if log_b >= log_a:
        return -math.inf
    return log_a + math.log2(-math.expm1((log_b - log_a) * math.log(2)))



def security_bits_from_log2_error(log2_error):
    if math.isnan(log2_error) or log2_error > 0:
        raise ArithmeticDomainError(
            f"error probability 2^{log2_error} is outside (0, 1]"
        )
    return -log2_error



def display_size(bits):
    """Converts a number of bits into an appropriate unit."""
    if bits == 0:
        return "0B"

    size_bytes = bits / 8
    size_name = ["B", "KB", "MB", "GB", "TB", "PB", "EB", "ZB", "YB"]
    i = max(0, min(len(size_name) - 1, int(math.floor(math.log(size_bytes, 1024)))))
    p = 1024**i
    s = round(size_bytes / p, 1)
    return f"{s} {size_name[i]}"
