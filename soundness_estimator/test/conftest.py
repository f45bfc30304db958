import pytest

from soundness_estimator.assumptions import SecurityAssumption
from soundness_estimator.constants import GOLDILOCKS_2, GOLDILOCKS_3
from soundness_estimator.parameters import LowDegreeParameters


@pytest.fixture
def goldilocks_2():
    return GOLDILOCKS_2


@pytest.fixture
def goldilocks_3():
    return GOLDILOCKS_3


@pytest.fixture
def ldt_parameters():
    return LowDegreeParameters(log_degree=20, log_rate=2)


ALL_ASSUMPTIONS = list(SecurityAssumption)
