import numpy as np
import pytest

from cellgene import build_catalog, build_symbol_table


@pytest.fixture
def catalog():
    return build_catalog()


@pytest.fixture
def table(catalog):
    return build_symbol_table(catalog)


@pytest.fixture
def rng():
    return np.random.default_rng(1234)
