#
# Pytest Fixtures
#

# Standard library -----------------------------------------------------------------------------------------------------
import itertools
import locale

# Third-party ----------------------------------------------------------------------------------------------------------
import pytest


# Fixtures -------------------------------------------------------------------------------------------------------------

@pytest.fixture
def cyclic():
    """Plain object whose attribute refers back to itself."""

    class Node:
        pass

    node = Node()
    node.self = node
    return node


@pytest.fixture
def infinite():
    """Infinite generator of consecutive integers."""

    def gen():
        yield from itertools.count()

    return gen()


@pytest.fixture
def c_locale():
    """Pin number and date formatting to the C locale."""
    saved = {category: locale.setlocale(category) for category in (locale.LC_NUMERIC, locale.LC_TIME)}
    for category in saved:
        locale.setlocale(category, "C")
    yield
    for category, value in saved.items():
        locale.setlocale(category, value)
