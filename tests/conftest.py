"""
Pytest fixtures shared by the test suite.

Provides the small example automata used throughout the tests.
"""

import pytest

from automaton import Automaton


SIMPLE_TEXT = "q0,q1\na,b\nq0\nq1\nq0,a=>q1\n"

BRANCHING_TEXT = "q0,q1,q2\na\nq0\nq2\nq0,a=>q1\nq0,a=>q2\n"

# Accepts every word over {a,b} whose second-to-last symbol is "a".
SECOND_LAST_TEXT = """p,q,r
a,b
p
r
p,a=>p,q
p,b=>p
q,a=>r
q,b=>r
"""


@pytest.fixture
def simple_nfa():
    """Two states, a single transition q0 -a-> q1."""
    return Automaton.from_string(SIMPLE_TEXT)


@pytest.fixture
def branching_nfa():
    """q0 -a-> q1 and q0 -a-> q2, written on separate lines."""
    return Automaton.from_string(BRANCHING_TEXT)


@pytest.fixture
def second_last_nfa():
    return Automaton.from_string(SECOND_LAST_TEXT)


@pytest.fixture
def automaton_file(tmp_path):
    """Write ``SIMPLE_TEXT`` to a temporary file and return its path."""
    path = tmp_path / "simple.nfa"
    path.write_text(SIMPLE_TEXT, encoding="utf-8")
    return path
