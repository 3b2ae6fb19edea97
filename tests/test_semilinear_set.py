from overapprox.alphabet import EPSILON
from overapprox.config import synthesis_config
from overapprox.errors import SizeLimitExceeded
from overapprox.parikh import ParikhVector
from overapprox.semilinear import (
    EMPTY,
    LinearSet,
    NULL,
    SemilinearSet,
)

import pytest


def test_zero_period_is_filtered():
    linear_set = LinearSet(base=ParikhVector.of('a'), periods=frozenset((ParikhVector(), ParikhVector.of('b'))))
    assert linear_set.periods == frozenset((ParikhVector.of('b'),))
    assert LinearSet.NULL.kleene_plus() == LinearSet.NULL


def test_linear_set_string_representation():
    assert str(LinearSet.NULL) == '({}+[]*)'
    assert str(LinearSet.containing_event('a', 2).kleene_plus()) == '({a=2}+[{a=2}]*)'


def test_semilinear_set_string_representation():
    semilinear_set = NULL.union(SemilinearSet.containing(LinearSet.containing_event('a', 2).kleene_plus()))
    assert str(semilinear_set) == '[({}+[]*), ({a=2}+[{a=2}]*)]'
    assert str(EMPTY) == '[]'


def test_kleene_star_of_single_event_set():
    semilinear_set = SemilinearSet.containing_event('a', 2).kleene_star()
    assert str(semilinear_set) == '[({}+[]*), ({a=2}+[{a=2}]*)]'


@pytest.mark.parametrize('count', (0, 1, 3))
def test_containing_event(count: int):
    linear_set = LinearSet.containing_event('a', count)
    assert linear_set.base.get('a') == count
    assert not linear_set.periods
    assert SemilinearSet.containing_event('a', count) == SemilinearSet.containing(linear_set)


def test_containing_event_rejects_invalid_arguments():
    with pytest.raises(ValueError):
        LinearSet.containing_event('a', -1)
    with pytest.raises(ValueError):
        SemilinearSet.containing_event(EPSILON)


def test_linear_set_concatenation():
    first = LinearSet(base=ParikhVector.of('a'), periods=frozenset((ParikhVector.of('b'),)))
    second = LinearSet(base=ParikhVector.of('c'), periods=frozenset((ParikhVector.of('a'),)))

    concatenation = first.concatenate(second)
    assert concatenation.base == ParikhVector.from_word('ac')
    assert concatenation.periods == frozenset((ParikhVector.of('a'), ParikhVector.of('b')))


def test_union_identities():
    a = SemilinearSet.containing_event('a')
    b = SemilinearSet.containing_event('b')

    assert a.union(EMPTY) == a
    assert a.union(a) == a
    assert a.union(b) == b.union(a)
    assert len(a.union(b)) == 2


def test_concatenation_identities():
    semilinear_set = SemilinearSet.containing_event('a').union(SemilinearSet.containing_event('b', 2).kleene_star())

    assert semilinear_set.concatenate(NULL) == semilinear_set
    assert NULL.concatenate(semilinear_set) == semilinear_set
    assert semilinear_set.concatenate(EMPTY) == EMPTY


def test_concatenation_distributes_over_union():
    a = SemilinearSet.containing_event('a')
    b = SemilinearSet.containing_event('b')
    c = SemilinearSet.containing_event('c')

    assert a.concatenate(b.union(c)) == a.concatenate(b).union(a.concatenate(c))


def test_kleene_star_enumerates_power_set():
    a = SemilinearSet.containing_event('a')
    b = SemilinearSet.containing_event('b')

    star = a.union(b).kleene_star()

    a_plus = LinearSet.containing_event('a').kleene_plus()
    b_plus = LinearSet.containing_event('b').kleene_plus()
    expected = SemilinearSet(frozenset((LinearSet.NULL, a_plus, b_plus, a_plus.concatenate(b_plus))))
    assert star == expected
    assert EMPTY.kleene_star() == NULL


def test_kleene_star_size_limit(monkeypatch):
    monkeypatch.setattr(synthesis_config, 'max_kleene_star_members', 1)
    semilinear_set = SemilinearSet.containing_event('a').union(SemilinearSet.containing_event('b'))
    with pytest.raises(SizeLimitExceeded):
        semilinear_set.kleene_star()


@pytest.mark.parametrize(
    ('word', 'expected_result'),
    (
        ('a', True),
        ('aaa', True),
        ('aaaaab', True),
        ('aa', False),
        ('', False),
        ('ab', False),
        ('b', False),
    )
)
def test_linear_set_membership(word: str, expected_result: bool):
    # a + (aa)* + (aaaab)*
    linear_set = LinearSet(base=ParikhVector.of('a'),
                           periods=frozenset((ParikhVector.of('a', 2), ParikhVector.from_word('aaaab'))))
    assert linear_set.contains(ParikhVector.from_word(word)) == expected_result


def test_membership_requires_nonnegative_periods():
    linear_set = LinearSet(base=ParikhVector(), periods=frozenset((ParikhVector.of('a', -1),)))
    with pytest.raises(ValueError):
        linear_set.contains(ParikhVector.of('a'))


def test_semilinear_set_membership():
    semilinear_set = NULL.union(SemilinearSet.containing_event('b', 2).kleene_star())
    assert semilinear_set.contains(ParikhVector())
    assert semilinear_set.contains(ParikhVector.of('b', 4))
    assert not semilinear_set.contains(ParikhVector.of('b', 3))
    assert not EMPTY.contains(ParikhVector())
