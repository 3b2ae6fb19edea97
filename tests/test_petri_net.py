from overapprox.petri_net import PetriNet

import pytest


@pytest.fixture
def producer_consumer_net() -> PetriNet:
    """produce puts two tokens into p0, consume takes one from p0 and one from p1 (marked once)."""
    net = PetriNet(name='producer_consumer')
    net.create_transition('produce')
    net.create_transition('consume')
    buffer = net.create_place()
    budget = net.create_place(initial_marking=1)

    net.create_flow('produce', buffer, 2)
    net.create_flow(buffer, 'consume', 1)
    net.create_flow(budget, 'consume', 1)
    return net


def test_places_and_transitions(producer_consumer_net: PetriNet):
    net = producer_consumer_net
    assert net.places == [0, 1]
    assert net.transitions == ['produce', 'consume']
    assert net.initial_marking == {0: 0, 1: 1}

    assert net.preset('consume') == {0: 1, 1: 1}
    assert net.postset('produce') == {0: 2}
    assert net.preset('produce') == {}
    assert net.preset_of_place(0) == {'produce': 2}
    assert net.postset_of_place(0) == {'consume': 1}
    assert net.preset_of_place(1) == {}


def test_transitions_are_not_duplicated():
    net = PetriNet()
    assert net.create_transition('a') == 'a'
    net.create_transition('a')
    assert net.transitions == ['a']


def test_firing(producer_consumer_net: PetriNet):
    net = producer_consumer_net
    marking = dict(net.initial_marking)

    assert not net.is_enabled(marking, 'consume')
    with pytest.raises(ValueError):
        net.fire(marking, 'consume')

    marking = net.fire(marking, 'produce')
    assert marking == {0: 2, 1: 1}
    marking = net.fire(marking, 'consume')
    assert marking == {0: 1, 1: 0}
    assert not net.is_enabled(marking, 'consume')


@pytest.mark.parametrize(
    ('word', 'accepted'),
    (
        ([], True),
        (['produce'], True),
        (['produce', 'consume'], True),
        (['produce', 'produce', 'consume'], True),
        (['consume'], False),
        (['produce', 'consume', 'consume'], False),
        (['unknown'], False),
    )
)
def test_accepts(producer_consumer_net: PetriNet, word, accepted: bool):
    assert producer_consumer_net.accepts(word) == accepted


def test_zero_weight_arcs_are_skipped():
    net = PetriNet()
    net.create_transition('a')
    place = net.create_place()
    net.create_flow('a', place, 0)
    assert net.postset('a') == {}


def test_repeated_arcs_accumulate():
    net = PetriNet()
    net.create_transition('a')
    place = net.create_place()
    net.create_flow(place, 'a', 1)
    net.create_flow(place, 'a', 2)
    assert net.preset('a') == {place: 3}


def test_invalid_arcs_are_rejected():
    net = PetriNet()
    net.create_transition('a')
    place = net.create_place()

    with pytest.raises(ValueError):
        net.create_flow(place, 'a', -1)
    with pytest.raises(ValueError):
        net.create_flow(place, place, 1)
    with pytest.raises(ValueError):
        net.create_flow('a', 'a', 1)
    with pytest.raises(ValueError):
        net.create_flow(place, 'b', 1)
    with pytest.raises(ValueError):
        net.create_flow('a', 42, 1)
    with pytest.raises(ValueError):
        net.preset('b')


def test_negative_initial_marking_is_rejected():
    with pytest.raises(ValueError):
        PetriNet().create_place(initial_marking=-1)


def test_net_format(producer_consumer_net: PetriNet):
    expected_lines = [
        'net producer_consumer',
        'pl p0',
        'pl p1 (1)',
        'tr produce -> p0*2',
        'tr consume p0 p1 ->',
    ]
    assert str(producer_consumer_net) == '\n'.join(expected_lines) + '\n'
