import numpy as np
import pytest

from darkweave.cost_layer import (
    SECRET_NUM,
    CostLayer,
    CostType,
    get_cost_string,
    get_cost_type,
)
from darkweave.state import NetworkState


def test_cost_type_lookup():
    assert get_cost_type("sse") is CostType.SSE
    assert get_cost_type("masked") is CostType.MASKED


def test_unknown_cost_type_falls_back_to_sse():
    assert get_cost_type("nonsense") is CostType.SSE


@pytest.mark.parametrize("ct", list(CostType))
def test_cost_string_round_trip(ct):
    assert get_cost_type(get_cost_string(ct)) is ct


def test_forward_computes_sum_of_squares():
    layer = CostLayer(1, 3)
    state = NetworkState(input=[1.0, 2.0, 3.0], truth=[1.0, 2.0, 3.0])
    assert layer.forward(state) == 0.0
    assert np.all(layer.delta == 0)


def test_forward_delta_is_truth_minus_input():
    layer = CostLayer(2, 2)
    inp = np.array([0.5, 1.0, -1.0, 2.0], dtype=np.float32)
    truth = np.array([1.0, 1.0, 1.0, 1.0], dtype=np.float32)
    cost = layer.forward(NetworkState(input=inp.copy(), truth=truth))
    np.testing.assert_allclose(layer.delta, truth - inp)
    assert cost == pytest.approx(float(np.sum((truth - inp) ** 2)))
    assert layer.output == cost


def test_forward_without_truth_keeps_output():
    layer = CostLayer(1, 2)
    layer.output = 7.0
    assert layer.forward(NetworkState(input=[1.0, 2.0])) == 7.0
    assert np.all(layer.delta == 0)


def test_masked_cost_ignores_marked_outputs():
    layer = CostLayer(1, 3, CostType.MASKED)
    inp = np.array([5.0, 5.0, 5.0], dtype=np.float32)
    truth = np.array([SECRET_NUM, 5.0, SECRET_NUM], dtype=np.float32)
    cost = layer.forward(NetworkState(input=inp, truth=truth))
    assert cost == 0.0
    assert inp[0] == SECRET_NUM


def test_sse_does_not_mask():
    layer = CostLayer(1, 1, CostType.SSE)
    cost = layer.forward(NetworkState(input=[0.0], truth=[SECRET_NUM]))
    assert cost > 0


def test_backward_adds_scaled_delta():
    layer = CostLayer(1, 2, scale=0.5)
    state = NetworkState(input=[0.0, 0.0], truth=[2.0, -4.0], delta=[1.0, 1.0])
    layer.forward(state)
    layer.backward(state)
    np.testing.assert_allclose(state.delta, 1.0 + 0.5 * layer.delta)


def test_backward_needs_delta():
    layer = CostLayer(1, 2)
    with pytest.raises(ValueError):
        layer.backward(NetworkState(input=[0.0, 0.0]))


def test_forward_rejects_short_truth():
    layer = CostLayer(1, 3)
    with pytest.raises(ValueError):
        layer.forward(NetworkState(input=[0.0, 0.0, 0.0], truth=[1.0]))


def test_resize_changes_sizes():
    layer = CostLayer(2, 3)
    layer.resize(5)
    assert layer.inputs == 5
    assert layer.outputs == 5
    assert layer.delta.size == 10


def test_constructor_rejects_bad_sizes():
    with pytest.raises(ValueError):
        CostLayer(0, 3)