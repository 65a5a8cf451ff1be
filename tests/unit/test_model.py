import numpy as np
import pytest

from complementnets.core.errors import InvalidArgument, ShapeMismatch
from complementnets.core.types import Batch
from complementnets.training.trainer import RegressionModel


def _numeric_grad(model, batch, param, index, eps=1e-6):
    original = param[index]
    param[index] = original + eps
    plus = model.loss(model.forward(batch.inputs), batch.targets)
    param[index] = original - eps
    minus = model.loss(model.forward(batch.inputs), batch.targets)
    param[index] = original
    return (plus - minus) / (2 * eps)


def _small_model(bias: str) -> RegressionModel:
    model = RegressionModel(layer_dims=(3, 5, 4, 3), seed=3, bias=bias)
    # Keep the final pre-activations inside (0, 1) so gradients flow through the clamp.
    last = model.layers[-1]
    last.weights *= 0.1
    last.bias[...] = 0.5
    return model


def test_default_architecture_chains_widths():
    model = RegressionModel()
    assert model.layer_dims == (3, 64, 32, 16, 3)
    shapes = [layer.weights.shape for layer in model.layers]
    assert shapes == [(3, 64), (64, 32), (32, 16), (16, 3)]
    for layer in model.layers:
        assert layer.bias.shape == (1, layer.weights.shape[1])
        assert not layer.bias.any()
    assert model.parameter_count() == 3 * 64 + 64 + 64 * 32 + 32 + 32 * 16 + 16 + 16 * 3 + 3


def test_scalar_bias_mode():
    model = RegressionModel(bias="scalar")
    assert all(layer.bias.shape == () for layer in model.layers)


@pytest.mark.parametrize("init_fan, expected", [("in", np.sqrt(2 / 64)), ("out", np.sqrt(2 / 32))])
def test_variance_scaling_initialisation(init_fan, expected):
    model = RegressionModel(seed=0, init_fan=init_fan)
    weights = model.layers[1].weights
    assert abs(float(weights.mean())) < 0.02
    assert float(weights.std()) == pytest.approx(expected, rel=0.08)


@pytest.mark.parametrize(
    "kwargs",
    [{"bias": "matrix"}, {"init_fan": "avg"}, {"layer_dims": (3,)}, {"layer_dims": (3, 0, 3)}],
)
def test_invalid_construction(kwargs):
    with pytest.raises(InvalidArgument):
        RegressionModel(**kwargs)


def test_seeded_initialisation_is_reproducible():
    first = RegressionModel(seed=5)
    second = RegressionModel(seed=5)
    for a, b in zip(first.layers, second.layers):
        assert np.array_equal(a.weights, b.weights)


def test_forward_output_is_clamped_to_unit_interval():
    model = RegressionModel(seed=1)
    rng = np.random.default_rng(1)
    inputs = rng.normal(0.0, 100.0, size=(256, 3))
    outputs = model.forward(inputs)
    assert outputs.shape == (256, 3)
    assert outputs.min() >= 0.0
    assert outputs.max() <= 1.0


def test_forward_has_no_side_effects():
    model = RegressionModel(seed=2)
    before = {k: v.copy() for k, v in model.parameters().items()}
    x = np.full((2, 3), 0.5)
    first = model.forward(x)
    second = model.forward(x)
    assert np.array_equal(first, second)
    for key, value in model.parameters().items():
        assert np.array_equal(before[key], value)


def test_forward_rejects_wrong_width():
    model = RegressionModel()
    with pytest.raises(ShapeMismatch):
        model.forward(np.zeros((4, 2)))
    with pytest.raises(ShapeMismatch):
        model.forward(np.zeros(3))


def test_empty_batch_is_rejected():
    model = RegressionModel()
    with pytest.raises(InvalidArgument):
        model.train_step(Batch(inputs=np.zeros((0, 3)), targets=np.zeros((0, 3))), 0.1)


def test_target_shape_mismatch():
    model = RegressionModel()
    batch = Batch(inputs=np.zeros((4, 3)), targets=np.zeros((4, 2)))
    with pytest.raises(ShapeMismatch):
        model.train_step(batch, 0.1)


def test_loss_is_mean_over_all_elements():
    model = RegressionModel()
    assert model.loss(np.zeros((1, 3)), np.ones((1, 3))) == pytest.approx(1.0)
    pred = np.array([[0.5, 0.0, 0.0], [0.0, 0.0, 0.0]])
    assert model.loss(pred, np.zeros((2, 3))) == pytest.approx(0.25 / 6)


@pytest.mark.parametrize("bias", ["vector", "scalar"])
def test_gradients_match_finite_differences(bias):
    model = _small_model(bias)
    rng = np.random.default_rng(7)
    batch = Batch(inputs=rng.uniform(size=(6, 3)), targets=rng.uniform(size=(6, 3)))
    cost, grads = model.gradients(batch)
    assert cost == pytest.approx(model.loss(model.forward(batch.inputs), batch.targets))
    assert np.any(grads["b3"] != 0)
    for name, param in model.parameters().items():
        assert grads[name].shape == param.shape
        for count, index in enumerate(np.ndindex(param.shape)):
            if count >= 6:
                break
            numeric = _numeric_grad(model, batch, param, index)
            assert grads[name][index] == pytest.approx(numeric, abs=1e-6)


def test_train_step_cost_flag():
    model = RegressionModel(seed=4)
    rng = np.random.default_rng(4)
    batch = Batch(inputs=rng.uniform(size=(10, 3)), targets=rng.uniform(size=(10, 3)))
    expected = model.loss(model.forward(batch.inputs), batch.targets)
    assert model.train_step(batch, 0.01, compute_cost=True) == pytest.approx(expected)
    assert model.train_step(batch, 0.01, compute_cost=False) is None


def test_repeated_steps_reduce_loss_on_fixed_batch():
    model = _small_model("vector")
    rng = np.random.default_rng(9)
    batch = Batch(inputs=rng.uniform(size=(20, 3)), targets=rng.uniform(0.3, 0.7, size=(20, 3)))
    initial = model.loss(model.forward(batch.inputs), batch.targets)
    for _ in range(50):
        model.train_step(batch, 0.1, compute_cost=False)
    final = model.loss(model.forward(batch.inputs), batch.targets)
    assert final < initial


def test_predictions_are_byte_colors():
    model = RegressionModel(seed=0)
    rgb = model.predict_rgb((10, 200, 30))
    assert len(rgb) == 3
    assert all(isinstance(c, int) and 0 <= c <= 255 for c in rgb)
    batch = model.predict_colors([(10, 200, 30), (0, 0, 0)])
    assert batch.shape == (2, 3)
    assert batch[0].tolist() == list(rgb)
    assert batch.min() >= 0 and batch.max() <= 255
