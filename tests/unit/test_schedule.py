import pytest

from complementnets.core.errors import InvalidArgument
from complementnets.training.schedules import learning_rate
from complementnets.training.trainer import TrainingConfig


def test_rate_decays_every_42_steps():
    assert learning_rate(0.1, 0) == pytest.approx(0.1)
    assert learning_rate(0.1, 41) == pytest.approx(0.1)
    assert learning_rate(0.1, 42) == pytest.approx(0.1 * 0.85)
    assert learning_rate(0.1, 84) == pytest.approx(0.1 * 0.85**2)
    assert learning_rate(0.1, 125) == pytest.approx(0.1 * 0.85**2)


def test_rate_is_pure_function_of_step():
    values = [learning_rate(0.2, step) for step in (100, 3, 100)]
    assert values[0] == values[2]


def test_custom_decay():
    assert learning_rate(1.0, 10, decay=0.5, every=5) == pytest.approx(0.25)


@pytest.mark.parametrize("kwargs", [{"every": 0}, {"every": -1}])
def test_rate_rejects_bad_period(kwargs):
    with pytest.raises(InvalidArgument):
        learning_rate(0.1, 1, **kwargs)


def test_rate_rejects_negative_step():
    with pytest.raises(InvalidArgument):
        learning_rate(0.1, -1)


def test_training_config_rate_uses_schedule():
    config = TrainingConfig(learning_rate=0.3, lr_decay=0.5, lr_decay_every=10)
    assert config.rate(9) == pytest.approx(0.3)
    assert config.rate(20) == pytest.approx(0.075)


@pytest.mark.parametrize(
    "kwargs",
    [{"batch_size": 0}, {"total_steps": -1}, {"report_every": 0}, {"learning_rate": 0.0}],
)
def test_training_config_rejects_invalid_values(kwargs):
    with pytest.raises(InvalidArgument):
        TrainingConfig(**kwargs)


def test_training_config_from_mapping():
    config = TrainingConfig.from_mapping({"steps": 7, "batch_size": 5, "lr": 0.02})
    assert config.total_steps == 7
    assert config.batch_size == 5
    assert config.learning_rate == pytest.approx(0.02)
    assert config.report_every == 5
