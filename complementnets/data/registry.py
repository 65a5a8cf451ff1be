"""Dataset registry and metadata contracts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, MutableMapping

from .colors import ColorDataset, generate_dataset


@dataclass(frozen=True)
class DatasetSpec:
    """Description of a dataset registered in the system."""

    name: str
    dataset: ColorDataset
    provenance: Dict[str, Any]

    @property
    def size(self) -> int:
        return len(self.dataset)


DatasetFactory = Callable[..., DatasetSpec]


_REGISTRY: MutableMapping[str, DatasetFactory] = {}


def register_dataset(
    name: str | None = None,
    factory: DatasetFactory | None = None,
) -> Callable[[DatasetFactory], DatasetFactory] | DatasetFactory:
    """Register a dataset factory.

    Works as a decorator::

        @register_dataset("complementary_colors")
        def make_colors(**kwargs):
            ...

    or directly with ``register_dataset(name, factory)``.
    """

    def _decorator(func: DatasetFactory) -> DatasetFactory:
        _REGISTRY[str(name or func.__name__)] = func
        return func

    if factory is not None:
        return _decorator(factory)
    return _decorator


def get_dataset(name: str, **options: Any) -> DatasetSpec:
    """Return the :class:`DatasetSpec` for ``name`` built with ``options``."""

    if name not in _REGISTRY:
        available = ", ".join(sorted(_REGISTRY))
        raise KeyError(f"Unknown dataset {name!r}. Available datasets: {available}")
    return _REGISTRY[name](**options)


def available_datasets() -> Iterable[str]:
    """Return the sorted list of available dataset identifiers."""

    return sorted(_REGISTRY)


@register_dataset("complementary_colors")
def _complementary_colors(count: int = 50_000, seed: int = 0, **_: object) -> DatasetSpec:
    dataset = generate_dataset(count, seed=seed)
    provenance = {"type": "synthetic", "count": int(count), "seed": int(seed)}
    return DatasetSpec(name="complementary_colors", dataset=dataset, provenance=provenance)
