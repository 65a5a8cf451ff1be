"""Dataset generation and registry helpers."""

from .colors import ColorDataset, generate_dataset
from .registry import DatasetSpec, available_datasets, get_dataset, register_dataset

__all__ = [
    "ColorDataset",
    "DatasetSpec",
    "available_datasets",
    "generate_dataset",
    "get_dataset",
    "register_dataset",
]
