from .dataset import Dataset
from .synthetic import GeneratedDataset, generate_blobs, save_dataset

__all__ = ["Dataset", "GeneratedDataset", "generate_blobs", "save_dataset"]
