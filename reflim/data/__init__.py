"""Sample preparation and file loading."""

from reflim.data.loader import clean_sample, load_sample

__all__ = ["clean_sample", "load_sample"]
