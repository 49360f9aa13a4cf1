"""Inbound classifiers: source files to :class:`~ims_interchange.models.ImportBatch`."""

from .utils import classify_text, load_import

__all__ = ["classify_text", "load_import"]
