"""
psisfit.data
============

submodule for handling binomial regression data.

Includes:
- dataset: BinomialData, bioassay
"""

from .dataset import BinomialData, bioassay

__all__ = ["BinomialData", "bioassay"]
