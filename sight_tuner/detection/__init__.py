"""Pitch estimation and smoothing for Sight Tuner."""

from .autocorrelation import AutocorrelationEstimator, estimate
from .stability_filter import SMOOTHING_MODES, StabilityFilter

__all__ = ["AutocorrelationEstimator", "estimate", "SMOOTHING_MODES", "StabilityFilter"]
