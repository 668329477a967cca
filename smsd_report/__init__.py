# SPDX-License-Identifier: Apache-2.0
# © 2025 BioInception PVT LTD.
"""Public API for smsd_report."""
from __future__ import annotations

from .options import OutputOptions
from .errors import SerializationError, IllegalStateError
from .metrics import MatchStatistics, Descriptors, compute_descriptors
from .session import OutputSession, DESCRIPTOR_HEADER
from .viz import ImageBuilder, VizConfig, hub_wheel_image
from .writer import ResultWriter

__all__ = ["OutputOptions", "SerializationError", "IllegalStateError",
           "MatchStatistics", "Descriptors", "compute_descriptors",
           "OutputSession", "DESCRIPTOR_HEADER", "ImageBuilder", "VizConfig",
           "hub_wheel_image", "ResultWriter"]
__version__ = "1.0.1"
