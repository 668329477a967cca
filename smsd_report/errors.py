# SPDX-License-Identifier: Apache-2.0
# © 2025 BioInception PVT LTD.
# smsd_report/errors.py – exceptions raised by the result writers
from __future__ import annotations


class SerializationError(ValueError):
    """RDKit could not render a molecule to the requested chemical format."""


class IllegalStateError(RuntimeError):
    """An output session was used before it was started or after it was closed."""
