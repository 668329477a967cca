# SPDX-License-Identifier: Apache-2.0
# © 2025 BioInception PVT LTD.
# smsd_report/options.py – where and how results are written
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Tuple, TextIO


@dataclass(frozen=True)
class OutputOptions:
    # log base paths; the session suffix and extension are appended
    graph_file: str = "graph"
    match_file: str = "match"
    descriptor_file: str = "descriptor"
    # molfile base names for write_query_mol / write_target_mol
    query_mol_out_name: str = "query"
    target_mol_out_name: str = "target"
    suffix: str = ""
    # images
    image_dir: str = "."
    image_width: Optional[int] = None     # None or -1 = default sizing
    image_height: Optional[int] = None
    # True selects the tab-separated descriptor layout
    append_mode: bool = False
    # sink used for the "--" destination; None = stdout
    output_writer: Optional[TextIO] = None

    @property
    def image_size(self) -> Optional[Tuple[int, int]]:
        """(width, height) when both are set, otherwise None."""
        w, h = self.image_width, self.image_height
        if w is None or h is None or w == -1 or h == -1:
            return None
        return int(w), int(h)
