# SPDX-License-Identifier: Apache-2.0
# © 2025 BioInception PVT LTD.
# smsd_report/session.py – the graph, match and descriptor streams of one run
from __future__ import annotations
import csv
import logging
import os
from typing import List, Literal, Optional, TextIO

from .errors import IllegalStateError
from .options import OutputOptions

logger = logging.getLogger(__name__)

SessionMode = Literal["fresh", "append"]

DESCRIPTOR_HEADER: List[str] = [
    "Query",
    "Target",
    "Tanimoto (Sim.)",
    "Tanimoto (Bond Sim.)",
    "Tanimoto (Atom Sim.)",
    "Euclidian (Dist.)",
    "Cosine (Sim.)",
    "Soergel (Dist.)",
    "Query (Atom Count)",
    "Target (Atom Count)",
    "Query (Bond Count)",
    "Target (Bond Count)",
    "Match (Size)",
    "Query (Wt.)",
    "Target (Wt.)",
]


def _open_text(path: str, mode: str) -> TextIO:
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    return open(path, mode)


class OutputSession:
    """Three text streams that are opened and closed as one group.

    ``fresh`` truncates every file and always writes the descriptor header;
    ``append`` appends and writes the header only when the descriptor file
    does not exist yet.
    """

    def __init__(self, graph: TextIO, match: TextIO, descriptor: TextIO):
        self._graph: Optional[TextIO] = graph
        self._match: Optional[TextIO] = match
        self._descriptor: Optional[TextIO] = descriptor

    @classmethod
    def open(cls, options: OutputOptions, mode: SessionMode = "fresh",
             suffix: Optional[str] = None, extension: str = "") -> "OutputSession":
        if mode not in ("fresh", "append"):
            raise ValueError(f"Unknown session mode: {mode!r}")
        sfx = options.suffix if suffix is None else suffix
        paths = [f"{base}{sfx}{extension}" for base in
                 (options.graph_file, options.match_file, options.descriptor_file)]
        desc_path = paths[2]
        needs_header = mode == "fresh" or not os.path.exists(desc_path)
        file_mode = "w" if mode == "fresh" else "a"

        opened: List[TextIO] = []
        try:
            for p in paths:
                opened.append(_open_text(p, file_mode))
            if needs_header:
                csv.writer(opened[2], delimiter="\t", lineterminator="\n").writerow(DESCRIPTOR_HEADER)
        except BaseException:
            for f in opened:
                f.close()
            raise
        logger.info("opened %s output session: %s", mode, ", ".join(paths))
        return cls(*opened)

    # -- stream access --
    @property
    def closed(self) -> bool:
        return self._graph is None

    def _require_open(self) -> None:
        if self.closed:
            raise IllegalStateError("Output session is closed")

    @property
    def graph(self) -> TextIO:
        self._require_open()
        return self._graph

    @property
    def match(self) -> TextIO:
        self._require_open()
        return self._match

    @property
    def descriptor(self) -> TextIO:
        self._require_open()
        return self._descriptor

    def flush(self) -> None:
        self._require_open()
        self._graph.flush()
        self._match.flush()
        self._descriptor.flush()

    def close(self) -> None:
        self._require_open()
        streams = [self._graph, self._match, self._descriptor]
        self._graph = self._match = self._descriptor = None
        errors: List[OSError] = []
        for f in streams:
            try:
                f.close()
            except OSError as e:
                errors.append(e)
        logger.info("closed output session")
        if errors:
            raise errors[0]

    def __enter__(self) -> "OutputSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if not self.closed:
            self.close()
