# SPDX-License-Identifier: Apache-2.0
# © 2025 BioInception PVT LTD.
"""
ResultWriter
------------
Writes the results of a query/target comparison: graph scores, atom mappings,
the descriptor table, MOL/SMILES files of the inputs and PNG images with the
matched substructure highlighted.

Typical use::

    w = ResultWriter(OutputOptions(suffix="_run1", append_mode=True))
    w.start_session("append", extension=".out")
    try:
        w.write_graph_scores(q_path, t_path, tanimoto)
        w.write_results(q, t, MatchStatistics(...))
        w.write_header(q_path, t_path, n)
        w.write_mapping(1, atom_map)
    finally:
        w.close_session()
"""
from __future__ import annotations
import csv
import logging
import os
from typing import Any, Iterable, List, Mapping, Optional, Tuple, Union

from rdkit import Chem
from PIL import Image

from .errors import IllegalStateError
from .metrics import Descriptors, MatchStatistics, compute_descriptors, format_score
from .molio import Destination, write_mol, write_molfile
from .options import OutputOptions
from .session import OutputSession, SessionMode
from .viz import ImageBuilder, VizConfig, hub_wheel_image

logger = logging.getLogger(__name__)

BANNER = "-" * 36
# identifier-keyed: a mapping or a sequence of (query, target) pairs
AtomMapping = Union[Mapping[Any, Any], Iterable[Tuple[Any, Any]]]


def atom_id(a: Any) -> str:
    """Identifier of an atom for the match log.

    RDKit atoms use their ``id`` property when set, else symbol plus 1-based
    index. Plain identifiers are written as they are.
    """
    if isinstance(a, Chem.Atom):
        if a.HasProp("id"):
            return a.GetProp("id")
        return f"{a.GetSymbol()}{a.GetIdx() + 1}"
    return str(a)


def _pairs(mapping: AtomMapping) -> Iterable[Tuple[Any, Any]]:
    return mapping.items() if hasattr(mapping, "items") else mapping


class ResultWriter:
    def __init__(self, options: OutputOptions = OutputOptions(), *,
                 viz: Optional[VizConfig] = None):
        self.options = options
        self.images = ImageBuilder(viz or VizConfig())
        self._session: Optional[OutputSession] = None

    # ----------------------
    # Molecule files
    # ----------------------
    def write_query_mol(self, mol: Chem.Mol) -> str:
        path = self.options.query_mol_out_name + self.options.suffix + ".mol"
        write_molfile(mol, path, self.options.output_writer)
        return path

    def write_target_mol(self, mol: Chem.Mol) -> str:
        path = self.options.target_mol_out_name + self.options.suffix + ".mol"
        write_molfile(mol, path, self.options.output_writer)
        return path

    def write_mol(self, format_tag: str, mol: Chem.Mol, destination: Destination) -> None:
        write_mol(format_tag, mol, destination, self.options.output_writer)

    # ----------------------
    # Session lifecycle
    # ----------------------
    @property
    def session(self) -> OutputSession:
        if self._session is None:
            raise IllegalStateError("No output session; call start_session first")
        return self._session

    def start_session(self, mode: SessionMode = "fresh", suffix: Optional[str] = None,
                      extension: str = "") -> OutputSession:
        if self._session is not None:
            raise IllegalStateError("Output session already started")
        self._session = OutputSession.open(self.options, mode, suffix, extension)
        return self._session

    def close_session(self) -> None:
        session = self.session
        self._session = None
        session.close()

    def __enter__(self) -> "ResultWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._session is not None:
            self.close_session()

    # ----------------------
    # Scores and descriptors
    # ----------------------
    def write_graph_scores(self, query: str, target: str, tanimoto: float) -> None:
        self.session.graph.write(f"{query}\t{target}\t{format_score(tanimoto)}\n")

    def write_results(self, mol1: Chem.Mol, mol2: Chem.Mol, stats: MatchStatistics,
                      mapping: Optional[Mapping[int, int]] = None) -> Descriptors:
        """Append one descriptor row; *mapping* (0-based positions) fills bond Tanimoto."""
        session = self.session
        d = compute_descriptors(mol1, mol2, stats, mapping)
        values = d.labelled_values()
        elapsed = f"Time (ms):{d.elapsed_ms} "
        if not self.options.append_mode:
            line = f"{d.query_path}\t{d.target_path} "
            line += "".join(f"{k}= {v} " for k, v in values.items()) + elapsed
            session.descriptor.write(line + "\n")
            logger.debug("descriptor row: %s", line)
        else:
            row = [d.query_path, d.target_path, *values.values(), elapsed]
            csv.writer(session.descriptor, delimiter="\t", lineterminator="\n").writerow(row)
            session.flush()
            logger.debug("descriptor row: %s", row)
        return d

    def make_label(self, tanimoto: float, stereo: float) -> str:
        return f"Scores [Tanimoto: {format_score(tanimoto)}, Stereo: {format_score(stereo)}]"

    # ----------------------
    # Match report
    # ----------------------
    def write_header(self, query: str, target: str, atoms_matched: int) -> None:
        out = self.session.match
        out.write(f"Molecule 1=\t{query}\n")
        out.write(f"Molecule 2=\t{target}\n")
        out.write(f"Max atoms matched=\t{atoms_matched}\n")

    def write_mapping(self, solution_index: int, mapping: AtomMapping) -> None:
        out = self.session.match
        out.write("\n")
        out.write(f"Solution=\t{solution_index}\n")
        for q, t in _pairs(mapping):
            out.write(f"{atom_id(q)}\t{atom_id(t)}\n")
        out.write("\n")
        out.write("//\n")

    def write_best_mapping(self, atoms_matched: int, mapping: AtomMapping,
                           position_mapping: Mapping[int, int],
                           query_ref: str, target_ref: str) -> None:
        """Write the best solution: atom ids, a banner, then atom positions.

        Positions arrive 0-based and are written 1-based, matching atom
        numbering in MOL files.
        """
        out = self.session.match
        for q, t in _pairs(mapping):
            out.write(f"{atom_id(q)}\t{atom_id(t)}\n")
        out.write("\n")
        out.write(BANNER + "\n")
        out.write(f"Query ={query_ref}\n")
        out.write(f"Target = {target_ref}\n")
        out.write(f"Max atoms matched=\t{atoms_matched}\n")
        for qi, ti in position_mapping.items():
            out.write(f"{int(qi) + 1}\t{int(ti) + 1}\n")

    # ----------------------
    # Images
    # ----------------------
    def compose_pair_image(self, mol1: Chem.Mol, mol2: Chem.Mol, label: str,
                           position_mapping: Mapping[int, int]) -> None:
        self.images.add_pair(mol1, mol2, label, position_mapping)

    add_image = compose_pair_image

    def pair_image_path(self, query_name: str, target_name: str) -> str:
        name = f"{query_name}_{target_name}{self.options.suffix}.png"
        return os.path.join(self.options.image_dir, name)

    def persist_pair_image(self, query_name: str, target_name: str) -> str:
        path = self.pair_image_path(query_name, target_name)
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        self.images.save(path, query_name, target_name, self.options.image_size)
        return path

    def persist_hub_image(self, hub: Chem.Mol, rim: List[Chem.Mol], name: str,
                          mappings: List[Mapping[int, int]]) -> str:
        img: Image.Image = hub_wheel_image(hub, rim, mappings, self.images.cfg)
        path = name + ".png"
        img.save(path, format="PNG")
        logger.info("saved hub image with %d rim molecule(s) to %s", len(rim), path)
        return path
