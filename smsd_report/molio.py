# SPDX-License-Identifier: Apache-2.0
# © 2025 BioInception PVT LTD.
# smsd_report/molio.py – MOL block and SMILES output for matched molecules
from __future__ import annotations
import logging
import os
import sys
from typing import Callable, Dict, Optional, TextIO, Union

from rdkit import Chem

from .errors import SerializationError

logger = logging.getLogger(__name__)

Destination = Union[str, "os.PathLike[str]", TextIO]

# "--" routes output to the configured sink (stdout when none is set)
DEFAULT_DESTINATION = "--"


def _open_destination(destination: Destination, default_sink: Optional[TextIO]) -> TextIO:
    if isinstance(destination, (str, os.PathLike)):
        if os.fspath(destination) == DEFAULT_DESTINATION:
            return default_sink if default_sink is not None else sys.stdout
        return open(destination, "w")
    return destination


def _release(out: TextIO) -> None:
    if out is sys.stdout or out is sys.__stdout__:
        out.flush()
    else:
        out.close()


def _render(mol: Chem.Mol, fn: Callable[[Chem.Mol], str], fmt: str) -> str:
    if mol is None:
        raise SerializationError(f"Cannot write {fmt}: molecule is None")
    try:
        return fn(mol)
    except Exception as e:
        raise SerializationError(f"Cannot write {fmt}: {e}") from e


def mol_to_smiles_line(mol: Chem.Mol) -> str:
    return _render(mol, Chem.MolToSmiles, "SMILES") + "\n"


def mol_to_molblock(mol: Chem.Mol) -> str:
    return _render(mol, lambda m: Chem.MolToMolBlock(m, forceV3000=False), "MOL")


def _write_text(text: str, destination: Destination, default_sink: Optional[TextIO]) -> None:
    out = _open_destination(destination, default_sink)
    try:
        out.write(text)
    finally:
        _release(out)


def write_smiles(mol: Chem.Mol, destination: Destination,
                 default_sink: Optional[TextIO] = None) -> None:
    """Write the canonical SMILES of *mol*, newline terminated.

    The destination is closed afterwards (stdout is only flushed).
    """
    text = mol_to_smiles_line(mol)
    _write_text(text, destination, default_sink)


def write_molfile(mol: Chem.Mol, destination: Destination,
                  default_sink: Optional[TextIO] = None) -> None:
    """Write *mol* as an MDL V2000 MOL block. Same destination rules as write_smiles."""
    text = mol_to_molblock(mol)
    _write_text(text, destination, default_sink)


_WRITERS: Dict[str, Callable[..., None]] = {
    "mol": write_molfile,
    "structured": write_molfile,
    "smi": write_smiles,
    "line-notation": write_smiles,
}


def write_mol(format_tag: str, mol: Chem.Mol, destination: Destination,
              default_sink: Optional[TextIO] = None) -> None:
    """Dispatch on ``MOL``/``structured`` or ``SMI``/``line-notation``.

    Unknown tags raise ValueError before the destination is touched.
    """
    fn = _WRITERS.get(str(format_tag).lower())
    if fn is None:
        raise ValueError(f"Unknown molecule output format: {format_tag!r}")
    logger.debug("writing %s to %s", format_tag, destination)
    fn(mol, destination, default_sink)
