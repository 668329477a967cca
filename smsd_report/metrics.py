# SPDX-License-Identifier: Apache-2.0
# © 2025 BioInception PVT LTD.
# smsd_report/metrics.py – similarity/distance descriptors derived from match counts
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Mapping, Optional
import locale
import math

from rdkit import Chem
from rdkit.Chem import Descriptors as RDDescriptors


def format_score(x: float) -> str:
    """Locale-aware number with exactly two fraction digits."""
    return locale.format_string("%.2f", float(x), grouping=True)


def tanimoto(n_common: int, n1: int, n2: int) -> float:
    denom = max(1, n1 + n2 - n_common)
    return float(n_common) / float(denom)


def cosine(n_common: int, n1: int, n2: int) -> float:
    return n_common / math.sqrt(float(n1) * float(n2))


def soergel(n_common: int, n1: int, n2: int) -> float:
    return (float(n1) + float(n2) - 2 * n_common) / (float(n1) + float(n2) - n_common)


def bonds_common(q: Chem.Mol, t: Chem.Mol, m: Mapping[int, int]) -> int:
    cnt = 0
    for b in q.GetBonds():
        i, j = int(b.GetBeginAtomIdx()), int(b.GetEndAtomIdx())
        if i in m and j in m and t.GetBondBetweenAtoms(int(m[i]), int(m[j])) is not None:
            cnt += 1
    return cnt


@dataclass(frozen=True)
class MatchStatistics:
    """Raw numbers for one query/target comparison, as the matcher reports them."""
    query_path: str
    target_path: str
    tanimoto: float
    euclidean: float
    atoms_matched: int
    elapsed_ms: int
    tanimoto_atoms: Optional[float] = None
    tanimoto_bonds: Optional[float] = None
    bonds_matched: Optional[int] = None


@dataclass(frozen=True)
class Descriptors:
    query_path: str
    target_path: str
    tanimoto: float
    tanimoto_bonds: Optional[float]  # None when the matched bonds are unknown
    tanimoto_atoms: float
    euclidean: float
    cosine: float
    soergel: float
    query_atoms: int
    target_atoms: int
    query_bonds: int
    target_bonds: int
    match_size: int
    query_weight: float
    target_weight: float
    elapsed_ms: int

    def labelled_values(self) -> Dict[str, str]:
        """Formatted values keyed by descriptor header label, in header order."""
        return {
            "Tanimoto (Sim.)": format_score(self.tanimoto),
            "Tanimoto (Bond Sim.)": "" if self.tanimoto_bonds is None else format_score(self.tanimoto_bonds),
            "Tanimoto (Atom Sim.)": format_score(self.tanimoto_atoms),
            "Euclidian (Dist.)": format_score(self.euclidean),
            "Cosine (Sim.)": format_score(self.cosine),
            "Soergel (Dist.)": format_score(self.soergel),
            "Query (Atom Count)": str(self.query_atoms),
            "Target (Atom Count)": str(self.target_atoms),
            "Query (Bond Count)": str(self.query_bonds),
            "Target (Bond Count)": str(self.target_bonds),
            "Match (Size)": str(self.match_size),
            "Query (Wt.)": format_score(self.query_weight),
            "Target (Wt.)": format_score(self.target_weight),
        }


def compute_descriptors(mol1: Chem.Mol, mol2: Chem.Mol, stats: MatchStatistics,
                        mapping: Optional[Mapping[int, int]] = None) -> Descriptors:
    """Derive the descriptor row for one comparison.

    Cosine and Soergel come from the atom counts. Tanimoto and Euclidean are
    passed through from the matcher. With no matched atoms every similarity and
    distance column is written as zero, whatever the matcher supplied;
    downstream readers rely on empty matches reading as true zeros.

    Bond Tanimoto is taken from the statistics, else counted from the
    position-keyed *mapping*. With neither it is left empty.
    """
    n1, n2 = mol1.GetNumAtoms(), mol2.GetNumAtoms()
    e1, e2 = mol1.GetNumBonds(), mol2.GetNumBonds()
    m = int(stats.atoms_matched)

    if m != 0:
        tan, euc = float(stats.tanimoto), float(stats.euclidean)
        cos = cosine(m, n1, n2)
        soe = soergel(m, n1, n2)
        tan_a = stats.tanimoto_atoms if stats.tanimoto_atoms is not None else tanimoto(m, n1, n2)
        if stats.tanimoto_bonds is not None:
            tan_b = stats.tanimoto_bonds
        elif stats.bonds_matched is not None:
            tan_b = tanimoto(int(stats.bonds_matched), e1, e2)
        elif mapping is not None:
            tan_b = tanimoto(bonds_common(mol1, mol2, mapping), e1, e2)
        else:
            tan_b = None
    else:
        tan = euc = cos = soe = tan_a = tan_b = 0.0

    return Descriptors(
        query_path=stats.query_path, target_path=stats.target_path,
        tanimoto=tan, tanimoto_bonds=None if tan_b is None else float(tan_b), tanimoto_atoms=float(tan_a),
        euclidean=euc, cosine=cos, soergel=soe,
        query_atoms=n1, target_atoms=n2, query_bonds=e1, target_bonds=e2,
        match_size=m,
        query_weight=RDDescriptors.MolWt(mol1), target_weight=RDDescriptors.MolWt(mol2),
        elapsed_ms=int(stats.elapsed_ms),
    )
