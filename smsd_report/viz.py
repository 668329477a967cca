# SPDX-License-Identifier: Apache-2.0
# © 2025 BioInception PVT LTD.
# smsd_report/viz.py – PNG images of matched pairs and hub-and-rim layouts
from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Tuple, Optional, Dict, Iterable, Mapping, Set
from io import BytesIO
import logging
import math

from rdkit import Chem
from rdkit.Chem import Draw
from rdkit.Chem.Draw import rdMolDraw2D
from PIL import Image

from .errors import IllegalStateError

logger = logging.getLogger(__name__)

Colour = Tuple[float, float, float]


@dataclass(frozen=True)
class VizConfig:
    subimg_size: Tuple[int, int] = (500, 400)
    hub_panel_size: Tuple[int, int] = (300, 300)
    # highlight colour (r,g,b) in 0..1
    match_color: Colour = (0.95, 0.4, 0.4)  # pink/red
    background: str = "white"


def _bond_indices_from_mapping(q: Chem.Mol, t: Chem.Mol, m: Mapping[int, int]) -> List[int]:
    idxs: List[int] = []
    for b in q.GetBonds():
        i, j = int(b.GetBeginAtomIdx()), int(b.GetEndAtomIdx())
        if i in m and j in m:
            tb = t.GetBondBetweenAtoms(int(m[i]), int(m[j]))
            if tb is not None:
                idxs.append(int(tb.GetIdx()))
    return idxs


def _bond_indices_from_atomset(m: Chem.Mol, atoms: Iterable[int]) -> List[int]:
    aset: Set[int] = set(int(a) for a in atoms)
    idxs: List[int] = []
    for b in m.GetBonds():
        i, j = int(b.GetBeginAtomIdx()), int(b.GetEndAtomIdx())
        if i in aset and j in aset:
            idxs.append(int(b.GetIdx()))
    return idxs


def _to_pil(image_or_png) -> Image.Image:
    if hasattr(image_or_png, "save"):
        return image_or_png
    if isinstance(image_or_png, (bytes, bytearray)):
        return Image.open(BytesIO(image_or_png))
    if hasattr(image_or_png, "data"):
        return Image.open(BytesIO(image_or_png.data))
    raise TypeError("Unsupported image object from RDKit.")


def _highlights(q: Chem.Mol, t: Chem.Mol, mapping: Mapping[int, int]):
    """Atoms and bonds to highlight on each side of a position-keyed mapping."""
    m = {int(k): int(v) for k, v in mapping.items()}
    a1 = sorted(m.keys())
    a2 = sorted(m.values())
    b1 = _bond_indices_from_atomset(q, a1)
    b2 = _bond_indices_from_mapping(q, t, m)
    return a1, b1, a2, b2


@dataclass
class _Pair:
    mol_a: Chem.Mol
    mol_b: Chem.Mol
    label: str
    mapping: Dict[int, int]


@dataclass
class ImageBuilder:
    """Collects matched pairs and renders them as one PNG, one pair per row.

    ``add_pair`` may be called several times before a single ``save``;
    saving clears the collected pairs.
    """
    cfg: VizConfig = field(default_factory=VizConfig)
    pairs: List[_Pair] = field(default_factory=list)

    def add_pair(self, mol_a: Chem.Mol, mol_b: Chem.Mol, label: str,
                 mapping: Mapping[int, int]) -> None:
        self.pairs.append(_Pair(mol_a, mol_b, label, {int(k): int(v) for k, v in mapping.items()}))

    def __len__(self) -> int:
        return len(self.pairs)

    def clear(self) -> None:
        self.pairs.clear()

    def render(self, query_name: str = "", target_name: str = "",
               size: Optional[Tuple[int, int]] = None) -> Image.Image:
        if not self.pairs:
            raise IllegalStateError("No images have been added")
        mols: List[Chem.Mol] = []
        legends: List[str] = []
        hl_atoms: List[List[int]] = []
        hl_bonds: List[List[int]] = []
        atom_cmaps: List[Dict[int, Colour]] = []
        bond_cmaps: List[Dict[int, Colour]] = []
        colour = self.cfg.match_color
        for p in self.pairs:
            a1, b1, a2, b2 = _highlights(p.mol_a, p.mol_b, p.mapping)
            mols += [p.mol_a, p.mol_b]
            legends += [query_name, f"{target_name} {p.label}".strip()]
            hl_atoms += [a1, a2]
            hl_bonds += [b1, b2]
            atom_cmaps += [{i: colour for i in a1}, {i: colour for i in a2}]
            bond_cmaps += [{i: colour for i in b1}, {i: colour for i in b2}]
        img = Draw.MolsToGridImage(
            mols,
            molsPerRow=2,
            subImgSize=size or self.cfg.subimg_size,
            legends=legends,
            highlightAtomLists=hl_atoms,
            highlightBondLists=hl_bonds,
            highlightAtomColors=atom_cmaps,
            highlightBondColors=bond_cmaps,
            useSVG=False
        )
        return _to_pil(img)

    def save(self, path: str, query_name: str = "", target_name: str = "",
             size: Optional[Tuple[int, int]] = None) -> Image.Image:
        img = self.render(query_name, target_name, size)
        img.save(path, format="PNG")
        logger.info("saved %d pair(s) to %s", len(self.pairs), path)
        self.clear()
        return img


# -------- Hub and rim --------
def _rim_radius(n_rim: int, panel: Tuple[int, int]) -> int:
    span = max(panel) * 1.05
    if n_rim < 2:
        return int(math.ceil(span))
    return int(math.ceil(max(span, span / (2.0 * math.sin(math.pi / n_rim)))))


def _draw_panel(mol: Chem.Mol, size: Tuple[int, int], atoms: Iterable[int],
                bonds: Iterable[int], colour: Colour) -> Image.Image:
    atoms, bonds = [int(a) for a in atoms], [int(b) for b in bonds]
    d2d = rdMolDraw2D.MolDraw2DCairo(int(size[0]), int(size[1]))
    rdMolDraw2D.PrepareAndDrawMolecule(
        d2d, mol,
        highlightAtoms=atoms,
        highlightBonds=bonds,
        highlightAtomColors={i: colour for i in atoms},
        highlightBondColors={i: colour for i in bonds},
    )
    d2d.FinishDrawing()
    return _to_pil(d2d.GetDrawingText())


def hub_wheel_image(hub: Chem.Mol, rim: List[Chem.Mol], mappings: List[Mapping[int, int]],
                    cfg: Optional[VizConfig] = None) -> Image.Image:
    """One hub molecule in the centre with the rim molecules on a circle around it.

    ``mappings[k]`` maps hub atom indices to atom indices of ``rim[k]``. The hub
    highlights every atom that appears in any mapping.
    """
    if len(rim) != len(mappings):
        raise ValueError(f"{len(rim)} rim molecules but {len(mappings)} mappings")
    cfg = cfg or VizConfig()
    w, h = cfg.hub_panel_size
    colour = cfg.match_color
    hub_atoms: Set[int] = set()
    panels: List[Image.Image] = []
    for mol, mapping in zip(rim, mappings):
        _, _, a2, b2 = _highlights(hub, mol, mapping)
        hub_atoms.update(int(k) for k in mapping)
        panels.append(_draw_panel(mol, (w, h), a2, b2, colour))
    hub_img = _draw_panel(hub, (w, h), sorted(hub_atoms),
                          _bond_indices_from_atomset(hub, hub_atoms), colour)

    r = _rim_radius(len(rim), (w, h)) if rim else 0
    canvas = Image.new("RGB", (2 * r + w, 2 * r + h), cfg.background)
    cx, cy = r + w // 2, r + h // 2
    canvas.paste(hub_img.convert("RGB"), (cx - w // 2, cy - h // 2))
    for k, panel in enumerate(panels):
        theta = -math.pi / 2 + 2 * math.pi * k / len(panels)
        x = int(round(cx + r * math.cos(theta))) - w // 2
        y = int(round(cy + r * math.sin(theta))) - h // 2
        canvas.paste(panel.convert("RGB"), (x, y))
    return canvas
