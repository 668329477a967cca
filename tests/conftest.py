import os, pytest
from rdkit import Chem
from smsd_report.options import OutputOptions

@pytest.fixture
def options(tmp_path):
    return OutputOptions(
        graph_file=os.path.join(str(tmp_path), "graph"),
        match_file=os.path.join(str(tmp_path), "match"),
        descriptor_file=os.path.join(str(tmp_path), "descriptor"),
        query_mol_out_name=os.path.join(str(tmp_path), "query"),
        target_mol_out_name=os.path.join(str(tmp_path), "target"),
        suffix="_run",
        image_dir=str(tmp_path),
    )

@pytest.fixture
def decane():
    return Chem.MolFromSmiles("CCCCCCCCCC")
