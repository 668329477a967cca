import pytest
from rdkit import Chem
from dataclasses import replace
from smsd_report.writer import ResultWriter, BANNER
from smsd_report.metrics import MatchStatistics
from smsd_report.session import DESCRIPTOR_HEADER, OutputSession
from smsd_report.errors import IllegalStateError

def read_lines(path):
    with open(path) as f:
        return f.read().splitlines()

def stats(m=5, tan=0.33, euc=2.0):
    return MatchStatistics("q.mol", "t.mol", tan, euc, m, 42)

def test_verbose_row(options, decane):
    with ResultWriter(options) as w:
        w.start_session("fresh")
        w.write_results(decane, decane, stats())
    lines = read_lines(options.descriptor_file + "_run")
    assert lines[0] == "\t".join(DESCRIPTOR_HEADER)
    row = lines[1]
    assert row.startswith("q.mol\tt.mol Tanimoto (Sim.)= 0.33 ")
    assert "Euclidian (Dist.)= 2.00 " in row
    assert "Cosine (Sim.)= 0.50 " in row
    assert "Soergel (Dist.)= 0.67 " in row
    assert "Query (Atom Count)= 10 " in row
    assert "Target (Bond Count)= 9 " in row
    assert "Match (Size)= 5 " in row
    assert row.endswith("Time (ms):42 ")

def test_tabular_row_follows_header_and_is_flushed(options, decane):
    w = ResultWriter(replace(options, append_mode=True))
    w.start_session("append")
    w.write_graph_scores("q.mol", "t.mol", 0.333)
    w.write_header("q.mol", "t.mol", 5)
    w.write_results(decane, decane, stats())
    # read back while the session is still open
    graph = read_lines(options.graph_file + "_run")
    match = read_lines(options.match_file + "_run")
    desc = read_lines(options.descriptor_file + "_run")
    w.close_session()
    assert graph == ["q.mol\tt.mol\t0.33"]
    assert match[0] == "Molecule 1=\tq.mol"
    cols = desc[1].split("\t")
    assert len(cols) == len(DESCRIPTOR_HEADER) + 1
    assert cols[:8] == ["q.mol", "t.mol", "0.33", "", "0.33", "2.00", "0.50", "0.67"]
    assert cols[8:13] == ["10", "10", "9", "9", "5"]
    assert cols[-1] == "Time (ms):42 "

def test_zero_match_row_is_all_zero(options, decane):
    w = ResultWriter(replace(options, append_mode=True))
    w.start_session()
    w.write_results(decane, decane, stats(m=0, tan=0.9, euc=4.0))
    w.close_session()
    cols = read_lines(options.descriptor_file + "_run")[1].split("\t")
    assert cols[2:8] == ["0.00"] * 6

def test_writes_require_a_session(options, decane):
    w = ResultWriter(options)
    with pytest.raises(IllegalStateError):
        w.write_graph_scores("q", "t", 0.5)
    with pytest.raises(IllegalStateError):
        w.write_results(decane, decane, stats())
    with pytest.raises(IllegalStateError):
        w.close_session()

def test_session_lifecycle_errors(options):
    w = ResultWriter(options)
    w.start_session()
    with pytest.raises(IllegalStateError):
        w.start_session()
    w.close_session()
    with pytest.raises(IllegalStateError):
        w.close_session()
    with pytest.raises(IllegalStateError):
        w.write_header("q", "t", 1)
    w.start_session("append")
    w.close_session()

def test_match_report_blocks(options):
    q = Chem.MolFromSmiles("CCO")
    t = Chem.MolFromSmiles("OCCC")
    t.GetAtomWithIdx(0).SetProp("id", "o1")
    w = ResultWriter(options)
    w.start_session()
    w.write_header("q.mol", "t.mol", 2)
    w.write_mapping(1, [(q.GetAtomWithIdx(0), t.GetAtomWithIdx(2)),
                        (q.GetAtomWithIdx(2), t.GetAtomWithIdx(0))])
    w.write_mapping(2, {"a1": "b4"})
    w.close_session()
    assert read_lines(options.match_file + "_run") == [
        "Molecule 1=\tq.mol",
        "Molecule 2=\tt.mol",
        "Max atoms matched=\t2",
        "", "Solution=\t1", "C1\tC3", "O3\to1", "", "//",
        "", "Solution=\t2", "a1\tb4", "", "//",
    ]

def test_best_mapping_positions_are_one_based(options):
    w = ResultWriter(options)
    w.start_session()
    w.write_best_mapping(2, {"a1": "b1", "a2": "b3"}, {0: 0, 1: 2}, "query", "target")
    w.close_session()
    assert read_lines(options.match_file + "_run") == [
        "a1\tb1", "a2\tb3", "", BANNER,
        "Query =query", "Target = target", "Max atoms matched=\t2",
        "1\t1", "2\t3",
    ]

def test_make_label(options):
    assert ResultWriter(options).make_label(0.5, 0) == "Scores [Tanimoto: 0.50, Stereo: 0.00]"

def test_identical_molecules_get_full_bond_similarity(options, decane):
    w = ResultWriter(replace(options, append_mode=True))
    w.start_session()
    w.write_results(decane, decane, MatchStatistics("q", "t", 1.0, 0.0, 10, 1),
                    mapping={i: i for i in range(10)})
    w.close_session()
    cols = read_lines(options.descriptor_file + "_run")[1].split("\t")
    assert cols[2:5] == ["1.00", "1.00", "1.00"]

def test_only_tabular_rows_flush(options, decane, monkeypatch):
    calls = []
    real_flush = OutputSession.flush
    def counting_flush(self):
        calls.append(1)
        real_flush(self)
    monkeypatch.setattr(OutputSession, "flush", counting_flush)

    w = ResultWriter(options)
    w.start_session()
    w.write_results(decane, decane, stats())
    w.close_session()
    assert calls == []

    w = ResultWriter(replace(options, append_mode=True))
    w.start_session("append")
    w.write_results(decane, decane, stats())
    w.write_results(decane, decane, stats())
    w.close_session()
    assert len(calls) == 2
