"""Tests for the grep / split / table pipelines."""

import gzip
from pathlib import Path

import pandas as pd
import pytest

from conftest import mol2_record, read_text
from mol2grep.core import pipeline
from mol2grep.errors import ConfigError, IoError, ParseError
from mol2grep.parsers import iter_mol2

TRUNCATED = "##########   Name:   broken\n@<TRIPOS>MOLECULE\nbroken\n"


@pytest.fixture
def inputs(write_mol2):
    return [
        write_mol2("a.mol2.gz", [("molA", -5.20001), ("molB", -1.0), ("molC", -5.2)]),
        write_mol2("b.mol2", [("molD", -7.0), ("molA", -9.9)]),
        write_mol2("c.mol2.gz", [("molE", -2.5), ("molB", -3.0)]),
    ]


@pytest.fixture
def query(write_query):
    return write_query(["molA\t-5.2", "molB\t-3.0", "molD\t-7.0"])


# -- grep --------------------------------------------------------------------


class TestGrep:
    def test_sequential(self, inputs, query, tmp_path: Path):
        out = tmp_path / "out.mol2.gz"
        stats = pipeline.grep(inputs, query, out)
        assert (stats.files, stats.processed, stats.accepted) == (3, 7, 3)
        got = [r.key for r in iter_mol2(out)]
        assert got == [("molA", -5.20001), ("molD", -7.0), ("molB", -3.0)]

    def test_output_is_verbatim(self, inputs, query, tmp_path: Path):
        out = tmp_path / "out.mol2"
        pipeline.grep(inputs, query, out)
        expected = mol2_record("molA", -5.20001) + mol2_record("molD", -7.0) + mol2_record("molB", -3.0)
        assert out.read_text() == expected

    def test_parallel_matches_sequential_order(self, inputs, query, tmp_path: Path):
        seq = tmp_path / "seq.mol2"
        par = tmp_path / "par.mol2"
        pipeline.grep(inputs, query, seq)
        stats = pipeline.grep(inputs, query, par, workers=3)
        assert par.read_text() == seq.read_text()
        assert stats.accepted == 3

    def test_names_only(self, inputs, write_query, tmp_path: Path):
        out = tmp_path / "out.mol2"
        stats = pipeline.grep(inputs, write_query(["molB"], "names.txt"), out, names_only=True)
        assert stats.accepted == 2
        assert [r.key for r in iter_mol2(out)] == [("molB", -1.0), ("molB", -3.0)]

    def test_idempotent(self, inputs, query, tmp_path: Path):
        once = tmp_path / "once.mol2"
        twice = tmp_path / "twice.mol2"
        pipeline.grep(inputs, query, once)
        pipeline.grep([once], query, twice)
        assert twice.read_text() == once.read_text()

    def test_empty_query_gives_empty_output(self, inputs, tmp_path: Path):
        empty = tmp_path / "empty.tsv"
        empty.write_text("")
        out = tmp_path / "out.mol2"
        stats = pipeline.grep(inputs, empty, out)
        assert stats.accepted == 0
        assert out.read_text() == ""

    def test_empty_input_gives_empty_output(self, write_mol2, query, tmp_path: Path):
        out = tmp_path / "out.mol2"
        stats = pipeline.grep([write_mol2("empty.mol2", [])], query, out)
        assert stats.processed == 0
        assert out.read_text() == ""

    @pytest.mark.parametrize("workers", [1, 2])
    def test_parse_error_keeps_prior_output(self, write_mol2, query, tmp_path: Path, workers):
        good = write_mol2("good.mol2", [("molA", -5.2)])
        bad = write_mol2("bad.mol2", [("molD", -7.0)], raw_suffix=TRUNCATED)
        never = write_mol2("never.mol2", [("molB", -3.0)])
        out = tmp_path / "out.mol2"
        with pytest.raises(ParseError) as exc:
            pipeline.grep([good, bad, never], query, out, workers=workers)
        assert exc.value.path == str(bad)
        assert [r.name for r in iter_mol2(out)] == ["molA", "molD"]

    def test_malformed_only_record_emits_nothing(self, write_mol2, query, tmp_path: Path):
        bad = write_mol2("bad.mol2", [], raw_suffix=TRUNCATED)
        out = tmp_path / "out.mol2"
        with pytest.raises(ParseError):
            pipeline.grep([bad], query, out)
        assert out.read_text() == ""

    def test_bad_query_aborts_before_output(self, inputs, write_query, tmp_path: Path):
        out = tmp_path / "out.mol2"
        with pytest.raises(ParseError):
            pipeline.grep(inputs, write_query(["molA\tx"]), out)
        assert not out.exists()

    def test_missing_input(self, query, tmp_path: Path):
        with pytest.raises(IoError):
            pipeline.grep([tmp_path / "missing.mol2.gz"], query, tmp_path / "out.mol2")

    def test_no_inputs(self, query, tmp_path: Path):
        with pytest.raises(ConfigError):
            pipeline.grep([], query, tmp_path / "out.mol2")

    def test_bad_worker_count(self, inputs, query, tmp_path: Path):
        with pytest.raises(ConfigError):
            pipeline.grep(inputs, query, tmp_path / "out.mol2", workers=0)


# -- split -------------------------------------------------------------------


def test_split_round_robin(write_mol2, tmp_path: Path):
    a = write_mol2("a.mol2", [(f"m{i}", -float(i)) for i in range(4)])
    b = write_mol2("b.mol2.gz", [(f"m{i}", -float(i)) for i in range(4, 7)])
    prefix = tmp_path / "parts" / "split"
    counts = pipeline.split([a, b], prefix=prefix, num_files=3)
    assert counts == [3, 2, 2]
    first = tmp_path / "parts" / "split.0000.mol2.gz"
    assert [r.name for r in iter_mol2(first)] == ["m0", "m3", "m6"]
    assert [r.name for r in iter_mol2(tmp_path / "parts" / "split.0002.mol2.gz")] == ["m2", "m5"]


def test_split_more_files_than_records(write_mol2, tmp_path: Path):
    a = write_mol2("a.mol2", [("only", -1.0)])
    counts = pipeline.split([a], prefix=tmp_path / "s", num_files=3)
    assert counts == [1, 0, 0]
    assert read_text(tmp_path / "s.0002.mol2.gz") == ""


def test_split_output_name():
    assert pipeline.split_output_name("out/x", 7) == Path("out/x.0007.mol2.gz")


def test_split_bad_num_files(write_mol2, tmp_path: Path):
    with pytest.raises(ConfigError):
        pipeline.split([write_mol2("a.mol2", [("a", -1.0)])], prefix=tmp_path / "s", num_files=0)


# -- table -------------------------------------------------------------------


def test_table_with_header(write_mol2, tmp_path: Path):
    a = write_mol2("a.mol2.gz", [("molA", -5.25), ("molB", None)])
    b = write_mol2("b.mol2", [("molC", 1.5)])
    out = tmp_path / "table.tsv.gz"
    df = pipeline.table([a, b], out)
    assert list(df.columns) == ["ligand_id", "name", "energy"]
    assert df["ligand_id"].tolist() == [0, 1, 2]
    assert df["name"].tolist() == ["molA", "molB", "molC"]
    assert pd.isna(df["energy"].iloc[1])

    with gzip.open(out, "rt") as f:
        lines = f.read().splitlines()
    assert lines[0] == "ligand_id\tname\tenergy"
    assert lines[1] == "0\tmolA\t-5.25"
    assert lines[2] == "1\tmolB\t"


def test_table_without_header(write_mol2, tmp_path: Path):
    a = write_mol2("a.mol2", [("molA", -5.25)])
    out = tmp_path / "table.tsv"
    pipeline.table([a], out, header=False)
    assert out.read_text().splitlines() == ["0\tmolA\t-5.25"]
