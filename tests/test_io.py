"""Tests for phenotype, k-mer, covariate and result file I/O."""

import numpy as np
import pytest

from panassoc.association import BFGS_FAIL, NR_FAIL, FitMethod, Kmer
from panassoc.core import OutputConfig
from panassoc.io import (
    HEADER,
    format_assoc_line,
    parse_kmer_line,
    presence_matrix,
    read_covariate_file,
    read_kmer_file,
    read_phenotype_file,
    write_assoc_results,
    write_covariate_file,
)
from panassoc.utils import write_run_log

pytestmark = pytest.mark.tier0


class TestPhenotypeFile:
    """Tests for read_phenotype_file()."""

    def test_reads_in_order(self, tmp_path):
        path = tmp_path / "pheno.txt"
        path.write_text("b 1\na 0\n\nc\t1\n")

        samples, y = read_phenotype_file(path)

        assert samples == ["b", "a", "c"]
        np.testing.assert_array_equal(y, [1.0, 0.0, 1.0])
        assert y.dtype == np.float64

    @pytest.mark.parametrize(
        "content, match",
        [
            ("a 1 extra\n", "columns"),
            ("a 2\n", "not 0 or 1"),
            ("a NA\n", "not 0 or 1"),
            ("a 1\na 0\n", "duplicate"),
            ("\n\n", "empty"),
        ],
    )
    def test_rejects_bad_files(self, tmp_path, content, match):
        path = tmp_path / "pheno.txt"
        path.write_text(content)
        with pytest.raises(ValueError, match=match):
            read_phenotype_file(path)


class TestKmerFile:
    """Tests for the k-mer presence reader."""

    def test_parse_line(self):
        index = {"s1": 0, "s2": 1, "s3": 2}
        kmer = parse_kmer_line("ACGT | s3:5 s1:1", index, 3)

        assert kmer.sequence == "ACGT"
        np.testing.assert_array_equal(kmer.presence, [1.0, 0.0, 1.0])

    def test_unknown_samples_ignored(self):
        kmer = parse_kmer_line("ACGT | s1:1 other:2", {"s1": 0}, 1)
        np.testing.assert_array_equal(kmer.presence, [1.0])

    def test_sample_ids_may_contain_colons(self):
        kmer = parse_kmer_line("ACGT | lane:1:s1:4", {"lane:1:s1": 0}, 1)
        np.testing.assert_array_equal(kmer.presence, [1.0])

    def test_no_carriers(self):
        kmer = parse_kmer_line("ACGT |", {"s1": 0}, 1)
        np.testing.assert_array_equal(kmer.presence, [0.0])

    @pytest.mark.parametrize("line", ["ACGT s1:1", " | s1:1"])
    def test_malformed_line(self, line):
        with pytest.raises(ValueError, match="Malformed"):
            parse_kmer_line(line, {"s1": 0}, 1)

    def test_read_file(self, example_files):
        samples, _ = read_phenotype_file(example_files["pheno"])
        kmers = read_kmer_file(example_files["kmers"], samples)

        assert [k.sequence for k in kmers][:2] == ["ACGTACGTAC", "CCGTACGTAA"]
        assert len(kmers) == 5
        assert kmers[0].presence[:20].sum() == 14
        assert kmers[0].presence[20:].sum() == 6

    def test_error_reports_line_number(self, tmp_path):
        path = tmp_path / "kmers.txt"
        path.write_text("ACGT | s1:1\nbroken line\n")
        with pytest.raises(ValueError, match="line 2"):
            read_kmer_file(path, ["s1"])

    def test_presence_matrix(self):
        kmers = [Kmer("A", [1, 0, 1]), Kmer("C", [0, 0, 1])]
        M = presence_matrix(kmers)
        np.testing.assert_array_equal(M, [[1, 0], [0, 0], [1, 1]])

    def test_presence_matrix_empty(self):
        assert presence_matrix([]).shape == (0, 0)


class TestCovariateFile:
    """Tests for covariate read/write."""

    def test_round_trip(self, tmp_path):
        cvt = np.array([[0.125, -1.5], [3.0e-7, 42.0]])
        path = tmp_path / "sub" / "cvt.txt"

        write_covariate_file(cvt, path)

        np.testing.assert_allclose(read_covariate_file(path), cvt, rtol=1e-9)

    def test_mixed_whitespace(self, tmp_path):
        path = tmp_path / "cvt.txt"
        path.write_text("1.0\t2.0\n3.0   4.0\n\n")
        np.testing.assert_array_equal(read_covariate_file(path), [[1, 2], [3, 4]])

    @pytest.mark.parametrize(
        "content, match",
        [
            ("", "empty"),
            ("1 2\n3\n", "columns"),
            ("1 NA\n", "numeric"),
            ("1 nan\n", "not finite"),
        ],
    )
    def test_rejects_bad_files(self, tmp_path, content, match):
        path = tmp_path / "cvt.txt"
        path.write_text(content)
        with pytest.raises(ValueError, match=match):
            read_covariate_file(path)


class TestAssocOutput:
    """Tests for the association result writer."""

    def test_tested_line(self):
        kmer = Kmer(
            "ACGT",
            [1, 0, 0, 1],
            beta=1.5,
            se=0.25,
            p_value=1e-9,
            method=FitMethod.NEWTON,
            comments=(BFGS_FAIL,),
        )
        fields = format_assoc_line(kmer).split("\t")

        assert fields == [
            "ACGT",
            "0.500",
            "1.500000e+00",
            "2.500000e-01",
            "1.000000e-09",
            "newton-raphson",
            "bfgs-fail",
        ]

    def test_untested_line(self):
        kmer = Kmer("ACGT", [1, 0], comments=(BFGS_FAIL, NR_FAIL))
        fields = format_assoc_line(kmer).split("\t")

        assert fields[2:6] == ["NA", "NA", "NA", "NA"]
        assert fields[6] == "bfgs-fail,nr-fail"

    def test_write_file(self, tmp_path):
        path = tmp_path / "out" / "result.assoc.txt"
        n = write_assoc_results([Kmer("A", [1, 0]), Kmer("C", [0, 1])], path)

        lines = path.read_text().splitlines()
        assert n == 2
        assert lines[0] == HEADER
        assert [line.split("\t")[0] for line in lines[1:]] == ["A", "C"]


class TestRunLog:
    """Tests for write_run_log()."""

    def test_writes_sections(self, tmp_path):
        config = OutputConfig(outdir=tmp_path, prefix="run")
        path = write_run_log(
            config,
            "panassoc assoc -k k.txt",
            {"n_samples": 40, "covariate_file": None},
            {"assoc": config.assoc_path},
            {"total": 1.234, "load": 0.5},
        )

        lines = path.read_text().splitlines()
        assert path == tmp_path / "run.log.txt"
        assert lines[0].startswith("# panassoc ")
        assert lines[2] == "# command: panassoc assoc -k k.txt"
        assert lines[4:8] == ["[run]", "n_samples = 40", "covariate_file = None", ""]
        assert lines[8:11] == ["[outputs]", f"assoc = {tmp_path / 'run.assoc.txt'}", ""]
        assert lines[11:14] == ["[timing]", "total = 1.23", "load = 0.50"]

    def test_creates_outdir(self, tmp_path):
        config = OutputConfig(outdir=tmp_path / "nested", prefix="run")
        path = write_run_log(config, "panassoc mds", {}, {}, {})

        assert path.exists()
        assert "[outputs]" in path.read_text()
