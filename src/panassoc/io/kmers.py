"""K-mer presence and phenotype file readers.

Phenotype file format:
- Whitespace delimited, no header: ``sample_id value``
- Value must be 0 or 1
- Row order defines the sample order of every matrix built from it

K-mer file format (fsm-lite style), one k-mer per line:
``ACGTACGT | sample_a:3 sample_c:1``
Listed samples carry the k-mer; the count after the colon is ignored.
Samples that do not appear in the phenotype file are skipped.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import numpy as np
from loguru import logger

from panassoc.association.results import Kmer


def read_phenotype_file(path: Path) -> tuple[list[str], np.ndarray]:
    """Read a binary phenotype file.

    Args:
        path: Path to the phenotype file.

    Returns:
        Tuple of (sample_ids, phenotype) with phenotype as a float64 0/1 array.

    Raises:
        ValueError: If the file is empty, a row does not have two columns,
            a sample is repeated, or a value is not 0/1.
    """
    samples: list[str] = []
    values: list[float] = []
    seen: set[str] = set()

    with open(path) as f:
        for line_no, line in enumerate(f, start=1):
            stripped = line.strip()
            if not stripped:
                continue
            parts = stripped.split()
            if len(parts) != 2:
                raise ValueError(
                    f"Phenotype file line {line_no} has {len(parts)} columns, expected 2"
                )
            sample, value = parts
            if value not in ("0", "1"):
                raise ValueError(
                    f"Phenotype file line {line_no}: value '{value}' is not 0 or 1"
                )
            if sample in seen:
                raise ValueError(f"Phenotype file line {line_no}: duplicate sample '{sample}'")
            seen.add(sample)
            samples.append(sample)
            values.append(float(value))

    if not samples:
        raise ValueError(f"Phenotype file is empty: {path}")

    return samples, np.array(values, dtype=np.float64)


def parse_kmer_line(line: str, sample_index: dict[str, int], n_samples: int) -> Kmer:
    """Parse one ``SEQUENCE | sample:count ...`` line into a Kmer.

    Raises:
        ValueError: If the separator is missing or the sequence is empty.
    """
    sequence, sep, occurrences = line.partition("|")
    sequence = sequence.strip()
    if not sep or not sequence:
        raise ValueError(f"Malformed k-mer line (expected 'SEQ | sample:count ...'): {line!r}")

    presence = np.zeros(n_samples, dtype=np.float64)
    for token in occurrences.split():
        sample = token.rsplit(":", 1)[0]
        idx = sample_index.get(sample)
        if idx is not None:
            presence[idx] = 1.0

    return Kmer(sequence=sequence, presence=presence)


def read_kmer_file(path: Path, samples: Sequence[str]) -> list[Kmer]:
    """Read every k-mer in a file, with presence in ``samples`` order.

    Args:
        path: Path to the k-mer file.
        samples: Sample IDs in phenotype order.

    Returns:
        List of Kmer records, in file order.

    Raises:
        ValueError: If a line is malformed (message includes the line number).
    """
    sample_index = {s: i for i, s in enumerate(samples)}
    kmers: list[Kmer] = []

    with open(path) as f:
        for line_no, line in enumerate(f, start=1):
            stripped = line.strip()
            if not stripped:
                continue
            try:
                kmers.append(parse_kmer_line(stripped, sample_index, len(samples)))
            except ValueError as e:
                raise ValueError(f"K-mer file line {line_no}: {e}") from e

    logger.info(f"Read {len(kmers):,} k-mers for {len(samples):,} samples from {path}")
    return kmers


def presence_matrix(kmers: Sequence[Kmer]) -> np.ndarray:
    """Stack k-mer presence columns into a (n_samples, n_kmers) matrix."""
    if not kmers:
        return np.zeros((0, 0), dtype=np.float64)
    return np.column_stack([k.presence for k in kmers])
