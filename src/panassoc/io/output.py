"""Association result output.

Tab-separated, one k-mer per line, header:
kmer  af  beta  se  p_wald  method  notes

Unset values are written as NA; notes are the k-mer's diagnostic tags,
comma-joined.
"""

from collections.abc import Iterable
from pathlib import Path

from panassoc.association.results import Kmer

HEADER = "kmer\taf\tbeta\tse\tp_wald\tmethod\tnotes"


def _fmt(value: float | None) -> str:
    return "NA" if value is None else f"{value:.6e}"


def format_assoc_line(kmer: Kmer) -> str:
    """Format one k-mer as a tab-separated line (no newline).

    - af: .3f
    - beta, se, p_wald: .6e
    """
    return "\t".join(
        [
            kmer.sequence,
            f"{kmer.allele_frequency:.3f}",
            _fmt(kmer.beta),
            _fmt(kmer.se),
            _fmt(kmer.p_value),
            kmer.method.value if kmer.method is not None else "NA",
            ",".join(kmer.comments) if kmer.comments else "NA",
        ]
    )


def write_assoc_results(kmers: Iterable[Kmer], path: Path) -> int:
    """Write association results, creating parent directories as needed.

    Returns:
        Number of k-mers written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    n_written = 0
    with open(path, "w") as f:
        f.write(HEADER + "\n")
        for kmer in kmers:
            f.write(format_assoc_line(kmer) + "\n")
            n_written += 1
    return n_written
