"""I/O modules for panassoc.

- kmers: k-mer presence and phenotype file readers
- covariate: covariate / MDS coordinate files
- output: association result writer
"""

from panassoc.io.covariate import read_covariate_file, write_covariate_file
from panassoc.io.kmers import (
    parse_kmer_line,
    presence_matrix,
    read_kmer_file,
    read_phenotype_file,
)
from panassoc.io.output import HEADER, format_assoc_line, write_assoc_results

__all__ = [
    "HEADER",
    "format_assoc_line",
    "parse_kmer_line",
    "presence_matrix",
    "read_covariate_file",
    "read_kmer_file",
    "read_phenotype_file",
    "write_assoc_results",
    "write_covariate_file",
]
