"""Covariate (MDS coordinate) file I/O.

Covariate file format:
- Whitespace/tab/space delimited (no header row)
- Row order matches the phenotype file (positional matching, not ID-based)
- Every value must be numeric; missing values are not supported
- No intercept column: the design matrix adds its own
"""

from pathlib import Path

import numpy as np


def read_covariate_file(path: Path) -> np.ndarray:
    """Read a covariate file into a (n_samples, n_cvt) float64 array.

    Raises:
        ValueError: If the file is empty, rows have inconsistent column counts,
            or a value cannot be parsed as a finite number.

    Example:
        Covariate file contents (two MDS dimensions):
        ```
        0.12  -0.40
        -0.31  0.05
        ```

        >>> read_covariate_file(Path("result.mds.txt")).shape
        (2, 2)
    """
    rows: list[list[str]] = []

    with open(path) as f:
        for line in f:
            stripped = line.strip()
            if not stripped:
                continue
            rows.append(stripped.split())

    if not rows:
        raise ValueError(f"Covariate file is empty: {path}")

    n_cvt = len(rows[0])
    for i, row in enumerate(rows):
        if len(row) != n_cvt:
            raise ValueError(
                f"Covariate file row {i + 1} has {len(row)} columns "
                f"but expected {n_cvt} (based on first row)"
            )

    covariates = np.zeros((len(rows), n_cvt), dtype=np.float64)
    for i, row in enumerate(rows):
        for j, val in enumerate(row):
            try:
                covariates[i, j] = float(val)
            except ValueError as e:
                raise ValueError(
                    f"Covariate file row {i + 1}, column {j + 1}: "
                    f"cannot parse '{val}' as numeric"
                ) from e
            if not np.isfinite(covariates[i, j]):
                raise ValueError(
                    f"Covariate file row {i + 1}, column {j + 1}: "
                    f"'{val}' is not finite (missing values are not supported)"
                )

    return covariates


def write_covariate_file(covariates: np.ndarray, path: Path) -> None:
    """Write covariates (e.g. MDS coordinates) one sample per row, tab-separated."""
    path.parent.mkdir(parents=True, exist_ok=True)
    cvt = np.atleast_2d(np.asarray(covariates, dtype=np.float64))
    np.savetxt(path, cvt, fmt="%.10g", delimiter="\t")
