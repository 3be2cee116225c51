"""panassoc command-line interface.

Typer-based CLI with two commands:
- mds: compute population-structure coordinates from k-mer presence
- assoc: test every k-mer for association with a binary phenotype
"""

import sys
import time
from pathlib import Path
from typing import Annotated

import typer

import panassoc
from panassoc.association import run_association
from panassoc.core import FitConfig, InvalidDimensionRequest, OutputConfig, get_worker_count
from panassoc.io import (
    presence_matrix,
    read_covariate_file,
    read_kmer_file,
    read_phenotype_file,
    write_assoc_results,
    write_covariate_file,
)
from panassoc.structure import compute_mds
from panassoc.utils import setup_logging, write_run_log

app = typer.Typer(
    name="panassoc",
    help="panassoc: k-mer association testing with MDS population-structure correction.",
    add_completion=False,
)

_global_config: OutputConfig | None = None


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"panassoc version {panassoc.__version__}")
        raise typer.Exit()


@app.callback()
def main(
    outdir: Annotated[
        Path,
        typer.Option("--outdir", help="Output directory"),
    ] = Path("output"),
    output: Annotated[
        str,
        typer.Option("-o", "--prefix", help="Output file prefix"),
    ] = "result",
    verbose: Annotated[
        bool,
        typer.Option("-v", "--verbose", help="Verbose output"),
    ] = False,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = None,
) -> None:
    """panassoc: k-mer association testing."""
    global _global_config
    _global_config = OutputConfig(outdir=outdir, prefix=output, verbose=verbose)
    setup_logging(verbose=verbose)


def _get_config() -> OutputConfig:
    global _global_config
    if _global_config is None:
        _global_config = OutputConfig()
    return _global_config


def _require_file(path: Path, label: str) -> None:
    if not path.exists():
        typer.echo(f"Error: {label} file not found: {path}", err=True)
        raise typer.Exit(code=1)


def _load_inputs(kmer_file: Path, phenotype_file: Path):
    _require_file(phenotype_file, "Phenotype")
    _require_file(kmer_file, "K-mer")
    try:
        samples, phenotype = read_phenotype_file(phenotype_file)
        kmers = read_kmer_file(kmer_file, samples)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from None
    typer.echo(f"Loaded {len(samples)} samples, {len(kmers)} k-mers")
    return samples, phenotype, kmers


@app.command("mds")
def mds_command(
    kmer_file: Annotated[
        Path,
        typer.Option("-k", "--kmers", help="K-mer presence file (SEQ | sample:count ...)"),
    ],
    phenotype_file: Annotated[
        Path,
        typer.Option("-p", "--pheno", help="Phenotype file (sample value)"),
    ],
    dimensions: Annotated[
        int,
        typer.Option("-d", "--dimensions", help="Number of MDS dimensions"),
    ] = 3,
    threads: Annotated[
        int | None,
        typer.Option("-t", "--threads", help="Worker threads (default: physical cores)"),
    ] = None,
) -> None:
    """Compute MDS population-structure coordinates from k-mer presence."""
    config = _get_config()
    t_start = time.perf_counter()
    command_line = " ".join(sys.argv)

    samples, _, kmers = _load_inputs(kmer_file, phenotype_file)
    n_threads = get_worker_count(threads)

    try:
        coords = compute_mds(presence_matrix(kmers), dimensions, threads=n_threads)
    except InvalidDimensionRequest as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from None

    config.ensure_outdir()
    write_covariate_file(coords, config.mds_path)
    typer.echo(f"MDS coordinates written to {config.mds_path}")

    elapsed = time.perf_counter() - t_start
    params = {
        "n_samples": len(samples),
        "n_kmers": len(kmers),
        "dimensions": dimensions,
        "threads": n_threads,
    }
    log_path = write_run_log(
        config, command_line, params, {"mds": config.mds_path}, {"total": elapsed}
    )
    typer.echo(f"Log written to {log_path}")


@app.command("assoc")
def assoc_command(
    kmer_file: Annotated[
        Path,
        typer.Option("-k", "--kmers", help="K-mer presence file (SEQ | sample:count ...)"),
    ],
    phenotype_file: Annotated[
        Path,
        typer.Option("-p", "--pheno", help="Phenotype file (sample value)"),
    ],
    covariate_file: Annotated[
        Path | None,
        typer.Option("-c", "--covariates", help="Covariate file, e.g. output of 'mds'"),
    ] = None,
    mds_dimensions: Annotated[
        int | None,
        typer.Option("--mds-dims", help="Compute this many MDS dimensions as covariates"),
    ] = None,
    threads: Annotated[
        int | None,
        typer.Option("-t", "--threads", help="Worker threads for MDS distances"),
    ] = None,
    min_af: Annotated[
        float,
        typer.Option("--min-af", help="Skip k-mers present in fewer than this fraction"),
    ] = 0.0,
    max_af: Annotated[
        float,
        typer.Option("--max-af", help="Skip k-mers present in more than this fraction"),
    ] = 1.0,
    max_iterations: Annotated[
        int,
        typer.Option("--max-iter", help="Newton-Raphson iteration cap per stage"),
    ] = FitConfig.max_iterations,
) -> None:
    """Test every k-mer for association with a binary phenotype."""
    config = _get_config()
    t_start = time.perf_counter()
    command_line = " ".join(sys.argv)

    if covariate_file is not None and mds_dimensions is not None:
        typer.echo("Error: use either -c or --mds-dims, not both", err=True)
        raise typer.Exit(code=1)

    samples, phenotype, kmers = _load_inputs(kmer_file, phenotype_file)

    covariates = None
    if covariate_file is not None:
        _require_file(covariate_file, "Covariate")
        try:
            covariates = read_covariate_file(covariate_file)
        except ValueError as e:
            typer.echo(f"Error loading covariate file: {e}", err=True)
            raise typer.Exit(code=1) from None
        if covariates.shape[0] != len(samples):
            typer.echo(
                f"Error: Covariate file has {covariates.shape[0]} rows "
                f"but the phenotype file has {len(samples)} samples",
                err=True,
            )
            raise typer.Exit(code=1)
        typer.echo(f"Loaded {covariates.shape[1]} covariates")
    elif mds_dimensions is not None:
        try:
            covariates = compute_mds(
                presence_matrix(kmers), mds_dimensions, threads=get_worker_count(threads)
            )
        except InvalidDimensionRequest as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(code=1) from None
    t_load = time.perf_counter()

    try:
        fit_config = FitConfig(max_iterations=max_iterations)
        summary = run_association(
            kmers,
            phenotype,
            covariates,
            config=fit_config,
            min_frequency=min_af,
            max_frequency=max_af,
        )
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from None

    config.ensure_outdir()
    write_assoc_results(summary.kmers, config.assoc_path)
    typer.echo(
        f"{summary.n_tested} k-mers tested, {summary.n_failed} failed, "
        f"{summary.n_filtered} filtered"
    )
    typer.echo(f"Association results written to {config.assoc_path}")

    t_end = time.perf_counter()
    params = {
        "n_samples": len(samples),
        "n_cases": int(phenotype.sum()),
        "n_kmers": len(kmers),
        "n_tested": summary.n_tested,
        "n_failed": summary.n_failed,
        "n_filtered": summary.n_filtered,
        "n_fallback": summary.n_fallback,
        "covariate_file": str(covariate_file) if covariate_file else None,
        "mds_dimensions": mds_dimensions,
        "n_covariates": 0 if covariates is None else covariates.shape[1],
    }
    timing = {
        "total": t_end - t_start,
        "load": t_load - t_start,
        "association": t_end - t_load,
    }
    log_path = write_run_log(
        config, command_line, params, {"assoc": config.assoc_path}, timing
    )
    typer.echo(f"Log written to {log_path}")


if __name__ == "__main__":
    app()
