"""JAX configuration utilities for panassoc.

JAX provides the normal-distribution tail used for Wald p-values. Default JAX
uses 32-bit floats, which underflow long before genome-wide significance
levels, so 64-bit mode must be enabled before any p-value is computed.
ensure_jax_configured() does this lazily the first time it is needed.
"""

from __future__ import annotations

from typing import Any

import jax
from loguru import logger

_configured = False


def configure_jax(enable_x64: bool = True, platform: str | None = None) -> None:
    """Configure JAX for panassoc computations.

    Args:
        enable_x64: Enable 64-bit floating point precision. Defaults to True.
        platform: Optional platform name ("cpu", "gpu", "tpu"). If None,
            JAX auto-selects the best available platform.

    Example:
        >>> configure_jax()  # Enable x64, auto-select platform
        >>> configure_jax(platform="cpu")  # Force CPU backend
    """
    global _configured

    if enable_x64:
        jax.config.update("jax_enable_x64", True)
        logger.debug("JAX 64-bit precision enabled")

    if platform is not None:
        jax.config.update("jax_platform_name", platform)
        logger.debug(f"JAX platform set to: {platform}")

    _configured = True
    info = get_jax_info()
    logger.debug(
        f"JAX configured: version={info['version']}, "
        f"backend={info['backend']}, x64={info['x64_enabled']}"
    )


def ensure_jax_configured() -> None:
    """Enable 64-bit JAX once per process, leaving explicit settings alone."""
    if not _configured:
        configure_jax(enable_x64=True)


def get_jax_info() -> dict[str, Any]:
    """Get information about the current JAX configuration.

    Returns:
        Dictionary with keys:
            - version: JAX version string
            - backend: Current default backend name (cpu/gpu/tpu)
            - x64_enabled: Whether 64-bit precision is enabled
    """
    return {
        "version": jax.__version__,
        "backend": jax.default_backend(),
        "x64_enabled": bool(jax.config.jax_enable_x64),
    }
