"""Kernel auto-discovery and registration.

Scans pixel_parity/kernels/ for modules that define a `kernel` object of
type Kernel and collects them into a dict keyed by name. Modules whose
names start with an underscore hold shared helpers and are skipped.
"""

import importlib
import pkgutil

from pixel_parity.core.types import Kernel

_registry: dict[str, Kernel] = {}


def discover() -> dict[str, Kernel]:
    """Import all kernel modules and return the registry."""
    if _registry:
        return _registry

    import pixel_parity.kernels as pkg

    for _importer, modname, _ispkg in pkgutil.iter_modules(pkg.__path__):
        if modname.startswith('_'):
            continue
        module = importlib.import_module(f'pixel_parity.kernels.{modname}')
        kernel = getattr(module, 'kernel', None)
        if isinstance(kernel, Kernel):
            _registry[kernel.name] = kernel

    return _registry


def get(name: str) -> Kernel:
    """Get a kernel by name."""
    reg = discover()
    if name not in reg:
        raise KeyError(f'Unknown kernel: {name}. Available: {", ".join(sorted(reg))}')
    return reg[name]


def all_kernels() -> dict[str, Kernel]:
    """Return all registered kernels."""
    return discover()
