"""pixel_parity.core: foundation layer.

Errors, logging, settings, shared types, vector math, strided arrays, test
data generators, Pillow image conversion and the report builder. This module
has NO dependencies on pixel_parity.kernels or pixel_parity.registry.
Only stdlib, numpy and PIL are allowed here.
"""
