"""Reference kernels, one module per operation.

Every module here that defines a `kernel` object is auto-registered by
pixel_parity.registry.discover() and becomes a CLI subcommand. The module
docstring is the subcommand's documentation. Modules whose name starts with
an underscore are helpers and are skipped.
"""
