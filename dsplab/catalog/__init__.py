"""
dsplab Catalog - Named Signals with Known Duration

Usage:
    from dsplab.catalog import default_catalog, get_signal, load_catalog

    for signal in default_catalog():
        print(signal.name, signal.duration.value)
"""

from dsplab.catalog.signals import (
    CatalogSignal,
    DecompositionStep,
    SignalCatalog,
    catalog_from_dict,
    decompose,
    default_catalog,
    get_signal,
    load_catalog,
    signal_key,
)

__all__ = [
    'CatalogSignal',
    'DecompositionStep',
    'SignalCatalog',
    'catalog_from_dict',
    'decompose',
    'default_catalog',
    'get_signal',
    'load_catalog',
    'signal_key',
]
