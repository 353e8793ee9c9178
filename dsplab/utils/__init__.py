"""dsplab utilities."""

from dsplab.utils.plot_values import finite_mask, is_null_result, normalize_plot_value, to_plot_series

__all__ = [
    'finite_mask',
    'is_null_result',
    'normalize_plot_value',
    'to_plot_series',
]
