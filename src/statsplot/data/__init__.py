"""
Data package for reshaping chart inputs

This package includes:
- processors: column selection, count expansion and missing-value filtering
"""

from .processors import prepare_pie_data, prepare_dot_data

__all__ = ['prepare_pie_data', 'prepare_dot_data']
