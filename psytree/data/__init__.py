"""
Data logging for psytree runs.
"""

from .data_log import DataLog

__all__ = ['DataLog']
