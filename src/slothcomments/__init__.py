"""
sloth-comments: Sloth SLO specifications from source code comments.

Directives such as ``@sloth service`` and ``@sloth slo`` are read out of
ordinary comments and folded into one ``prometheus/v1`` document.
"""

__version__ = "0.1.0"
