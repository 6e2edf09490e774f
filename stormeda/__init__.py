"""
stormeda package
================

This package contains the Storm Events impact report (STORMEDA).

- The CLI entry point is in `stormeda/cli.py`.
- The batch pipeline (filter -> join -> aggregate -> threshold) is in `stormeda/pipeline.py`.
- Dataset loading is in `stormeda/loader.py`.
- The DOCX report and bar charts are in `stormeda/report.py`.
"""

__version__ = '0.1.0'
