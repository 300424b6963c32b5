"""
Reporting module for the Comparable Property Engine.

Renders CMA reports as PDF documents.

Usage:
    from core.cma import CMAGenerator
    from reporting import generate_cma_pdf

    report = CMAGenerator(store).generate(subject)
    result = generate_cma_pdf(report)
"""

from .cma_pdf import (
    CMAReportGenerator,
    CMAReportSuccess,
    generate_cma_pdf,
    report_filename,
)

__all__ = [
    "CMAReportGenerator",
    "CMAReportSuccess",
    "generate_cma_pdf",
    "report_filename",
]
