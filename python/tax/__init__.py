"""
Tax Support Module

Handles Korean corporate income tax, wage withholding and VAT
calculations, Hometax filing guides and the filing deadline calendar.
"""

from .corporate_tax import (
    CorporateTaxCalculator,
    CorporateTaxResult,
    TaxBracket,
)
from .withholding import (
    WithholdingCalculator,
    WithholdingResult,
)
from .vat_calculator import (
    VATCalculator,
    VATDeduction,
    VATResult,
    fetch_from_ecount,
)
from .filing_guide import (
    FilingGuide,
    GuideStep,
    get_guide,
    load_guides,
)
from .tax_calendar import (
    TaxCalendar,
    TaxDeadline,
)

__all__ = [
    # Corporate Tax
    "CorporateTaxCalculator",
    "CorporateTaxResult",
    "TaxBracket",
    # Withholding
    "WithholdingCalculator",
    "WithholdingResult",
    # VAT
    "VATCalculator",
    "VATDeduction",
    "VATResult",
    "fetch_from_ecount",
    # Filing Guide
    "FilingGuide",
    "GuideStep",
    "get_guide",
    "load_guides",
    # Calendar
    "TaxCalendar",
    "TaxDeadline",
]
