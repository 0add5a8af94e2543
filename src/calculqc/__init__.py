"""CalculQC - Calcul exact des remises et taxes d'une ligne de vente."""

from calculqc.erreurs import (
    CalculError,
    DivisionByZeroError,
    InvalidDecimalError,
    InvalidModeError,
    NegativeValueError,
    OverMaxDiscountError,
    StageError,
)
from calculqc.ligne import LineCalculator
from calculqc.modes import Mode, Stage
from calculqc.remise import DiscountAccumulator, InvertedDiscount
from calculqc.resultat import CalculationResult, CalculationWithoutDiscount
from calculqc.taxes import TaxOrchestrator, TaxStage

__version__ = "0.1.0"

__all__ = [
    "CalculError",
    "CalculationResult",
    "CalculationWithoutDiscount",
    "DiscountAccumulator",
    "DivisionByZeroError",
    "InvalidDecimalError",
    "InvalidModeError",
    "InvertedDiscount",
    "LineCalculator",
    "Mode",
    "NegativeValueError",
    "OverMaxDiscountError",
    "Stage",
    "StageError",
    "TaxOrchestrator",
    "TaxStage",
]
