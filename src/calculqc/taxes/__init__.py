"""Etapes de taxe et composition a trois etapes."""

from calculqc.taxes.etape import TaxStage
from calculqc.taxes.orchestrateur import TaxOrchestrator

__all__ = [
    "TaxOrchestrator",
    "TaxStage",
]
