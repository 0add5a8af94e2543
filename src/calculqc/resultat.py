"""Resultats de calcul d'une ligne (avec et sans remise).

Les resultats sont immuables: `round` produit un nouveau resultat.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from pydantic import BaseModel, ConfigDict, Field

from calculqc.decimales import ZERO, quantize


class CalculationWithoutDiscount(BaseModel):
    """Valeurs de la ligne calculees sur le prix sans remise."""

    model_config = ConfigDict(frozen=True)

    net: Decimal = Field(default=ZERO, description="Valeur unitaire x quantite")
    gross: Decimal = Field(default=ZERO, description="Net plus taxes")
    tax: Decimal = Field(default=ZERO, description="Taxes cumulees sur le net")
    unit_value: Decimal = Field(default=ZERO, description="Valeur unitaire utilisee")

    def round(self, scale: int, rounding: str = ROUND_HALF_UP) -> CalculationWithoutDiscount:
        """Retourne une copie arrondie a `scale` decimales."""
        return self.model_copy(
            update={
                nom: quantize(getattr(self, nom), scale, rounding)
                for nom in type(self).model_fields
            }
        )

    def __str__(self) -> str:
        return (
            f"net {self.net}, gross {self.gross}, tax {self.tax}, "
            f"unit_value {self.unit_value}"
        )


class CalculationResult(BaseModel):
    """Resultat complet du calcul d'une ligne."""

    model_config = ConfigDict(frozen=True)

    net: Decimal = Field(default=ZERO, description="Valeur unitaire x quantite moins la remise")
    gross: Decimal = Field(default=ZERO, description="Net plus taxes")
    tax: Decimal = Field(default=ZERO, description="Taxes cumulees sur le net remise")
    discount_value: Decimal = Field(default=ZERO, description="Remise cumulee")
    discount_gross_value: Decimal = Field(
        default=ZERO, description="Effet de la remise sur le brut (brut - brut sans remise)"
    )
    total_discount_percent: Decimal = Field(
        default=ZERO, description="Remise totale en % de la ligne"
    )
    unit_value: Decimal = Field(default=ZERO, description="Valeur unitaire apres remise")
    without_discount: CalculationWithoutDiscount = Field(
        default_factory=CalculationWithoutDiscount
    )

    def round(self, scale: int, rounding: str = ROUND_HALF_UP) -> CalculationResult:
        """Retourne une copie dont chaque montant est arrondi a `scale` decimales.

        Le resultat d'origine n'est pas modifie.
        """
        valeurs = {
            nom: quantize(getattr(self, nom), scale, rounding)
            for nom in type(self).model_fields
            if nom != "without_discount"
        }
        valeurs["without_discount"] = self.without_discount.round(scale, rounding)
        return self.model_copy(update=valeurs)

    def __str__(self) -> str:
        return (
            f"net {self.net}, gross {self.gross}, tax {self.tax}, "
            f"discount value {self.discount_value}, "
            f"discount gross value {self.discount_gross_value}, "
            f"total discount percent {self.total_discount_percent}, "
            f"unit_value {self.unit_value} (sans remise: {self.without_discount})"
        )
