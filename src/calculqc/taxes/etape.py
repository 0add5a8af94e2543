"""Une etape de taxe: taux cumules et calcul direct/inverse pour cette etape seule.

  taxe = (taxable * pourcentage / 100 + montant_par_unite) * qte + montant_par_ligne

Le pourcentage n'a pas de plafond: une taxe peut depasser 100%.
"""

from __future__ import annotations

from decimal import Decimal

from calculqc.accumulateur import RateAccumulator
from calculqc.decimales import (
    HUNDRED,
    ONE,
    ZERO,
    Valeur,
    contexte_exact,
    diviser,
    to_decimal,
)
from calculqc.erreurs import NegativeValueError
from calculqc.modes import Mode, vers_mode


class TaxStage(RateAccumulator):
    """Taux de taxe cumules pour une etape."""

    def add_percentual(self, percent: Valeur) -> None:
        self._ajouter(percent, Mode.PERCENTUAL, "taxe en pourcentage")

    def add_amount_per_unit(self, amount: Valeur) -> None:
        self._ajouter(amount, Mode.AMOUNT_PER_UNIT, "taxe par unite")

    def add_amount_per_line(self, amount: Valeur) -> None:
        self._ajouter(amount, Mode.AMOUNT_PER_LINE, "taxe par ligne")

    def add(self, amount: Valeur, mode: Mode) -> None:
        """Ajoute une taxe selon son mode.

        Raises:
            InvalidModeError: Si le mode est inconnu.
            NegativeValueError: Si le montant est negatif.
        """
        ajouts = {
            Mode.PERCENTUAL: self.add_percentual,
            Mode.AMOUNT_PER_UNIT: self.add_amount_per_unit,
            Mode.AMOUNT_PER_LINE: self.add_amount_per_line,
        }
        ajouts[vers_mode(mode)](amount)

    def tax(self, taxable: Valeur, qty: Valeur) -> Decimal:
        """Calcule la taxe de l'etape sur une valeur unitaire taxable.

        Une valeur taxable nulle donne une taxe nulle, meme avec des montants fixes.

        Raises:
            NegativeValueError: Si taxable ou qty est negatif.
        """
        taxable = to_decimal(taxable, "taxable")
        qty = to_decimal(qty, "qty")

        if taxable < ZERO:
            raise NegativeValueError(f"<taxable> negatif: {taxable}")
        if qty < ZERO:
            raise NegativeValueError(f"<qty> negatif: {qty}")

        if taxable == ZERO:
            return ZERO

        with contexte_exact():
            par_unite = taxable * self.percentual / HUNDRED + self.amount_per_unit
            return par_unite * qty + self.amount_per_line

    def untax(self, taxed: Valeur, qty: Valeur) -> Decimal:
        """Retire la taxe de l'etape d'un montant de ligne taxe.

        `taxed` vaut taxable * qte + taxe; le resultat est taxable * qte.

        Raises:
            NegativeValueError: Si une entree est negative, ou si le montant
                taxe est inferieur aux montants fixes de l'etape.
        """
        taxed = to_decimal(taxed, "taxed")
        qty = to_decimal(qty, "qty")

        if taxed < ZERO:
            raise NegativeValueError(f"<taxed> negatif: {taxed}")
        if qty < ZERO:
            raise NegativeValueError(f"<qty> negatif: {qty}")

        # Miroir du court-circuit de tax(): zero taxable -> zero taxe
        if taxed == ZERO:
            return ZERO

        with contexte_exact():
            sans_ligne = taxed - self.amount_per_line
            sans_unite = sans_ligne - self.amount_per_unit * qty
            diviseur = ONE + self.percentual / HUNDRED

        if sans_ligne < ZERO:
            raise NegativeValueError(
                f"montant taxe {taxed} inferieur a la taxe par ligne {self.amount_per_line}"
            )
        if sans_unite < ZERO:
            raise NegativeValueError(
                f"montant taxe {taxed} inferieur aux taxes fixes "
                f"{self.amount_per_line} + {self.amount_per_unit} x {qty}"
            )

        taxable = diviser(sans_unite, diviseur)
        if taxable < ZERO:
            raise NegativeValueError(f"montant avant taxe negatif: {taxable}")
        return taxable
