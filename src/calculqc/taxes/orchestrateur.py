"""Composition des trois etapes de taxe.

  t1 = over_taxable.tax(base, qte)
  t2 = over_tax.tax(base + t1, qte)          taxe sur taxe
  t3 = over_tax_ignorable.tax(base, qte)     exclue de l'assiette de over_tax
  taxe = t1 + t2 + t3

L'inversion retire les etapes dans l'ordre inverse (over_tax_ignorable,
over_tax, over_taxable). Elle n'est exacte que si over_tax et
over_tax_ignorable sont vides; `inversion_residual` mesure l'ecart sans le
corriger.
"""

from __future__ import annotations

from decimal import Decimal

from calculqc.decimales import HUNDRED, ZERO, Valeur, contexte_exact, diviser, to_decimal
from calculqc.erreurs import (
    CalculError,
    DivisionByZeroError,
    NegativeValueError,
    StageError,
)
from calculqc.modes import Mode, Stage, vers_etape, vers_mode
from calculqc.taxes.etape import TaxStage


class TaxOrchestrator:
    """Taxes d'une ligne reparties en trois etapes."""

    def __init__(self) -> None:
        self._etapes: dict[Stage, TaxStage] = {stage: TaxStage() for stage in Stage}

    @property
    def over_taxable(self) -> TaxStage:
        return self._etapes[Stage.OVER_TAXABLE]

    @property
    def over_tax(self) -> TaxStage:
        return self._etapes[Stage.OVER_TAX]

    @property
    def over_tax_ignorable(self) -> TaxStage:
        return self._etapes[Stage.OVER_TAX_IGNORABLE]

    def stage(self, stage: Stage) -> TaxStage:
        """Retourne l'etape demandee.

        Raises:
            InvalidModeError: Si l'etape est inconnue.
        """
        return self._etapes[vers_etape(stage)]

    def add(self, amount: Valeur, stage: Stage, mode: Mode) -> None:
        """Ajoute une taxe a une etape.

        Raises:
            InvalidModeError: Si l'etape ou le mode est inconnu.
            NegativeValueError: Si le montant est negatif.
        """
        self.stage(stage).add(amount, mode)

    def tax(self, unit_value: Valeur, qty: Valeur) -> Decimal:
        """Taxe totale des trois etapes pour une valeur unitaire et une quantite.

        Raises:
            NegativeValueError: Si une etape refuse ses entrees.
        """
        unit_value = to_decimal(unit_value, "unit_value")
        qty = to_decimal(qty, "qty")

        t1 = self.over_taxable.tax(unit_value, qty)
        with contexte_exact():
            assiette_sur_taxe = unit_value + t1
        t2 = self.over_tax.tax(assiette_sur_taxe, qty)
        t3 = self.over_tax_ignorable.tax(unit_value, qty)
        with contexte_exact():
            return t1 + t2 + t3

    def untax(self, taxed: Valeur, qty: Valeur) -> Decimal:
        """Retire les taxes des trois etapes d'un montant de ligne taxe.

        Returns:
            Le montant de ligne avant taxes.

        Raises:
            StageError: Enveloppe l'echec de la premiere etape fautive.
        """
        montant = to_decimal(taxed, "taxed")
        qty = to_decimal(qty, "qty")

        for stage in (Stage.OVER_TAX_IGNORABLE, Stage.OVER_TAX, Stage.OVER_TAXABLE):
            try:
                montant = self._etapes[stage].untax(montant, qty)
            except CalculError as e:
                raise StageError(stage.value, e, taxed=montant, qty=qty) from e
        return montant

    def inversion_residual(self, unit_value: Valeur, qty: Valeur) -> Decimal:
        """Ecart de l'aller-retour untax(tax(x)) pour une valeur unitaire.

        Zero quand l'inversion est exacte pour cette configuration.
        """
        unit_value = to_decimal(unit_value, "unit_value")
        qty = to_decimal(qty, "qty")

        taxe = self.tax(unit_value, qty)
        with contexte_exact():
            net = unit_value * qty
            brut = net + taxe
        inverse = self.untax(brut, qty)
        with contexte_exact():
            return inverse - net

    @staticmethod
    def ratio(taxed: Valeur, tax: Valeur) -> Decimal:
        """Part de la taxe dans le total, en pourcentage: 100 * taxe / (taxe + montant).

        Raises:
            DivisionByZeroError: Si le total est nul.
        """
        taxed = to_decimal(taxed, "taxed")
        tax = to_decimal(tax, "tax")

        with contexte_exact():
            denominateur = taxed + tax
        if denominateur == ZERO:
            raise DivisionByZeroError(
                f"ratio de taxe indefini: taxed={taxed}, tax={tax}"
            )
        with contexte_exact():
            tax = HUNDRED * tax
        return diviser(tax, denominateur)

    @staticmethod
    def line_tax(taxable: Valeur, qty: Valeur, value: Valeur, mode: Mode) -> Decimal:
        """Applique une taxe ponctuelle, sans la cumuler.

        PERCENTUAL: taxable * qte * valeur / 100
        AMOUNT_PER_LINE: qte * valeur
        AMOUNT_PER_UNIT: valeur

        Raises:
            NegativeValueError: Si taxable ou qty est negatif.
        """
        taxable = to_decimal(taxable, "taxable")
        qty = to_decimal(qty, "qty")
        value = to_decimal(value, "value")

        if taxable < ZERO:
            raise NegativeValueError(f"<taxable> negatif: {taxable}")
        if qty < ZERO:
            raise NegativeValueError(f"<qty> negatif: {qty}")

        mode = vers_mode(mode)
        if mode is Mode.AMOUNT_PER_UNIT:
            return value
        with contexte_exact():
            if mode is Mode.PERCENTUAL:
                return taxable * qty * value / HUNDRED
            return qty * value

    def __str__(self) -> str:
        return "; ".join(f"{stage.value}: {etape}" for stage, etape in self._etapes.items())
