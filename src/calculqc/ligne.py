"""Calcul complet d'une ligne de vente: remise, taxes, net et brut.

Le calcul direct part de la valeur unitaire et de la quantite. Le calcul
inverse part du brut connu, retire les taxes puis la remise pour retrouver la
valeur unitaire, et refait ensuite le calcul direct sur cette valeur afin que
les deux sens produisent des resultats coherents entre eux.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from calculqc.decimales import HUNDRED, ZERO, Valeur, contexte_exact, diviser, to_decimal
from calculqc.erreurs import CalculError, DivisionByZeroError, StageError
from calculqc.modes import Mode, Stage
from calculqc.remise import DiscountAccumulator
from calculqc.resultat import CalculationResult, CalculationWithoutDiscount
from calculqc.taxes import TaxOrchestrator


class LineCalculator:
    """Remises et taxes d'une ligne, configurees puis appliquees.

    Les ajouts de taux se font avant les calculs; un calculateur n'est pas
    protege contre les ajouts concurrents.
    """

    def __init__(self) -> None:
        self._remises = DiscountAccumulator()
        self._taxes = TaxOrchestrator()

    @property
    def discounts(self) -> DiscountAccumulator:
        return self._remises

    @property
    def taxes(self) -> TaxOrchestrator:
        return self._taxes

    def add_discount(self, amount: Valeur, mode: Mode) -> None:
        self._remises.add(amount, mode)

    def add_tax(self, amount: Valeur, stage: Stage, mode: Mode) -> None:
        self._taxes.add(amount, stage, mode)

    def line_tax(self, taxable: Valeur, qty: Valeur, value: Valeur, mode: Mode) -> Decimal:
        return self._taxes.line_tax(taxable, qty, value, mode)

    def compute(
        self,
        unit_value: Valeur,
        qty: Valeur,
        max_discount_allowed: Optional[Valeur] = None,
    ) -> CalculationResult:
        """Calcule la ligne a partir de la valeur unitaire.

        Args:
            unit_value: Valeur unitaire avant remise.
            qty: Quantite vendue.
            max_discount_allowed: Plafond de remise en % (100 si absent).

        Returns:
            Le resultat avec et sans remise.

        Raises:
            InvalidDecimalError: Si une entree n'est pas un nombre.
            StageError: Si la remise ou les taxes echouent; l'erreur d'origine
                est dans `__cause__`.
        """
        unit_value = to_decimal(unit_value, "unit_value")
        qty = to_decimal(qty, "qty")
        plafond = (
            HUNDRED
            if max_discount_allowed is None
            else to_decimal(max_discount_allowed, "max_discount_allowed")
        )

        try:
            remise, pourcentage = self._remises.compute(unit_value, qty, plafond)
        except CalculError as e:
            raise StageError(
                "remise", e, unit_value=unit_value, qty=qty, max_discount_allowed=plafond
            ) from e

        with contexte_exact():
            net_sans_remise = unit_value * qty
            net = net_sans_remise - remise

        # Quantite nulle: aucune unite a repartir, la valeur unitaire reste intacte
        valeur_unitaire = diviser(net, qty) if qty != ZERO else unit_value

        try:
            taxe = self._taxes.tax(valeur_unitaire, qty)
        except CalculError as e:
            raise StageError("taxes", e, unit_value=valeur_unitaire, qty=qty) from e

        try:
            taxe_sans_remise = self._taxes.tax(unit_value, qty)
        except CalculError as e:
            raise StageError("taxes sans remise", e, unit_value=unit_value, qty=qty) from e

        with contexte_exact():
            brut = net + taxe
            brut_sans_remise = net_sans_remise + taxe_sans_remise
            effet_brut = brut - brut_sans_remise

        return CalculationResult(
            net=net,
            gross=brut,
            tax=taxe,
            discount_value=remise,
            discount_gross_value=effet_brut,
            total_discount_percent=pourcentage,
            unit_value=valeur_unitaire,
            without_discount=CalculationWithoutDiscount(
                net=net_sans_remise,
                gross=brut_sans_remise,
                tax=taxe_sans_remise,
                unit_value=unit_value,
            ),
        )

    def compute_from_gross(
        self,
        gross: Valeur,
        qty: Valeur,
        max_discount_allowed: Optional[Valeur] = None,
    ) -> CalculationResult:
        """Calcule la ligne a partir d'un brut connu.

        Retire les taxes, puis la remise, pour retrouver la valeur unitaire,
        puis refait le calcul direct avec `compute`.

        Raises:
            InvalidDecimalError: Si une entree n'est pas un nombre.
            StageError: Si une inversion ou le calcul direct echoue.
        """
        gross = to_decimal(gross, "gross")
        qty = to_decimal(qty, "qty")

        try:
            net = self._taxes.untax(gross, qty)
        except CalculError as e:
            raise StageError("inversion taxes", e, gross=gross, qty=qty) from e

        try:
            remisable = self._remises.invert(net, qty).discountable
            if qty == ZERO:
                raise DivisionByZeroError(
                    "quantite nulle: valeur unitaire impossible a retrouver"
                )
        except CalculError as e:
            raise StageError("inversion remise", e, net=net, qty=qty) from e

        return self.compute(diviser(remisable, qty), qty, max_discount_allowed)

    @staticmethod
    def round(
        result: CalculationResult, scale: int, rounding: str = ROUND_HALF_UP
    ) -> CalculationResult:
        """Retourne une copie arrondie du resultat."""
        return result.round(scale, rounding)
