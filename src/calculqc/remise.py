"""Remises cumulees d'une ligne: calcul et inversion.

La remise d'une ligne se compose de trois parties:
  remise = valeur_unitaire * qte * pourcentage / 100
           + montant_par_unite * qte
           + montant_par_ligne

L'inversion part du montant remise (net) et retrouve le montant avant remise:
  remisable = (net + montant_par_ligne + montant_par_unite * qte)
              / (1 - pourcentage / 100)
"""

from __future__ import annotations

from decimal import Decimal
from typing import NamedTuple

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
from calculqc.erreurs import DivisionByZeroError, NegativeValueError, OverMaxDiscountError
from calculqc.modes import Mode, vers_mode


class InvertedDiscount(NamedTuple):
    """Resultat de l'inversion d'une remise."""

    discountable: Decimal  # Montant de ligne avant remise
    discount_value: Decimal  # Remise retiree
    discount_percentage: Decimal  # Remise en % du montant avant remise


def _pourcentage(partie: Decimal, total: Decimal) -> Decimal:
    if total == ZERO:
        return ZERO
    with contexte_exact():
        partie = HUNDRED * partie
    return diviser(partie, total)


class DiscountAccumulator(RateAccumulator):
    """Cumule les remises d'une ligne (pourcentage plafonne a 100)."""

    def add(self, amount: Valeur, mode: Mode) -> None:
        """Ajoute une remise.

        Raises:
            InvalidModeError: Si le mode est inconnu.
            NegativeValueError: Si le montant est negatif.
            OverMaxDiscountError: Si le pourcentage cumule depasserait 100.
        """
        mode = vers_mode(mode)
        montant = to_decimal(amount, "remise")
        if mode is Mode.PERCENTUAL and montant >= ZERO:
            with contexte_exact():
                cumul = self.percentual + montant
            if cumul > HUNDRED:
                raise OverMaxDiscountError(
                    f"remise en pourcentage cumulee au-dela de 100%: "
                    f"{self.percentual} + {montant}"
                )
        self._ajouter(montant, mode, "remise")

    def compute(
        self,
        unit_value: Valeur,
        qty: Valeur,
        max_discount_allowed: Valeur = HUNDRED,
    ) -> tuple[Decimal, Decimal]:
        """Calcule la remise d'une ligne.

        Args:
            unit_value: Valeur unitaire avant remise.
            qty: Quantite vendue.
            max_discount_allowed: Plafond de remise, en % de la ligne (100 par defaut).

        Returns:
            (valeur_remise, pourcentage_remise) ou le pourcentage est la remise
            exprimee en % de valeur_unitaire * qte.

        Raises:
            NegativeValueError: Si une entree est negative.
            OverMaxDiscountError: Si la remise depasse le plafond.
        """
        unit_value = to_decimal(unit_value, "unit_value")
        qty = to_decimal(qty, "qty")
        max_discount_allowed = to_decimal(max_discount_allowed, "max_discount_allowed")

        if max_discount_allowed < ZERO:
            raise NegativeValueError(f"<max_discount_allowed> negatif: {max_discount_allowed}")
        if unit_value < ZERO:
            raise NegativeValueError(f"<unit_value> negatif: {unit_value}")
        if qty < ZERO:
            raise NegativeValueError(f"<qty> negatif: {qty}")

        with contexte_exact():
            valeur_ligne = unit_value * qty
            remise = (
                valeur_ligne * self.percentual / HUNDRED
                + self.amount_per_unit * qty
                + self.amount_per_line
            )
            plafond = valeur_ligne * max_discount_allowed / HUNDRED

        if remise > plafond:
            raise OverMaxDiscountError(
                f"remise {remise} au-dela du plafond {plafond} "
                f"({max_discount_allowed}% de {valeur_ligne})"
            )

        pourcentage = _pourcentage(remise, valeur_ligne)
        if pourcentage > HUNDRED:
            raise OverMaxDiscountError(f"remise de {pourcentage}% de la ligne")
        if pourcentage < ZERO:
            raise NegativeValueError(f"remise negative de {pourcentage}% de la ligne")

        return remise, pourcentage

    def invert(self, discounted_value: Valeur, qty: Valeur) -> InvertedDiscount:
        """Retrouve le montant avant remise a partir du montant remise.

        Raises:
            NegativeValueError: Si le montant remise ou la quantite est negatif.
            DivisionByZeroError: Si la remise cumulee est de 100% (non inversible).
        """
        remise_nette = to_decimal(discounted_value, "discounted_value")
        qty = to_decimal(qty, "qty")

        if remise_nette < ZERO:
            raise NegativeValueError(f"<discounted_value> negatif: {remise_nette}")
        if qty < ZERO:
            raise NegativeValueError(f"<qty> negatif: {qty}")

        with contexte_exact():
            facteur = ONE - self.percentual / HUNDRED if self.percentual > ZERO else ONE
            numerateur = remise_nette + self.amount_per_line + self.amount_per_unit * qty
        if facteur == ZERO:
            raise DivisionByZeroError(
                "remise cumulee de 100%: le montant avant remise est indetermine"
            )

        remisable = diviser(numerateur, facteur)
        with contexte_exact():
            remise = remisable - remise_nette
        return InvertedDiscount(remisable, remise, _pourcentage(remise, remisable))

    @staticmethod
    def ratio(discounted: Valeur, discount: Valeur) -> Decimal:
        """Part de la remise dans le montant avant remise, en pourcentage.

        100 * remise / (montant remise + remise)

        Raises:
            DivisionByZeroError: Si le montant avant remise est nul.
        """
        discounted = to_decimal(discounted, "discounted")
        discount = to_decimal(discount, "discount")

        with contexte_exact():
            denominateur = discounted + discount
        if denominateur == ZERO:
            raise DivisionByZeroError(
                f"ratio de remise indefini: discounted={discounted}, discount={discount}"
            )
        with contexte_exact():
            discount = HUNDRED * discount
        return diviser(discount, denominateur)
