"""Accumulateur de taux commun aux remises et aux etapes de taxe."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from calculqc.decimales import ZERO, Valeur, contexte_exact, to_decimal
from calculqc.erreurs import NegativeValueError
from calculqc.modes import Mode, vers_mode

_CHAMPS = {
    Mode.PERCENTUAL: "percentual",
    Mode.AMOUNT_PER_UNIT: "amount_per_unit",
    Mode.AMOUNT_PER_LINE: "amount_per_line",
}


@dataclass
class RateAccumulator:
    """Taux cumules d'une ligne: pourcentage, montant par unite, montant par ligne.

    Les trois champs restent toujours >= 0; la verification se fait a l'ajout.
    """

    percentual: Decimal = field(default=ZERO)
    amount_per_unit: Decimal = field(default=ZERO)
    amount_per_line: Decimal = field(default=ZERO)

    def _ajouter(self, montant: Valeur, mode: Mode, libelle: str) -> Decimal:
        """Valide et cumule `montant` dans le champ correspondant a `mode`."""
        montant = to_decimal(montant, libelle)
        if montant < ZERO:
            raise NegativeValueError(f"{libelle} negatif: {montant}")

        champ = _CHAMPS[vers_mode(mode)]
        with contexte_exact():
            setattr(self, champ, getattr(self, champ) + montant)
        return montant

    def est_vide(self) -> bool:
        """Vrai si aucun taux n'a ete cumule."""
        return not (self.percentual or self.amount_per_unit or self.amount_per_line)

    def __str__(self) -> str:
        return (
            f"percentual {self.percentual} amount_per_unit {self.amount_per_unit} "
            f"amount_per_line {self.amount_per_line}"
        )
