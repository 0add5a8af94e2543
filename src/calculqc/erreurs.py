"""Erreurs du calcul de ligne.

Chaque operation echoue ferme: aucune valeur partielle n'est retournee et
la premiere sous-etape en echec interrompt tout l'appel.
"""

from __future__ import annotations

from typing import Any


class CalculError(Exception):
    """Base de toutes les erreurs de calcul."""


class NegativeValueError(CalculError, ValueError):
    """Un montant, un taux, une quantite ou un plafond est negatif."""


class OverMaxDiscountError(CalculError, ValueError):
    """Une remise depasse le plafond permis (100% ou plafond de l'appelant)."""


class InvalidDecimalError(CalculError, ValueError):
    """Une valeur d'entree ne peut pas etre convertie en Decimal exact."""


class DivisionByZeroError(CalculError, ZeroDivisionError):
    """Un ratio ou une inversion exigerait une division par zero."""


class InvalidModeError(CalculError, ValueError):
    """Mode de taux ou etape de taxe inconnu."""


class StageError(CalculError):
    """Echec d'une etape imbriquee, enveloppe avec son contexte.

    Attributes:
        etape: Nom de l'etape en echec (ex: "remise", "over_tax").
        valeurs: Valeurs d'entree de l'etape, pour le diagnostic.
    """

    def __init__(self, etape: str, cause: Exception, **valeurs: Any) -> None:
        self.etape = etape
        self.valeurs = valeurs
        details = ", ".join(f"{k}={v}" for k, v in valeurs.items())
        message = f"echec a l'etape '{etape}'"
        if details:
            message += f" ({details})"
        super().__init__(f"{message}: {cause}")

    @property
    def cause(self) -> BaseException | None:
        """Erreur d'origine (identique a __cause__)."""
        return self.__cause__
