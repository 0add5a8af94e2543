"""Modes de remise/taxe et etapes de taxation."""

from enum import Enum

from calculqc.erreurs import InvalidModeError


class Mode(str, Enum):
    """Facon dont un taux s'applique a une ligne."""

    PERCENTUAL = "percentual"
    AMOUNT_PER_LINE = "amount_per_line"
    AMOUNT_PER_UNIT = "amount_per_unit"


class Stage(str, Enum):
    """Etape de taxation.

    OVER_TAXABLE: taxe sur la valeur de base.
    OVER_TAX: taxe sur la base plus la taxe OVER_TAXABLE (taxe sur taxe).
    OVER_TAX_IGNORABLE: taxe sur la base, exclue de l'assiette de OVER_TAX.
    """

    OVER_TAXABLE = "over_taxable"
    OVER_TAX = "over_tax"
    OVER_TAX_IGNORABLE = "over_tax_ignorable"


def vers_mode(valeur) -> Mode:
    """Convertit un Mode ou son texte ("percentual", ...) en Mode.

    Raises:
        InvalidModeError: Si la valeur ne correspond a aucun mode.
    """
    try:
        return Mode(valeur)
    except ValueError as e:
        permis = ", ".join(m.value for m in Mode)
        raise InvalidModeError(f"mode inconnu: {valeur!r} (permis: {permis})") from e


def vers_etape(valeur) -> Stage:
    """Convertit un Stage ou son texte ("over_taxable", ...) en Stage.

    Raises:
        InvalidModeError: Si la valeur ne correspond a aucune etape.
    """
    try:
        return Stage(valeur)
    except ValueError as e:
        permis = ", ".join(s.value for s in Stage)
        raise InvalidModeError(f"etape inconnue: {valeur!r} (permis: {permis})") from e
