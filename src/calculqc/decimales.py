"""Constantes et conversions Decimal partagees par tout le calcul.

Toutes les valeurs monetaires sont en Decimal, jamais de float dans
l'arithmetique. Les float sont acceptes en entree par commodite et convertis
avec leur expansion binaire exacte. Sommes et produits se font sans arrondi
(`contexte_exact`); seules les divisions inexactes arrondissent (`diviser`).
"""

from __future__ import annotations

from decimal import (
    MAX_EMAX,
    MAX_PREC,
    MIN_EMIN,
    ROUND_HALF_EVEN,
    ROUND_HALF_UP,
    Context,
    Decimal,
    DivisionByZero,
    Inexact,
    InvalidOperation,
    Overflow,
    localcontext,
)
from typing import Union

from calculqc.erreurs import InvalidDecimalError, NegativeValueError

ZERO = Decimal("0")
ONE = Decimal("1")
HUNDRED = Decimal("100")

# Les trois saveurs d'entree: Decimal (chemin canonique), float, texte.
Valeur = Union[Decimal, float, int, str]


def to_decimal(valeur: Valeur, nom: str = "valeur") -> Decimal:
    """Convertit une valeur d'entree en Decimal fini.

    Args:
        valeur: Decimal, int, float ou texte (ex: "100.00").
        nom: Nom du parametre, repris dans le message d'erreur.

    Returns:
        La valeur en Decimal. Un Decimal est retourne tel quel.

    Raises:
        InvalidDecimalError: Texte non numerique, type non supporte
            ou valeur non finie (NaN, Infinity).
    """
    if isinstance(valeur, Decimal):
        resultat = valeur
    elif isinstance(valeur, bool):
        raise InvalidDecimalError(f"<{nom}> booleen refuse: {valeur!r}")
    elif isinstance(valeur, (int, float)):
        resultat = Decimal(valeur)
    elif isinstance(valeur, str):
        try:
            resultat = Decimal(valeur.strip())
        except InvalidOperation as e:
            raise InvalidDecimalError(f"<{nom}> non numerique: {valeur!r}") from e
    else:
        raise InvalidDecimalError(
            f"<{nom}> de type {type(valeur).__name__} non supporte: {valeur!r}"
        )

    if not resultat.is_finite():
        raise InvalidDecimalError(f"<{nom}> non fini: {valeur!r}")
    return resultat


def contexte_exact():
    """Contexte decimal des additions et multiplications, sans aucun arrondi.

    Precision maximale et `Inexact` piege: une somme ou un produit ne peut pas
    etre tronque en silence. Les divisions passent par `diviser`.
    """
    return localcontext(
        Context(
            prec=MAX_PREC,
            Emax=MAX_EMAX,
            Emin=MIN_EMIN,
            rounding=ROUND_HALF_EVEN,
            traps=[InvalidOperation, DivisionByZero, Overflow, Inexact],
        )
    )


def quantize(montant: Decimal, echelle: int, rounding: str = ROUND_HALF_UP) -> Decimal:
    """Arrondit a `echelle` decimales (ROUND_HALF_UP par defaut).

    La precision est elargie au besoin: arrondir 100 a 30 decimales donne
    bien 33 chiffres significatifs.

    Raises:
        NegativeValueError: Si l'echelle est negative.
    """
    if echelle < 0:
        raise NegativeValueError(f"<echelle> negative: {echelle}")

    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, montant.adjusted() + echelle + 2)
        return montant.quantize(Decimal(1).scaleb(-echelle), rounding=rounding)


def diviser(numerateur: Decimal, denominateur: Decimal) -> Decimal:
    """Division dont la precision s'elargit selon les chiffres des operandes.

    Un quotient exact (ex: 29 chiffres divises par 1) est conserve tel quel;
    un quotient inexact garde au moins la precision du contexte courant.
    """
    with localcontext() as ctx:
        ctx.prec += len(numerateur.as_tuple().digits) + len(denominateur.as_tuple().digits)
        return numerateur / denominateur
