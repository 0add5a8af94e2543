"""Configuration d'une ligne (remises, taxes, plafond) depuis un fichier YAML.

Exemple:

    max_discount_allowed: "100"
    discounts:
      - {amount: "10", mode: percentual}
    taxes:
      - {amount: "5", stage: over_taxable, mode: percentual}
      - {amount: "9.975", stage: over_taxable, mode: percentual}
"""

from __future__ import annotations

import logging
from decimal import Decimal
from pathlib import Path
from typing import Annotated, Any, Optional

import yaml
from pydantic import BaseModel, BeforeValidator, Field, ValidationError

from calculqc.decimales import to_decimal
from calculqc.ligne import LineCalculator
from calculqc.modes import Mode, Stage

logger = logging.getLogger(__name__)


def _coerce_decimal(v: Any) -> Decimal:
    """Convertit les nombres YAML en Decimal (les float via leur texte)."""
    if isinstance(v, float):
        return to_decimal(str(v))
    return to_decimal(v)


MontantConfig = Annotated[Decimal, BeforeValidator(_coerce_decimal), Field(ge=0)]


class RemiseConfig(BaseModel):
    """Une remise a cumuler sur la ligne."""

    amount: MontantConfig
    mode: Mode = Mode.PERCENTUAL


class TaxeConfig(BaseModel):
    """Une taxe a cumuler dans une etape."""

    amount: MontantConfig
    stage: Stage = Stage.OVER_TAXABLE
    mode: Mode = Mode.PERCENTUAL


class ConfigLigne(BaseModel):
    """Configuration complete d'une ligne."""

    max_discount_allowed: Optional[MontantConfig] = None
    discounts: list[RemiseConfig] = Field(default_factory=list)
    taxes: list[TaxeConfig] = Field(default_factory=list)


def charger_config_ligne(chemin: Path) -> ConfigLigne:
    """Charge la configuration d'une ligne depuis un fichier YAML.

    Raises:
        FileNotFoundError: Si le fichier n'existe pas.
        ValueError: Si le YAML est invalide ou ne respecte pas le schema.
    """
    if not chemin.exists():
        raise FileNotFoundError(f"Fichier de configuration introuvable: {chemin}")

    try:
        donnees = yaml.safe_load(chemin.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ValueError(f"YAML invalide ({chemin}): {e}") from e

    if donnees is None:
        logger.info("Configuration vide: %s", chemin)
        return ConfigLigne()

    try:
        config = ConfigLigne.model_validate(donnees)
    except ValidationError as e:
        raise ValueError(f"Configuration de ligne invalide ({chemin}): {e}") from e

    logger.info(
        "Configuration chargee: %s (%d remises, %d taxes)",
        chemin,
        len(config.discounts),
        len(config.taxes),
    )
    return config


def construire_calculateur(config: ConfigLigne) -> LineCalculator:
    """Construit un calculateur avec les remises et taxes de la configuration.

    Raises:
        OverMaxDiscountError: Si les remises en pourcentage depassent 100% au total.
    """
    calculateur = LineCalculator()
    for remise in config.discounts:
        calculateur.add_discount(remise.amount, remise.mode)
    for taxe in config.taxes:
        calculateur.add_tax(taxe.amount, taxe.stage, taxe.mode)
    return calculateur
