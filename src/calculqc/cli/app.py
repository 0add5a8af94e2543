"""Application CLI principale `ccalc`."""

from __future__ import annotations

import logging
from decimal import Decimal
from pathlib import Path
from typing import Callable, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

import calculqc
from calculqc.config import ConfigLigne, charger_config_ligne, construire_calculateur
from calculqc.erreurs import CalculError
from calculqc.ligne import LineCalculator
from calculqc.modes import Mode, Stage
from calculqc.resultat import CalculationResult
from calculqc.taxes import TaxOrchestrator

app = typer.Typer(
    name="ccalc",
    help="Calcul exact des remises et taxes d'une ligne de vente",
    no_args_is_help=True,
)

console = Console()
logger = logging.getLogger(__name__)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"CalculQC version {calculqc.__version__}")
        raise typer.Exit()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", help="Journalisation detaillee"),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Afficher la version de CalculQC",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """CalculQC - Remises et taxes d'une ligne en Decimal exact."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )


def _parser_remise(texte: str) -> tuple[Mode, str]:
    """Parse 'MODE=MONTANT' (ex: percentual=10)."""
    mode, sep, montant = texte.partition("=")
    if not sep:
        raise typer.BadParameter(f"format attendu MODE=MONTANT: {texte}")
    try:
        return Mode(mode.strip()), montant.strip()
    except ValueError as e:
        raise typer.BadParameter(f"mode inconnu: {mode}") from e


def _parser_taxe(texte: str) -> tuple[Stage, Mode, str]:
    """Parse 'ETAPE:MODE=MONTANT' (ex: over_taxable:percentual=5)."""
    etape, sep, reste = texte.partition(":")
    if not sep:
        raise typer.BadParameter(f"format attendu ETAPE:MODE=MONTANT: {texte}")
    try:
        stage = Stage(etape.strip())
    except ValueError as e:
        raise typer.BadParameter(f"etape inconnue: {etape}") from e
    mode, montant = _parser_remise(reste)
    return stage, mode, montant


def _preparer(
    config: Optional[Path],
    remises: list[str],
    taxes: list[str],
) -> tuple[LineCalculator, Optional[Decimal]]:
    """Construit le calculateur depuis le fichier de configuration et les options."""
    if config is not None:
        try:
            config_ligne = charger_config_ligne(config)
        except (FileNotFoundError, ValueError) as e:
            console.print(f"[red]{escape(str(e))}[/red]")
            raise typer.Exit(1)
    else:
        config_ligne = ConfigLigne()

    try:
        calculateur = construire_calculateur(config_ligne)
        for texte in remises:
            mode, montant = _parser_remise(texte)
            calculateur.add_discount(montant, mode)
        for texte in taxes:
            stage, mode, montant = _parser_taxe(texte)
            calculateur.add_tax(montant, stage, mode)
    except CalculError as e:
        console.print(f"[red]Configuration invalide: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    logger.debug("Remises: %s", calculateur.discounts)
    logger.debug("Taxes: %s", calculateur.taxes)
    return calculateur, config_ligne.max_discount_allowed


def _afficher(resultat: CalculationResult, en_json: bool) -> None:
    if en_json:
        typer.echo(resultat.model_dump_json(indent=2))
        return

    sans_remise = resultat.without_discount
    table = Table(title="Calcul de la ligne")
    table.add_column("Valeur")
    table.add_column("Avec remise", justify="right")
    table.add_column("Sans remise", justify="right")
    table.add_row("Valeur unitaire", str(resultat.unit_value), str(sans_remise.unit_value))
    table.add_row("Net", str(resultat.net), str(sans_remise.net))
    table.add_row("Taxes", str(resultat.tax), str(sans_remise.tax))
    table.add_row("Brut", str(resultat.gross), str(sans_remise.gross), style="bold")
    console.print(table)

    console.print(
        f"Remise: {resultat.discount_value} "
        f"({resultat.total_discount_percent}%), "
        f"effet sur le brut: {resultat.discount_gross_value}"
    )


_OPTION_CONFIG = typer.Option(None, "--config", "-c", help="Fichier YAML de la ligne")
_OPTION_REMISE = typer.Option(
    [], "--remise", "-r", help="Remise MODE=MONTANT (repetable)"
)
_OPTION_TAXE = typer.Option(
    [], "--taxe", "-t", help="Taxe ETAPE:MODE=MONTANT (repetable)"
)
_OPTION_MAX = typer.Option(None, "--max-remise", help="Plafond de remise en %")
_OPTION_ECHELLE = typer.Option(
    None, "--echelle", "-e", help="Arrondir les montants a N decimales"
)
_OPTION_JSON = typer.Option(False, "--json", help="Sortie JSON")


def _executer(
    calcul: Callable[[], CalculationResult], echelle: Optional[int], en_json: bool
) -> None:
    try:
        resultat = calcul()
        if echelle is not None:
            resultat = resultat.round(echelle)
    except CalculError as e:
        console.print(f"[red]Erreur de calcul: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    _afficher(resultat, en_json)


@app.command(name="calculer")
def calculer(
    unit_value: str = typer.Argument(..., help="Valeur unitaire avant remise"),
    qty: str = typer.Argument(..., help="Quantite"),
    config: Optional[Path] = _OPTION_CONFIG,
    remise: list[str] = _OPTION_REMISE,
    taxe: list[str] = _OPTION_TAXE,
    max_remise: Optional[str] = _OPTION_MAX,
    echelle: Optional[int] = _OPTION_ECHELLE,
    en_json: bool = _OPTION_JSON,
) -> None:
    """Calculer une ligne a partir de la valeur unitaire."""
    calculateur, plafond = _preparer(config, remise, taxe)
    plafond = max_remise if max_remise is not None else plafond
    _executer(lambda: calculateur.compute(unit_value, qty, plafond), echelle, en_json)


@app.command(name="depuis-brut")
def depuis_brut(
    gross: str = typer.Argument(..., help="Montant brut connu (taxes incluses)"),
    qty: str = typer.Argument(..., help="Quantite"),
    config: Optional[Path] = _OPTION_CONFIG,
    remise: list[str] = _OPTION_REMISE,
    taxe: list[str] = _OPTION_TAXE,
    max_remise: Optional[str] = _OPTION_MAX,
    echelle: Optional[int] = _OPTION_ECHELLE,
    en_json: bool = _OPTION_JSON,
) -> None:
    """Retrouver la valeur unitaire a partir du brut, puis calculer la ligne."""
    calculateur, plafond = _preparer(config, remise, taxe)
    plafond = max_remise if max_remise is not None else plafond
    _executer(
        lambda: calculateur.compute_from_gross(gross, qty, plafond), echelle, en_json
    )


@app.command(name="taxe-ligne")
def taxe_ligne(
    taxable: str = typer.Argument(..., help="Valeur taxable"),
    qty: str = typer.Argument(..., help="Quantite"),
    value: str = typer.Argument(..., help="Pourcentage ou montant de la taxe"),
    mode: Mode = typer.Option(Mode.PERCENTUAL, "--mode", "-m", help="Mode de la taxe"),
) -> None:
    """Calculer une taxe ponctuelle, sans la cumuler."""
    try:
        montant = TaxOrchestrator.line_tax(taxable, qty, value, mode)
    except CalculError as e:
        console.print(f"[red]Erreur de calcul: {escape(str(e))}[/red]")
        raise typer.Exit(1)
    console.print(str(montant))
