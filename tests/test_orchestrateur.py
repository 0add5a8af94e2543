"""Tests pour la composition des trois etapes de taxe."""

from decimal import Decimal

import pytest

from calculqc.erreurs import (
    CalculError,
    DivisionByZeroError,
    InvalidModeError,
    NegativeValueError,
    StageError,
)
from calculqc.modes import Mode, Stage
from calculqc.taxes import TaxOrchestrator


@pytest.fixture
def taxes_tps_tvq() -> TaxOrchestrator:
    """TPS 5% et TVQ 9.975% calculees toutes deux sur le prix."""
    t = TaxOrchestrator()
    t.add("5", Stage.OVER_TAXABLE, Mode.PERCENTUAL)
    t.add("9.975", Stage.OVER_TAXABLE, Mode.PERCENTUAL)
    return t


@pytest.fixture
def taxes_tvq_sur_tps() -> TaxOrchestrator:
    """TPS 5%, puis TVQ 9.5% calculee sur le prix plus la TPS."""
    t = TaxOrchestrator()
    t.add("5", Stage.OVER_TAXABLE, Mode.PERCENTUAL)
    t.add("9.5", Stage.OVER_TAX, Mode.PERCENTUAL)
    return t


class TestAdd:
    def test_routage_par_etape(self) -> None:
        t = TaxOrchestrator()
        t.add("3", Stage.OVER_TAX, Mode.AMOUNT_PER_LINE)
        assert t.over_tax.amount_per_line == Decimal("3")
        assert t.over_taxable.est_vide()
        assert t.over_tax_ignorable.est_vide()

    def test_accesseur_stage(self) -> None:
        t = TaxOrchestrator()
        t.add("2", "over_tax_ignorable", "amount_per_unit")
        assert t.stage(Stage.OVER_TAX_IGNORABLE) is t.over_tax_ignorable
        assert t.stage("over_tax_ignorable").amount_per_unit == Decimal("2")

    def test_etapes_independantes(self) -> None:
        t = TaxOrchestrator()
        assert t.over_taxable is not t.over_tax
        assert t.over_tax is not t.over_tax_ignorable

    def test_negatif(self) -> None:
        t = TaxOrchestrator()
        with pytest.raises(NegativeValueError):
            t.add(-18.0, Stage.OVER_TAXABLE, Mode.PERCENTUAL)

    def test_etape_inconnue(self) -> None:
        t = TaxOrchestrator()
        with pytest.raises(InvalidModeError, match="etape inconnue"):
            t.add("5", "sur_taxe", Mode.PERCENTUAL)
        with pytest.raises(CalculError):
            t.stage("sur_taxe")

    def test_mode_inconnu(self) -> None:
        t = TaxOrchestrator()
        with pytest.raises(InvalidModeError, match="mode inconnu"):
            t.add("5", Stage.OVER_TAX, "par_ligne")
        assert t.over_tax.est_vide()


class TestTax:
    def test_tps_tvq(self, taxes_tps_tvq: TaxOrchestrator) -> None:
        assert taxes_tps_tvq.tax("1000", "1") == Decimal("149.75")

    def test_taxe_sur_taxe(self, taxes_tvq_sur_tps: TaxOrchestrator) -> None:
        """TPS 5.00, TVQ 9.5% de 105 = 9.975."""
        assert taxes_tvq_sur_tps.tax("100", "1") == Decimal("14.975")

    def test_ignorable_exclue_de_l_assiette_over_tax(self) -> None:
        """t1 = 5, t2 = 10% de 105 = 10.5, t3 = 2% de 100 = 2."""
        t = TaxOrchestrator()
        t.add("5", Stage.OVER_TAXABLE, Mode.PERCENTUAL)
        t.add("10", Stage.OVER_TAX, Mode.PERCENTUAL)
        t.add("2", Stage.OVER_TAX_IGNORABLE, Mode.PERCENTUAL)
        assert t.tax("100", "1") == Decimal("17.5")

    def test_montants_par_unite(self) -> None:
        """(89 x 16% + 1) x 2 = 30.48."""
        t = TaxOrchestrator()
        t.add("16", Stage.OVER_TAXABLE, Mode.PERCENTUAL)
        t.add("1", Stage.OVER_TAXABLE, Mode.AMOUNT_PER_UNIT)
        assert t.tax("89", "2") == Decimal("30.48")

    def test_valeur_nulle(self, taxes_tvq_sur_tps: TaxOrchestrator) -> None:
        taxes_tvq_sur_tps.add("4", Stage.OVER_TAX_IGNORABLE, Mode.AMOUNT_PER_LINE)
        assert taxes_tvq_sur_tps.tax("0", "3") == Decimal("0")

    def test_erreur_propagee_sans_enveloppe(self, taxes_tps_tvq) -> None:
        with pytest.raises(NegativeValueError):
            taxes_tps_tvq.tax("-1", "1")

    def test_sans_taxe(self) -> None:
        assert TaxOrchestrator().tax("100", "3") == Decimal("0")


class TestUntax:
    def test_over_taxable_seul_exact(self, taxes_tps_tvq: TaxOrchestrator) -> None:
        taxes_tps_tvq.add("0.25", Stage.OVER_TAXABLE, Mode.AMOUNT_PER_UNIT)
        net = Decimal("19.99") * 3
        brut = net + taxes_tps_tvq.tax("19.99", "3")
        assert taxes_tps_tvq.untax(brut, "3") == net
        assert taxes_tps_tvq.inversion_residual("19.99", "3") == Decimal("0")

    def test_residu_nul_au_dela_de_28_chiffres(self) -> None:
        t = TaxOrchestrator()
        t.add("7", Stage.OVER_TAXABLE, Mode.PERCENTUAL)
        assert t.inversion_residual("1234567890123456789.0123456789", "1") == Decimal("0")

    def test_taxe_sur_taxe_quantite_unitaire(self, taxes_tvq_sur_tps) -> None:
        """Pourcentages seuls et quantite 1: 114.975 / 1.095 / 1.05 = 100."""
        assert taxes_tvq_sur_tps.untax("114.975", "1") == Decimal("100")

    def test_ecart_avec_etape_ignorable(self) -> None:
        """L'inversion sequentielle ne retrouve pas la base quand over_tax_ignorable
        est configuree: 107 / 1.02 / 1.05 != 100. L'ecart est rapporte, pas corrige."""
        t = TaxOrchestrator()
        t.add("5", Stage.OVER_TAXABLE, Mode.PERCENTUAL)
        t.add("2", Stage.OVER_TAX_IGNORABLE, Mode.PERCENTUAL)

        assert t.tax("100", "1") == Decimal("7")
        ecart = t.inversion_residual("100", "1")
        assert ecart != Decimal("0")
        assert ecart < Decimal("0")
        assert abs(ecart) < Decimal("0.1")

    def test_ecart_taxe_sur_taxe_quantite_multiple(self, taxes_tvq_sur_tps) -> None:
        assert taxes_tvq_sur_tps.inversion_residual("100", "2") != Decimal("0")

    def test_echec_enveloppe_avec_etape(self) -> None:
        t = TaxOrchestrator()
        t.add("10", Stage.OVER_TAXABLE, Mode.AMOUNT_PER_LINE)
        with pytest.raises(StageError) as exc_info:
            t.untax("5", "1")
        assert exc_info.value.etape == "over_taxable"
        assert isinstance(exc_info.value.__cause__, NegativeValueError)
        assert exc_info.value.cause is exc_info.value.__cause__
        assert "over_taxable" in str(exc_info.value)

    def test_negatif_echoue_a_la_premiere_etape(self, taxes_tps_tvq) -> None:
        with pytest.raises(StageError) as exc_info:
            taxes_tps_tvq.untax("-1", "1")
        assert exc_info.value.etape == "over_tax_ignorable"
        assert isinstance(exc_info.value, CalculError)

    def test_zero(self, taxes_tps_tvq) -> None:
        assert taxes_tps_tvq.untax("0", "2") == Decimal("0")


class TestRatio:
    def test_division_par_zero(self) -> None:
        with pytest.raises(DivisionByZeroError):
            TaxOrchestrator.ratio("0", "0")

    def test_division_par_zero_est_zero_division_error(self) -> None:
        with pytest.raises(ZeroDivisionError):
            TaxOrchestrator.ratio(0, 0)

    @pytest.mark.parametrize(
        "taxed,tax,attendu",
        [("100", "0", "0"), ("0", "100", "100"), ("85", "15", "15"), ("100", "14.975", None)],
    )
    def test_valeurs(self, taxed, tax, attendu) -> None:
        ratio = TaxOrchestrator().ratio(taxed, tax)
        if attendu is None:
            assert Decimal("13") < ratio < Decimal("13.1")
        else:
            assert ratio == Decimal(attendu)


class TestLineTax:
    @pytest.mark.parametrize(
        "mode,attendu",
        [
            (Mode.PERCENTUAL, "10"),
            (Mode.AMOUNT_PER_LINE, "6"),
            (Mode.AMOUNT_PER_UNIT, "3"),
        ],
    )
    def test_modes(self, mode: Mode, attendu: str) -> None:
        valeur = "10" if mode is Mode.PERCENTUAL else "3"
        assert TaxOrchestrator.line_tax("50", "2", valeur, mode) == Decimal(attendu)

    def test_non_cumulee(self) -> None:
        t = TaxOrchestrator()
        t.line_tax("50", "2", "10", Mode.PERCENTUAL)
        assert t.over_taxable.est_vide()

    def test_float(self) -> None:
        assert TaxOrchestrator.line_tax(50.0, 2.0, 10.0, Mode.PERCENTUAL) == Decimal("10")

    @pytest.mark.parametrize("taxable,qty", [("-1", "1"), ("1", "-1")])
    def test_negatif(self, taxable, qty) -> None:
        with pytest.raises(NegativeValueError):
            TaxOrchestrator.line_tax(taxable, qty, "5", Mode.PERCENTUAL)

    def test_mode_inconnu(self) -> None:
        with pytest.raises(InvalidModeError):
            TaxOrchestrator.line_tax("50", "2", "10", "pourcentage")
