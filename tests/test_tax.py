"""
Tests for Tax Module

Tests for corporate tax, withholding and VAT calculators, Hometax filing
guides and the tax deadline calendar.
"""

import json
import sys
from datetime import date
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "python"))

from ecount.client import EcountError, EcountSession
from tax import corporate_tax, filing_guide, tax_calendar, vat_calculator, withholding
from tax.corporate_tax import CorporateTaxCalculator, CorporateTaxResult
from tax.filing_guide import FilingGuide, get_guide, load_guides
from tax.tax_calendar import TaxCalendar
from tax.vat_calculator import VATCalculator, fetch_from_ecount
from tax.withholding import WithholdingCalculator


class TestCorporateTaxCalculator:
    """Tests for corporate income tax."""

    @pytest.fixture
    def calculator(self):
        """Create corporate tax calculator instance."""
        return CorporateTaxCalculator()

    def test_first_bracket(self, calculator):
        """Test 100M taxed at 10%."""
        result = calculator.calculate(100_000_000)

        assert isinstance(result, CorporateTaxResult)
        assert result.corporate_tax == 10_000_000
        assert result.local_tax == 1_000_000
        assert result.total_tax == 11_000_000
        assert result.effective_rate == "11.00%"
        assert result.sme_deduction is None

    def test_bracket_boundary(self, calculator):
        """Test exactly 200M stays in the first bracket."""
        result = calculator.calculate(200_000_000)

        assert result.corporate_tax == 20_000_000
        assert result.local_tax == 2_000_000
        assert result.total_tax == 22_000_000

    def test_second_bracket(self, calculator):
        """Test 500M: 20M + 300M at 20%."""
        result = calculator.calculate(500_000_000)

        assert result.corporate_tax == 80_000_000
        assert result.local_tax == 8_000_000

    def test_third_bracket(self, calculator):
        """Test 50B in the 22% bracket."""
        assert calculator.compute_base_tax(50_000_000_000) == 10_580_000_000

    def test_top_bracket(self, calculator):
        """Test income above 300B at 25%."""
        assert calculator.compute_base_tax(400_000_000_000) == 65_560_000_000 + 25_000_000_000

    def test_zero_income(self, calculator):
        """Test non-positive income yields zeros."""
        result = calculator.calculate(0)

        assert result.total_tax == 0
        assert result.effective_rate == "0%"

    def test_sme_reduction(self, calculator):
        """Test 50% SME reduction."""
        result = calculator.calculate(100_000_000, sme=True)

        assert result.sme_deduction == 5_000_000
        assert result.corporate_tax == 5_000_000
        assert result.local_tax == 500_000
        assert result.total_tax == 5_500_000

    def test_youth_startup_reduction(self, calculator):
        """Test 100% youth start-up reduction."""
        result = calculator.calculate(100_000_000, sme=True, youth=True)

        assert result.sme_deduction == 10_000_000
        assert result.corporate_tax == 0
        assert result.local_tax == 0
        assert result.total_tax == 0

    def test_youth_requires_sme(self, calculator):
        """Test youth flag alone has no effect."""
        result = calculator.calculate(100_000_000, youth=True)

        assert result.sme_deduction is None
        assert result.corporate_tax == 10_000_000

    def test_to_dict(self, calculator):
        """Test display labels and canonical keys."""
        output = calculator.calculate(100_000_000, sme=True).to_dict()

        assert output["과세표준"] == "100,000,000원"
        assert output["총세금"] == "5,500,000원"
        assert output["중소기업감면"] == "5,000,000원"
        assert output["smeDeduction"] == 5_000_000
        assert output["effectiveRate"] == "5.50%"

    def test_custom_rules(self, tmp_path):
        """Test rules loaded from a config directory."""
        rules = """
corporate_tax:
  brackets:
    - {upper: null, rate: 0.2, cumulative: 0}
  sme_reduction_rate: 0.5
  youth_startup_reduction_rate: 1.0
  local_tax_rate: 0.1
"""
        (tmp_path / "tax_rules.yaml").write_text(rules, encoding="utf-8")
        calculator = CorporateTaxCalculator(config_dir=tmp_path)

        assert calculator.calculate(100_000_000).corporate_tax == 20_000_000

    def test_missing_rules_uses_defaults(self, tmp_path):
        """Test built-in defaults when no rule file exists."""
        calculator = CorporateTaxCalculator(config_dir=tmp_path)

        assert calculator.calculate(100_000_000).corporate_tax == 10_000_000

    def test_cli(self, capsys):
        """Test calc-corporate-tax output."""
        exit_code = corporate_tax.main(["--income", "100000000", "--sme"])

        output = json.loads(capsys.readouterr().out)
        assert exit_code == 0
        assert output["totalTax"] == 5_500_000

    def test_cli_invalid_income(self, capsys):
        """Test usage for non-positive income."""
        assert corporate_tax.main(["--income", "0"]) == 1
        assert "Usage" in capsys.readouterr().err

    @pytest.mark.parametrize("income", ["abc", "nan", "inf"])
    def test_cli_non_numeric_income(self, capsys, income):
        with pytest.raises(SystemExit) as exc_info:
            corporate_tax.main(["--income", income])

        assert exc_info.value.code == 2
        assert "invalid amount" in capsys.readouterr().err


class TestWithholdingCalculator:
    """Tests for wage withholding."""

    @pytest.fixture
    def calculator(self):
        """Create withholding calculator instance."""
        return WithholdingCalculator()

    def test_table_row(self, calculator):
        """Test salary on a table row, one dependent."""
        result = calculator.calculate(3_000_000)

        assert result.income_tax == 66_360
        assert result.local_tax == 6_636
        assert result.total_withholding == 72_996

    def test_higher_salary(self, calculator):
        result = calculator.calculate(5_000_000)

        assert result.income_tax == 225_990
        assert result.local_tax == 22_599

    def test_two_dependents(self, calculator):
        """Test 30% discount for two dependents."""
        result = calculator.calculate(3_000_000, dependents=2)

        assert result.income_tax == 46_452
        assert result.local_tax == 4_645

    def test_three_dependents(self, calculator):
        assert calculator.calculate(3_000_000, dependents=3).income_tax == 33_180

    def test_dependents_clamped(self, calculator):
        """Test dependents above five use the five-dependent discount."""
        result = calculator.calculate(3_000_000, dependents=7)

        assert result.income_tax == 16_590
        assert result.dependents == 7

    def test_zero_dependents_clamped(self, calculator):
        """Test dependents below one use the one-dependent rate."""
        assert calculator.calculate(3_000_000, dependents=0).income_tax == 66_360

    def test_below_table(self, calculator):
        """Test salary below the first row is not taxed."""
        result = calculator.calculate(1_000_000)

        assert result.income_tax == 0
        assert result.local_tax == 0

    def test_interpolation(self, calculator):
        """Test linear interpolation between rows."""
        assert calculator.calculate(2_750_000).income_tax == 53_160

    def test_extrapolation(self, calculator):
        """Test salaries above the table continue the last slope."""
        assert calculator.interpolate_tax(11_000_000) == 1_039_170

    def test_to_dict(self, calculator):
        output = calculator.calculate(3_000_000).to_dict()

        assert output["소득세"] == "66,360원"
        assert output["원천징수합계"] == "72,996원"
        assert output["totalWithholding"] == 72_996

    def test_cli(self, capsys):
        """Test calc-withholding output."""
        exit_code = withholding.main(["--salary", "3000000", "--dependents", "2"])

        output = json.loads(capsys.readouterr().out)
        assert exit_code == 0
        assert output["incomeTax"] == 46_452
        assert output["dependents"] == 2

    def test_cli_missing_salary(self, capsys):
        assert withholding.main([]) == 1
        assert "Usage" in capsys.readouterr().err


class TestVATCalculator:
    """Tests for VAT computation."""

    @pytest.fixture
    def calculator(self):
        """Create VAT calculator instance."""
        return VATCalculator()

    def test_standard(self, calculator):
        """Test 10% output and input tax."""
        result = calculator.calculate(50_000_000, 30_000_000)

        assert result.output_tax == 5_000_000
        assert result.input_tax == 3_000_000
        assert result.payable_tax == 2_000_000
        assert result.final_tax == 2_000_000

    def test_zero_rate(self, calculator):
        """Test zero-rated sales produce a refund position."""
        result = calculator.calculate(50_000_000, 30_000_000, zero_rate=True)

        assert result.output_tax == 0
        assert result.input_tax == 3_000_000
        assert result.payable_tax == -3_000_000
        assert result.final_tax == 0

    def test_exempt(self, calculator):
        """Test exempt business has no output or input tax."""
        result = calculator.calculate(50_000_000, 30_000_000, exempt=True)

        assert result.output_tax == 0
        assert result.input_tax == 0
        assert result.final_tax == 0

    def test_card_sales_credit(self, calculator):
        """Test 1.3% credit-card sales credit."""
        result = calculator.calculate(50_000_000, 30_000_000, card_sales=True)

        assert len(result.deductions) == 1
        assert result.deductions[0].amount == 650_000
        assert result.deductions[0].item == "신용카드매출전표 발행 세액공제 (1.3%)"
        assert result.total_deduction == 650_000
        assert result.final_tax == 1_350_000

    def test_card_sales_credit_cap(self, calculator):
        """Test credit capped at 10M."""
        credit = calculator.card_sales_credit(1_000_000_000, annual_sales=1_000_000_000)

        assert credit.amount == 10_000_000

    def test_card_sales_credit_over_limit(self, calculator):
        """Test no credit when annual sales exceed 1B."""
        result = calculator.calculate(
            50_000_000, 30_000_000, card_sales=True, annual_sales=1_500_000_000
        )

        assert result.deductions == []
        assert result.final_tax == 2_000_000

    def test_annual_sales_estimated(self, calculator):
        """Test annual sales estimated as four periods."""
        assert calculator.card_sales_credit(300_000_000) is None
        assert calculator.card_sales_credit(250_000_000).amount == 3_250_000

    def test_to_dict(self, calculator):
        output = calculator.calculate(50_000_000, 30_000_000, card_sales=True).to_dict()

        assert output["매출세액"] == "5,000,000원"
        assert output["최종납부세액"] == "1,350,000원"
        assert output["공제내역"][0]["금액"] == "650,000원"
        assert output["deductions"][0]["amount"] == 650_000
        assert output["finalTax"] == 1_350_000

    def test_cli(self, capsys):
        """Test calc-vat output."""
        exit_code = vat_calculator.main([
            "--sales-amount", "50000000", "--purchase-amount", "30000000", "--card-sales",
        ])

        output = json.loads(capsys.readouterr().out)
        assert exit_code == 0
        assert output["finalTax"] == 1_350_000

    def test_cli_no_amounts(self, capsys):
        assert vat_calculator.main([]) == 1
        assert "Usage" in capsys.readouterr().err

    def test_cli_fractional_amount(self, capsys):
        """Test decimal amounts are rounded half-up to whole won."""
        exit_code = vat_calculator.main([
            "--sales-amount", "1500000.5", "--purchase-amount", "0",
        ])

        output = json.loads(capsys.readouterr().out)
        assert exit_code == 0
        assert output["salesAmount"] == 1_500_001
        assert output["outputTax"] == 150_000


class TestVATFromEcount:
    """Tests for Ecount-sourced VAT totals."""

    @pytest.fixture
    def client(self):
        """Create a mock Ecount client."""
        client = Mock()
        client.login.return_value = EcountSession(session_id="sid", zone="CC")
        client.get_sales_slips.return_value = {
            "Data": {"Datas": [{"SUPPLY_AMT": "1000000"}, {"TOTAL_AMT": 500000}, {}]}
        }
        client.get_purchase_slips.return_value = {"Data": None}
        return client

    def test_sums_slips(self, client):
        """Test supply amounts with total fallback."""
        sales, purchases = fetch_from_ecount("2026-01-01", "2026-03-31", client=client)

        assert sales == 1_500_000
        assert purchases == 0
        client.get_sales_slips.assert_called_once_with(
            client.login.return_value, "2026-01-01", "2026-03-31"
        )

    def test_cli_uses_ecount_totals(self, capsys):
        """Test date range replaces CLI amounts."""
        with patch.object(vat_calculator, "fetch_from_ecount", return_value=(20_000_000, 10_000_000)), \
                patch.object(vat_calculator, "load_dotenv"):
            exit_code = vat_calculator.main(["--start-date", "2026-01-01", "--end-date", "2026-03-31"])

        output = json.loads(capsys.readouterr().out)
        assert exit_code == 0
        assert output["salesAmount"] == 20_000_000
        assert output["payableTax"] == 1_000_000

    def test_cli_api_error(self, capsys):
        """Test API errors are reported as JSON."""
        with patch.object(vat_calculator, "fetch_from_ecount", side_effect=EcountError("Login failed: denied")), \
                patch.object(vat_calculator, "load_dotenv"):
            exit_code = vat_calculator.main(["--start-date", "2026-01-01", "--end-date", "2026-03-31"])

        error = json.loads(capsys.readouterr().err)
        assert exit_code == 1
        assert error["error"] is True
        assert error["message"] == "Login failed: denied"


class TestFilingGuide:
    """Tests for Hometax filing guides."""

    def test_all_guides_loaded(self):
        guides = load_guides()

        assert set(guides) == {"vat", "withholding", "corporate"}
        assert all(isinstance(g, FilingGuide) for g in guides.values())

    @pytest.mark.parametrize("guide_type,step_count", [
        ("vat", 8),
        ("withholding", 7),
        ("corporate", 10),
    ])
    def test_steps_numbered(self, guide_type, step_count):
        """Test steps are numbered from one."""
        guide = get_guide(guide_type)

        assert [s.step for s in guide.steps] == list(range(1, step_count + 1))
        assert guide.url == "https://www.hometax.go.kr"
        assert guide.required_documents

    def test_vat_guide_content(self):
        guide = get_guide("vat")

        assert guide.title == "부가가치세 신고 (홈택스)"
        assert guide.steps[0].action == "홈택스 로그인"
        assert "매출세금계산서 합계표" in guide.required_documents

    def test_unknown_type(self):
        assert get_guide("income") is None

    def test_cli(self, capsys):
        """Test hometax-guide output keys."""
        exit_code = filing_guide.main(["--type", "corporate"])

        output = json.loads(capsys.readouterr().out)
        assert exit_code == 0
        assert list(output) == ["type", "title", "url", "requiredDocuments", "steps"]
        assert output["steps"][9]["step"] == 10
        assert set(output["steps"][0]) == {"step", "action", "details"}

    def test_cli_invalid_type(self, capsys):
        assert filing_guide.main(["--type", "income"]) == 1
        assert "Usage" in capsys.readouterr().err


class TestTaxCalendar:
    """Tests for the tax deadline calendar."""

    @pytest.fixture
    def calendar(self, calendar_today):
        """Create calendar with a fixed reference date."""
        return TaxCalendar(today=calendar_today)

    def test_loads_year(self, calendar):
        assert calendar.year == 2026
        assert len(calendar.deadlines) == 31

    def test_d_day(self, calendar):
        """Test D-day counts from the reference date."""
        first = calendar.deadlines[0]

        assert first.deadline == date(2026, 1, 12)
        assert first.d_day == 7

    def test_filter_by_type(self, calendar):
        assert len(calendar.filter(event_type="withholding")) == 12
        assert len(calendar.filter(event_type="corporate")) == 2

    def test_filter_by_month(self, calendar):
        march = calendar.filter(month="2026-03")
        types = {d.type for d in march}

        assert len(march) == 5
        assert "corporate" in types
        assert "withholding" in types

    def test_upcoming(self, calendar):
        """Test nearest deadlines first."""
        upcoming = calendar.upcoming(calendar.deadlines)

        assert len(upcoming) == 5
        assert upcoming[0].name == "원천세 신고납부 (12월분)"
        assert upcoming[0].d_day == 7
        assert [d.d_day for d in upcoming] == sorted(d.d_day for d in upcoming)

    def test_upcoming_excludes_past(self):
        calendar = TaxCalendar(today=date(2026, 12, 1))
        upcoming = calendar.upcoming(calendar.deadlines)

        assert [d.deadline for d in upcoming] == [date(2026, 12, 10), date(2026, 12, 10)]

    def test_to_dict(self, calendar):
        output = calendar.deadlines[0].to_dict()

        assert output == {
            "type": "withholding",
            "name": "원천세 신고납부 (12월분)",
            "deadline": "2026-01-12",
            "description": "전월 원천징수한 소득세, 지방소득세 신고납부",
            "preparation": "원천징수이행상황신고서, 급여대장, 원천징수영수증",
            "dDay": 7,
        }

    def test_cli_next(self, capsys, calendar_today):
        """Test --next with a count."""
        with patch.object(tax_calendar, "_today", return_value=calendar_today):
            exit_code = tax_calendar.main(["--next", "--count", "3"])

        output = json.loads(capsys.readouterr().out)
        assert exit_code == 0
        assert len(output) == 3
        assert output[0]["dDay"] == 7

    @pytest.mark.parametrize("count", ["abc", "0"])
    def test_cli_invalid_count(self, capsys, calendar_today, count):
        """Test invalid or zero count falls back to five."""
        with patch.object(tax_calendar, "_today", return_value=calendar_today):
            tax_calendar.main(["--next", "--count", count])

        assert len(json.loads(capsys.readouterr().out)) == 5

    def test_cli_next_with_type(self, capsys, calendar_today):
        with patch.object(tax_calendar, "_today", return_value=calendar_today):
            tax_calendar.main(["--next", "--type", "vat"])

        output = json.loads(capsys.readouterr().out)
        assert [d["deadline"] for d in output] == [
            "2026-01-25", "2026-04-25", "2026-07-25", "2026-10-25",
        ]

    def test_cli_nothing_upcoming(self, capsys):
        with patch.object(tax_calendar, "_today", return_value=date(2027, 1, 1)):
            exit_code = tax_calendar.main(["--next"])

        output = json.loads(capsys.readouterr().out)
        assert exit_code == 0
        assert output == {"message": "2026년 남은 세무 일정이 없습니다."}

    def test_cli_month(self, capsys, calendar_today):
        with patch.object(tax_calendar, "_today", return_value=calendar_today):
            exit_code = tax_calendar.main(["--month", "2026-03"])

        output = json.loads(capsys.readouterr().out)
        assert exit_code == 0
        assert len(output) == 5

    def test_cli_no_filters(self, capsys):
        assert tax_calendar.main([]) == 1
        assert "Usage" in capsys.readouterr().err
