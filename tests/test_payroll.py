"""
Tests for Payroll Module

Tests for four major social-insurance premium calculations.
"""

import json
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "python"))

from payroll import insurance_calculator
from payroll.insurance_calculator import (
    InsuranceCalculator,
    InsurancePortion,
    InsuranceResult,
    InsuranceSide,
)


class TestInsuranceCalculator:
    """Tests for the insurance premium calculator."""

    @pytest.fixture
    def calculator(self):
        """Create insurance calculator instance."""
        return InsuranceCalculator()

    def test_typical_salary(self, calculator):
        """Test premiums on a 3M salary."""
        result = calculator.calculate(3_000_000)

        assert isinstance(result, InsuranceResult)
        assert result.employee.pension == 142_500
        assert result.employee.health == 107_850
        assert result.employee.long_term_care == 14_171
        assert result.employee.employment == 27_000
        assert result.employee.total == 142_500 + 107_850 + 14_171 + 27_000

    def test_employer_matches_employee(self, calculator):
        """Test both sides pay the same rates."""
        result = calculator.calculate(3_000_000)

        assert result.employer == result.employee
        assert result.grand_total == result.employee.total * 2

    def test_pension_floor(self, calculator):
        """Test pension base raised to the monthly floor."""
        portion = calculator.calculate_portion(200_000, InsuranceSide.EMPLOYEE)

        assert portion.pension == 17_575
        assert portion.health == 7_190
        assert portion.long_term_care == 945
        assert portion.employment == 1_800

    def test_pension_ceiling(self, calculator):
        """Test pension base capped at the monthly ceiling."""
        portion = calculator.calculate_portion(10_000_000, InsuranceSide.EMPLOYER)

        assert portion.pension == 293_075
        assert portion.health == 359_500
        assert portion.long_term_care == 47_238
        assert portion.employment == 90_000

    def test_long_term_care_from_rounded_health(self, calculator):
        """Test long-term care is a share of the rounded health premium."""
        portion = calculator.calculate_portion(3_000_000, InsuranceSide.EMPLOYEE)

        assert portion.long_term_care == round(portion.health * 0.1314)

    def test_to_dict(self, calculator):
        """Test display labels and canonical keys."""
        output = calculator.calculate(3_000_000).to_dict()

        assert output["월보수액"] == "3,000,000원"
        assert output["salary"] == 3_000_000
        assert output["근로자부담"]["국민연금"] == "142,500원"
        assert output["employee"]["longTermCare"] == 14_171
        assert output["사업주부담"] == output["employer"]
        assert output["grandTotal"] == 2 * 291_521
        assert output["총합계"] == "583,042원"

    def test_missing_rates_uses_defaults(self, tmp_path):
        """Test built-in rates when no rate file exists."""
        calculator = InsuranceCalculator(config_dir=tmp_path)

        assert calculator.calculate(3_000_000).employee.pension == 142_500

    def test_custom_rates(self, tmp_path):
        """Test rates loaded from a config directory."""
        rates = """
insurance:
  pension: {employee: 0.05, employer: 0.05, base_min: 0, base_max: 100000000}
  health: {employee: 0.04, employer: 0.04}
  long_term_care: {rate: 0.1}
  employment: {employee: 0.01, employer: 0.01}
"""
        (tmp_path / "insurance_rates.yaml").write_text(rates, encoding="utf-8")
        portion = InsuranceCalculator(config_dir=tmp_path).calculate_portion(
            1_000_000, InsuranceSide.EMPLOYEE
        )

        assert portion == InsurancePortion(
            pension=50_000, health=40_000, long_term_care=4_000, employment=10_000
        )


class TestInsuranceCLI:
    """Tests for the calc-insurance entry point."""

    def test_output(self, capsys):
        exit_code = insurance_calculator.main(["--salary", "3000000"])

        output = json.loads(capsys.readouterr().out)
        assert exit_code == 0
        assert output["employee"]["pension"] == 142_500
        assert output["employer"]["total"] == 291_521

    def test_missing_salary(self, capsys):
        assert insurance_calculator.main([]) == 1
        assert "Usage" in capsys.readouterr().err
