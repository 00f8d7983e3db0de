"""
NaijaTax Compliance - VAT Calculator Service

VAT calculation and period position classification.

Nigeria VAT Rate: 7.5%

Small business exemption: an entity whose annual turnover is below
₦25,000,000 is VAT-exempt and should not charge output VAT. The exemption
interacts with output VAT in three ways, all surfaced on VATPosition:

- exempt, no output VAT: input VAT is a non-claimable cost, net VAT is zero,
  status is EXEMPT
- exempt, output VAT charged anyway: compliance warning; the collected VAT
  must still be remitted and input VAT stays claimable against it
- not exempt: net = output - input, classified payable / refundable / zero
"""

from dataclasses import asdict, dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional

from app.services.tax_calculators.regime import ZERO, get_regime, round_kobo


class VATStatus(str, Enum):
    """Net VAT position for a period."""
    PAYABLE = "payable"
    REFUNDABLE = "refundable"
    ZERO = "zero"
    EXEMPT = "exempt"


EXEMPT_CHARGING_WARNING = (
    "Annual turnover is below the VAT registration threshold but output VAT "
    "was charged. VAT collected from customers must still be remitted."
)


@dataclass
class VATPosition:
    """Net VAT for a period with the exemption interaction made explicit."""
    output_vat: Decimal
    input_vat: Decimal
    effective_input_vat: Decimal
    net_vat: Decimal
    status: VATStatus
    annual_turnover: Decimal
    is_vat_exempt: bool
    has_output_vat: bool
    input_vat_claimable: bool
    compliance_warning: bool
    warning_message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class VATCalculator:
    """
    VAT calculation utilities.

    Exempt supplies (basic food, medical and educational services, etc.)
    carry no VAT; everything else is charged at the regime's standard rate.
    """

    EXEMPT_CATEGORIES = [
        "basic_food",
        "medical_services",
        "pharmaceuticals",
        "educational_services",
        "rental_residential",
        "agricultural_produce",
    ]

    @staticmethod
    def calculate_vat(
        amount: Decimal,
        is_exempt: bool = False,
        tax_year: int = 2026,
    ) -> Decimal:
        """VAT on a VAT-exclusive amount."""
        if is_exempt or amount <= 0:
            return Decimal("0.00")
        return round_kobo(amount * get_regime(tax_year).vat_rate / 100)

    @classmethod
    def is_exempt_category(cls, category: Optional[str]) -> bool:
        return bool(category) and category.lower() in cls.EXEMPT_CATEGORIES

    @staticmethod
    def is_small_business_exempt(annual_turnover: Decimal, tax_year: int = 2026) -> bool:
        return annual_turnover < get_regime(tax_year).vat_exemption_turnover

    @staticmethod
    def classify(net_vat: Decimal) -> VATStatus:
        if net_vat > 0:
            return VATStatus.PAYABLE
        if net_vat < 0:
            return VATStatus.REFUNDABLE
        return VATStatus.ZERO

    @classmethod
    def calculate_position(
        cls,
        output_vat: Decimal,
        input_vat: Decimal,
        annual_turnover: Decimal,
        tax_year: int = 2026,
    ) -> VATPosition:
        """Net VAT position for a period given its aggregates."""
        output_vat = round_kobo(output_vat)
        input_vat = round_kobo(input_vat)
        is_exempt = cls.is_small_business_exempt(annual_turnover, tax_year)
        has_output = output_vat > 0

        input_claimable = not (is_exempt and not has_output)
        effective_input = input_vat if input_claimable else ZERO
        net_vat = round_kobo(output_vat - effective_input)

        if is_exempt and not has_output:
            status = VATStatus.EXEMPT
        else:
            status = cls.classify(net_vat)

        compliance_warning = is_exempt and has_output

        return VATPosition(
            output_vat=output_vat,
            input_vat=input_vat,
            effective_input_vat=round_kobo(effective_input),
            net_vat=net_vat,
            status=status,
            annual_turnover=round_kobo(annual_turnover),
            is_vat_exempt=is_exempt,
            has_output_vat=has_output,
            input_vat_claimable=input_claimable,
            compliance_warning=compliance_warning,
            warning_message=EXEMPT_CHARGING_WARNING if compliance_warning else None,
        )
