"""
NaijaTax Compliance - WHT Calculator Service

Withholding Tax (WHT) rates (resident / non-resident payee):
- Professional, Technical, Management services: 5% / 10%
- Other services: 2% / 10%
- Dividends, Interest, Royalties, Rent: 10% / 10%
- Commission: 5% / 10%
- Construction: 2% / 5%
- Directors' fees: 15% / 20%

WHT deducted from a payment is a credit against the payee's final PIT or CIT
liability (see wht_credit_ledger).
"""

from decimal import Decimal
from typing import Any, Dict

from app.models.tax import WHTPaymentType, WHTPayeeType
from app.services.tax_calculators.regime import ZERO, round_kobo


# WHT rates by payment type: (resident, non-resident)
WHT_RATES = {
    WHTPaymentType.PROFESSIONAL_SERVICES: (Decimal("5"), Decimal("10")),
    WHTPaymentType.TECHNICAL_SERVICES: (Decimal("5"), Decimal("10")),
    WHTPaymentType.MANAGEMENT_SERVICES: (Decimal("5"), Decimal("10")),
    WHTPaymentType.OTHER_SERVICES: (Decimal("2"), Decimal("10")),
    WHTPaymentType.DIVIDENDS: (Decimal("10"), Decimal("10")),
    WHTPaymentType.INTEREST: (Decimal("10"), Decimal("10")),
    WHTPaymentType.ROYALTIES: (Decimal("10"), Decimal("10")),
    WHTPaymentType.RENT: (Decimal("10"), Decimal("10")),
    WHTPaymentType.COMMISSION: (Decimal("5"), Decimal("10")),
    WHTPaymentType.CONSTRUCTION: (Decimal("2"), Decimal("5")),
    WHTPaymentType.DIRECTORS_FEES: (Decimal("15"), Decimal("20")),
}


class WHTCalculator:
    """
    Withholding Tax (WHT) calculator.

    WHT is deducted at source by the payer; the amount deducted becomes a
    tax credit for the recipient.
    """

    @staticmethod
    def get_wht_rate(payment_type: WHTPaymentType, is_resident: bool = True) -> Decimal:
        resident_rate, non_resident_rate = WHT_RATES[WHTPaymentType(payment_type)]
        return resident_rate if is_resident else non_resident_rate

    @staticmethod
    def calculate_wht(
        gross_amount: Decimal,
        payment_type: WHTPaymentType,
        payee_type: WHTPayeeType = WHTPayeeType.COMPANY,
        is_resident: bool = True,
    ) -> Dict[str, Any]:
        """
        Calculate WHT for a payment.

        Returns:
            Dict with gross, rate, WHT and net amounts
        """
        gross = round_kobo(gross_amount)
        rate = WHTCalculator.get_wht_rate(payment_type, is_resident)
        wht_amount = round_kobo(gross * rate / 100) if gross > 0 else ZERO

        return {
            "gross_amount": gross,
            "wht_rate": rate,
            "wht_amount": round_kobo(wht_amount),
            "net_amount": round_kobo(gross - wht_amount),
            "payment_type": WHTPaymentType(payment_type).value,
            "payee_type": WHTPayeeType(payee_type).value,
            "is_resident": is_resident,
        }

    @staticmethod
    def calculate_tax_after_wht_credit(tax_liability: Decimal, wht_credits: Decimal) -> Decimal:
        """Final liability after credit; never negative."""
        return round_kobo(max(ZERO, tax_liability - max(ZERO, wht_credits)))
