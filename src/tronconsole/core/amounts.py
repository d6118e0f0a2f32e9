from decimal import Decimal, InvalidOperation

from tronconsole.core.errors import ValidationError


def parse_amount(value: str, field: str = "amount") -> Decimal:
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as e:
        raise ValidationError("Invalid parameters", [{"field": field, "message": "Must be a number"}]) from e
    if not amount.is_finite() or amount <= 0:
        raise ValidationError("Invalid parameters", [{"field": field, "message": "Must be greater than 0"}])
    return amount


def to_base_units(amount: Decimal, decimals: int, field: str = "amount") -> int:
    scaled = amount.scaleb(decimals)
    if scaled != scaled.to_integral_value():
        raise ValidationError(
            "Invalid parameters",
            [{"field": field, "message": f"At most {decimals} decimal places allowed"}],
        )
    return int(scaled)


def format_amount(value: Decimal) -> str:
    # plain notation, no exponent, no trailing zeros
    text = format(value.normalize(), "f")
    return text if text != "-0" else "0"
