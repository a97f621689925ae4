"""Rupee amount formatting for user-facing messages."""


def format_inr(amount: float) -> str:
    """Format with Indian digit grouping, e.g. 1234567.5 -> '12,34,567.5'."""
    sign = "-" if amount < 0 else ""
    rounded = round(abs(amount), 2)
    whole = int(rounded)
    fraction = f"{rounded - whole:.2f}"[1:].rstrip("0").rstrip(".")

    digits = str(whole)
    if len(digits) > 3:
        head, tail = digits[:-3], digits[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        digits = ",".join(groups + [tail])
    return f"{sign}{digits}{fraction}"
