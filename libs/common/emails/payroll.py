"""
Payroll email templates.
"""
from typing import Any, Mapping

from libs.common.emails.core import send_email


def _money(value: Any) -> str:
    return f"${float(value or 0):,.2f}"


async def send_payment_details_email(
    to_email: str,
    first_name: str,
    event_name: str,
    event_date: str,
    venue: str,
    location: str,
    payment: Mapping[str, Any],
) -> bool:
    """Send a team member the pay breakdown for one event."""
    greeting = f"Hi {first_name}," if first_name else "Hi there,"
    lines = [
        ("Hours worked", f"{float(payment.get('actualHours') or 0):g}"),
        ("Regular rate", _money(payment.get("regRate"))),
        ("Hourly pay", _money(payment.get("extAmtOnRegRate"))),
    ]
    if float(payment.get("commissionAmt") or 0) > 0:
        lines.append(("Commission", _money(payment.get("commissionAmt"))))
    if float(payment.get("tips") or 0) > 0:
        lines.append(("Tips", _money(payment.get("tips"))))
    if float(payment.get("restBreak") or 0) > 0:
        lines.append(("Rest break", _money(payment.get("restBreak"))))
    if float(payment.get("adjustmentAmount") or 0) != 0:
        lines.append(("Adjustment", _money(payment.get("adjustmentAmount"))))
    total = _money(payment.get("finalPay"))

    subject = f"Payment Details - {event_name}"
    breakdown = "\n".join(f"{label}: {value}" for label, value in lines)
    body = f"""{greeting}

Here is your pay summary for {event_name}.

Date: {event_date}
Venue: {venue}
Location: {location}

{breakdown}
Total: {total}

PDS Staffing
"""
    rows = "\n".join(
        f"  <li><strong>{label}:</strong> {value}</li>" for label, value in lines
    )
    html_body = f"""<p>{greeting}</p>
<p>Here is your pay summary for <strong>{event_name}</strong>.</p>
<p>{event_date} at {venue} ({location})</p>
<ul>
{rows}
</ul>
<p><strong>Total: {total}</strong></p>
"""
    return await send_email(to_email, subject, body, html_body)
