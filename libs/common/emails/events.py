"""
Event staffing email templates.
"""
from libs.common.config import get_settings
from libs.common.emails.core import send_email


async def send_team_invitation_email(
    to_email: str,
    first_name: str,
    event_name: str,
    event_date: str,
    venue: str,
    start_time: str,
    end_time: str,
    confirmation_token: str,
) -> bool:
    """Ask a vendor to confirm or decline a spot on an event team."""
    confirm_url = (
        f"{get_settings().FRONTEND_URL}/team-confirmation/{confirmation_token}"
    )
    greeting = f"Hi {first_name}," if first_name else "Hi there,"

    subject = f"Team Invitation: {event_name}"
    body = f"""{greeting}

You have been selected for the team working {event_name}.

Date: {event_date}
Venue: {venue}
Time: {start_time} - {end_time}

Please confirm or decline here: {confirm_url}

PDS Staffing
"""
    html_body = f"""<p>{greeting}</p>
<p>You have been selected for the team working <strong>{event_name}</strong>.</p>
<ul>
  <li><strong>Date:</strong> {event_date}</li>
  <li><strong>Venue:</strong> {venue}</li>
  <li><strong>Time:</strong> {start_time} - {end_time}</li>
</ul>
<p><a href="{confirm_url}">Confirm or decline your spot</a></p>
"""
    return await send_email(to_email, subject, body, html_body)


async def send_vendor_bulk_invitation_email(
    to_email: str,
    first_name: str,
    manager_name: str,
    duration_weeks: int,
    event_count: int,
    start_date: str,
    end_date: str,
    invitation_token: str,
) -> bool:
    """Ask a vendor which days they can work over the coming weeks."""
    respond_url = f"{get_settings().FRONTEND_URL}/invitations/{invitation_token}"
    greeting = f"Hi {first_name}," if first_name else "Hi there,"
    events_line = (
        f"{event_count} event{'' if event_count == 1 else 's'} are scheduled in this period."
        if event_count
        else "New events are being scheduled for this period."
    )

    subject = "Share Your Availability - PDS Staffing"
    body = f"""{greeting}

{manager_name} would like to know your availability for the next {duration_weeks} weeks
({start_date} to {end_date}). {events_line}

Mark the days you can work here: {respond_url}

PDS Staffing
"""
    html_body = f"""<p>{greeting}</p>
<p>{manager_name} would like to know your availability for the next
<strong>{duration_weeks} weeks</strong> ({start_date} to {end_date}).</p>
<p>{events_line}</p>
<p><a href="{respond_url}">Share your availability</a></p>
"""
    return await send_email(to_email, subject, body, html_body)
