"""
HR notification email templates.
"""
from libs.common.emails.core import send_email


async def send_sick_leave_request_email(
    to_email: str,
    employee_name: str,
    employee_email: str,
    leave_date: str,
    hours: float,
) -> bool:
    subject = f"Sick Leave Request - {employee_name}"
    body = f"""A new sick leave request was submitted.

Employee: {employee_name}
Email: {employee_email}
Date: {leave_date}
Hours: {hours:g}

Review it from the HR dashboard.
"""
    html_body = f"""<p>A new sick leave request was submitted.</p>
<ul>
  <li><strong>Employee:</strong> {employee_name}</li>
  <li><strong>Email:</strong> {employee_email}</li>
  <li><strong>Date:</strong> {leave_date}</li>
  <li><strong>Hours:</strong> {hours:g}</li>
</ul>
<p>Review it from the HR dashboard.</p>
"""
    return await send_email(to_email, subject, body, html_body)
