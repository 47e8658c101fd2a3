"""
PDS Staffing email package.

Modules:
- core: base send_email function (Brevo SMTP)
- accounts: temporary password and MFA login code emails
- events: team confirmation and availability invitations
- hr: sick leave request notifications
- payroll: per-event pay details
"""
