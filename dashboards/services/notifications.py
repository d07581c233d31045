"""
Report and alert emails.

Both messages go out as plain text with an HTML alternative rendered from
``dashboards/emails/*.html``.
"""

import logging

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.template.loader import render_to_string

from accounts.models import NotificationSettings

logger = logging.getLogger(__name__)


def _send(subject, text_content, html_content, recipients, from_email=None):
    email = EmailMultiAlternatives(
        subject=subject,
        body=text_content,
        from_email=from_email or settings.DEFAULT_FROM_EMAIL,
        to=list(recipients),
    )
    email.attach_alternative(html_content, "text/html")
    return email.send(fail_silently=False)


def report_subject(report):
    metadata = report['metadata']
    return f"{metadata['report_type']} - {metadata['organization_name']} ({metadata['date_range']})"


def report_text(report):
    metadata = report['metadata']
    lines = [
        f"{metadata['report_type']} for {metadata['organization_name']}",
        f"Period: {metadata['date_range']}",
        "",
    ]

    production = report.get('production')
    if production:
        summary = production['summary']
        lines += [
            "Production",
            "----------",
            f"Total eggs: {summary['total_eggs']}",
            f"Sellable eggs: {summary['sellable_eggs']}",
            f"Waste eggs: {summary['waste_eggs']}",
            f"Loss: {summary['loss_percentage']:.1f}%",
            f"Average daily: {summary['average_daily']}",
            f"Mortality: {summary['total_mortality']}",
            "",
        ]

    attendance = report.get('attendance')
    if attendance:
        summary = attendance['summary']
        lines += [
            "Attendance",
            "----------",
            f"Workers: {summary['total_workers']}",
            f"Average attendance: {summary['average_attendance_rate']:.1f}%",
            "",
        ]

    recommendations = report.get('insights', {}).get('recommendations', [])
    if recommendations:
        lines.append("Recommendations")
        lines.append("---------------")
        lines += [f"• {item}" for item in recommendations]

    return "\n".join(lines)


def send_report_email(report, recipients):
    html_content = render_to_string('dashboards/emails/report.html', {'report': report})
    sent = _send(
        report_subject(report),
        report_text(report),
        html_content,
        recipients,
        from_email=settings.REPORTS_FROM_EMAIL,
    )
    logger.info(f"Report email sent to {len(recipients)} recipient(s)")
    return sent


def alert_subject(alerts):
    return f"Farm Alert: {len(alerts)} issue(s) require attention"


def alert_text(alerts):
    bullets = "\n".join(f"• {alert['message']}" for alert in alerts)
    return (
        "The following alerts have been detected in your farm operations:\n\n"
        f"{bullets}\n\n"
        "Please review your dashboard for more details and take appropriate action."
    )


def send_alert_email(user, alerts):
    """
    Email the alerts this user has opted into. Returns the number of alerts
    sent (0 when the user's settings filter everything out).
    """
    preferences = NotificationSettings.for_user(user)
    wanted = [alert for alert in alerts if preferences.wants_alert(alert['type'])]
    if not wanted:
        return 0

    html_content = render_to_string('dashboards/emails/alerts.html', {
        'user': user,
        'alerts': wanted,
    })
    _send(alert_subject(wanted), alert_text(wanted), html_content, [user.email])
    return len(wanted)
