"""Email service for sending job match notifications and digests."""
import logging
from typing import Optional, Sequence
from urllib.parse import quote

from jobmatch.config import settings
from jobmatch.schemas.match import JobMatch, MatchStatistics
from jobmatch.services.email_templates import (
    job_matches_email_template,
    replace_template_variables,
    weekly_digest_template,
)

logger = logging.getLogger(__name__)


class EmailService:
    """Handles email sending in dev and production modes."""

    def __init__(
        self,
        mode: Optional[str] = None,
        api_key: Optional[str] = None,
        from_email: Optional[str] = None,
        app_url: Optional[str] = None,
    ):
        self.mode = mode or settings.email_mode
        self.from_email = from_email or settings.from_email
        self.app_url = (app_url or settings.app_url).rstrip("/")
        if self.mode == "prod":
            try:
                from sendgrid import SendGridAPIClient
                self.sendgrid_client = SendGridAPIClient(api_key or settings.sendgrid_api_key)
            except ImportError:
                logger.error("SendGrid not installed but email_mode is 'prod'")
                raise
        else:
            self.sendgrid_client = None

    async def send_match_notification(
        self,
        email: str,
        name: Optional[str],
        matches: Sequence[JobMatch],
    ) -> bool:
        """Send the user their top job matches."""
        if not email or not matches:
            return False

        subject = f"{len(matches)} New Job Matches for You"
        html_content = job_matches_email_template(name or "there", matches, self.app_url)

        lines = [f"Hi {name or 'there'},", "", f"We found {len(matches)} new job matches for you:", ""]
        for match in matches:
            lines.append(f"- {match.title} at {match.company} ({match.match_score}% match)")
            lines.append(f"  {self.app_url}/jobs/{match.id}")
        text_content = "\n".join(lines)

        return await self._send_email(email, subject, text_content, html_content)

    async def send_weekly_digest(self, email: str, name: Optional[str], stats: MatchStatistics) -> bool:
        """Send weekly match statistics."""
        if not email:
            return False

        subject = "Your Weekly JobMatch Digest 📊"
        html_content = weekly_digest_template(name or "there", stats, self.app_url)
        text_content = f"""
        Your Weekly JobMatch Digest

        - {stats.total_jobs} active jobs scored against your profile
        - {stats.high_matches} strong matches (80%+)
        - Average match score: {stats.average_score}%

        Log in to the dashboard to see all opportunities.
        """

        return await self._send_email(email, subject, text_content, html_content)

    async def _send_email(self, to_email: str, subject: str, text_content: str, html_content: str) -> bool:
        """Internal method to send email via SendGrid or dev console."""
        html_content = replace_template_variables(html_content, {
            "APP_URL": self.app_url,
            "USER_EMAIL": quote(to_email),
        })

        if self.mode == "dev":
            logger.info(f"[DEV MODE] Email to {to_email}: {subject}")
            logger.info(f"[DEV MODE] Content:\n{text_content}")
            return True

        try:
            from sendgrid.helpers.mail import Mail, Email, To, Content

            mail = Mail(
                from_email=Email(self.from_email, "JobMatch AI"),
                to_emails=To(to_email),
                subject=subject,
                plain_text_content=Content("text/plain", text_content),
                html_content=Content("text/html", html_content)
            )

            response = self.sendgrid_client.send(mail)

            if 200 <= response.status_code < 300:
                logger.info(f"Email sent to {to_email}: {subject}")
                return True
            else:
                logger.error(f"Failed to send email to {to_email}: {response.status_code}")
                return False
        except Exception as e:
            logger.error(f"Error sending email to {to_email}: {str(e)}")
            return False
