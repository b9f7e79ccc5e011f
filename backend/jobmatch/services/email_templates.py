"""
HTML email templates.
Dynamic values are escaped; {{APP_URL}} and {{USER_EMAIL}} placeholders are
filled in by replace_template_variables() just before sending.
"""
from html import escape
from typing import Dict, Sequence

from jobmatch.schemas.match import JobMatch, MatchStatistics


def base_template(content: str, title: str) -> str:
    return f"""
<!DOCTYPE html>
<html>
  <head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{escape(title)}</title>
  </head>
  <body style="margin: 0; padding: 0; font-family: Arial, sans-serif; background-color: #f5f5f5;">
    <div style="max-width: 600px; margin: 0 auto; background-color: white;">
      <div style="background-color: #0F172A; padding: 20px; text-align: center;">
        <h1 style="color: white; margin: 0; font-size: 24px;">JobMatch AI</h1>
        <p style="color: #94A3B8; margin: 5px 0 0 0;">Your AI-powered job matching platform</p>
      </div>
      <div style="padding: 30px;">
        {content}
      </div>
      <div style="background-color: #F8FAFC; padding: 20px; border-top: 1px solid #E2E8F0; text-align: center; color: #64748B; font-size: 12px;">
        <p style="margin: 0 0 10px 0;">You're receiving this email because you signed up for JobMatch AI.</p>
        <p style="margin: 0;">
          <a href="{{{{APP_URL}}}}/settings/notifications" style="color: #0F172A;">Manage email preferences</a> |
          <a href="{{{{APP_URL}}}}/unsubscribe?email={{{{USER_EMAIL}}}}" style="color: #0F172A;">Unsubscribe</a>
        </p>
      </div>
    </div>
  </body>
</html>
"""


def _format_salary(match: JobMatch) -> str:
    if match.salary_range:
        return match.salary_range
    if match.salary_min is not None and match.salary_max is not None:
        return f"${match.salary_min:,.0f} - ${match.salary_max:,.0f}"
    if match.salary_min is not None:
        return f"From ${match.salary_min:,.0f}"
    if match.salary_max is not None:
        return f"Up to ${match.salary_max:,.0f}"
    return "Not specified"


def job_match_card(match: JobMatch, app_url: str) -> str:
    reasons = "".join(f"<li>{escape(reason)}</li>" for reason in match.match_reasons)
    return f"""
  <div style="margin-bottom: 20px; padding: 20px; border: 1px solid #E2E8F0; border-radius: 8px; background-color: #FAFAFA;">
    <h3 style="margin: 0 0 5px 0; color: #0F172A; font-size: 18px;">{escape(match.title)}</h3>
    <p style="margin: 0 0 10px 0; color: #64748B; font-size: 14px;">{escape(match.company)}</p>
    <span style="background-color: #10B981; color: white; padding: 4px 8px; border-radius: 4px; font-size: 12px; font-weight: bold;">
      {match.match_score}% Match
    </span>
    <p style="margin: 15px 0 5px 0; color: #374151;"><strong>Location:</strong> {escape(match.location)}</p>
    <p style="margin: 0 0 5px 0; color: #374151;"><strong>Salary:</strong> {escape(_format_salary(match))}</p>
    <p style="margin: 0 0 15px 0; color: #374151;"><strong>Type:</strong> {escape(match.job_type or "Not specified")}</p>
    <p style="margin: 0 0 8px 0; color: #374151; font-weight: bold;">Why this matches you:</p>
    <ul style="margin: 0 0 15px 0; padding-left: 20px; color: #4B5563;">{reasons}</ul>
    <a href="{escape(app_url)}/jobs/{match.id}"
       style="display: inline-block; padding: 10px 20px; background-color: #0F172A; color: white; text-decoration: none; border-radius: 6px; font-weight: bold;">
      View Job Details
    </a>
  </div>
"""


def job_matches_email_template(user_name: str, matches: Sequence[JobMatch], app_url: str) -> str:
    cards = "".join(job_match_card(match, app_url) for match in matches)
    content = f"""
      <h2 style="color: #0F172A; margin: 0 0 20px 0;">Hi {escape(user_name)},</h2>
      <p style="color: #374151; font-size: 16px; line-height: 1.6;">
        We found <strong>{len(matches)}</strong> new job matches based on your profile.
      </p>
      {cards}
      <p style="text-align: center; margin-top: 30px;">
        <a href="{escape(app_url)}/dashboard" style="color: #0F172A; font-weight: bold;">See all your matches</a>
      </p>
"""
    return base_template(content, "Your New Job Matches")


def weekly_digest_template(user_name: str, stats: MatchStatistics, app_url: str) -> str:
    top_skills = ", ".join(escape(skill) for skill in stats.top_skills) or "None yet"
    content = f"""
      <h2 style="color: #0F172A; margin: 0 0 20px 0;">Hi {escape(user_name)}, here is your week</h2>
      <ul style="color: #374151; font-size: 16px; line-height: 1.8;">
        <li><strong>{stats.total_jobs}</strong> active jobs scored against your profile</li>
        <li><strong>{stats.high_matches}</strong> strong matches (80%+)</li>
        <li>Average match score: <strong>{stats.average_score}%</strong></li>
        <li>Your most in-demand skills: {top_skills}</li>
      </ul>
      <p style="text-align: center; margin-top: 30px;">
        <a href="{escape(app_url)}/dashboard" style="color: #0F172A; font-weight: bold;">Open your dashboard</a>
      </p>
"""
    return base_template(content, "Your Weekly JobMatch Digest")


def replace_template_variables(html: str, variables: Dict[str, str]) -> str:
    for key, value in variables.items():
        html = html.replace(f"{{{{{key}}}}}", value)
    return html
