"""
Health report - Renders results into an HTML email or plain text.

Findings are always listed in bucket order: errors, then content issues,
then warnings.
"""

import html
import logging
from typing import List, Tuple

from landing_monitor.core.entities import Finding
from landing_monitor.core.ports import Reporter
from landing_monitor.health.results import ResultSet

logger = logging.getLogger(__name__)

EMPTY_TARGET_ROW = " "
NO_ISSUES_TEXT = "No errors or warnings to report for this account."
REPORT_HEADING = "Landing Page Monitor"

ERROR_COLOR = "#d80d0d"
WARNING_COLOR = "#e27600"

# Invisible padding so mail clients don't pull body text into the preview line
PREHEADER_PADDING = "&nbsp;&zwnj;" * 40


def summary_sentence(result_set: ResultSet) -> str:
    return (
        f"Of the {result_set.url_count} urls checked, "
        f"{result_set.error_count} contain errors, "
        f"{result_set.warning_count} have warning signs, and "
        f"{result_set.content_error_count} have content errors."
    )


def ordered_findings(result_set: ResultSet) -> List[Tuple[str, Finding]]:
    """
    Findings of a target in report order, labelled for display.

    Returns:
        List of (label, finding) tuples
    """
    return (
        [("Error", f) for f in result_set.bad_urls]
        + [("Content issue", f) for f in result_set.on_page_errors]
        + [("Warning", f) for f in result_set.warn_urls]
    )


def format_title(title: str) -> str:
    """Wrap the title as a hidden preheader shown in inbox previews."""
    hidden = 'style="display: none; max-height: 0px; overflow: hidden;"'
    return (
        f"<div {hidden}>{html.escape(title)}</div> "
        f"<div {hidden}> {PREHEADER_PADDING}</div>"
    )


class AdapterHtmlReporter(Reporter):
    """
    Reporter producing the HTML email body.

    Each target becomes one table row: name and summary on the left,
    linked findings on the right.
    """

    def render_row(self, target_name: str, result_set: ResultSet) -> str:
        if result_set.url_count == 0 and not result_set.error_count:
            return EMPTY_TARGET_ROW

        lines = []
        for label, finding in ordered_findings(result_set):
            color = WARNING_COLOR if label == "Warning" else ERROR_COLOR
            url = html.escape(finding.url)
            lines.append(
                f'<a title="{label}" href="{url}" style="color: {color};">'
                f"{url}</a> <br /> {html.escape(finding.message)} <br /> <br /> "
            )
        details = "".join(lines) or NO_ISSUES_TEXT

        return f"""
<tr>
  <td style="vertical-align:top;padding:35px 0px;width:50%;">
    <div style="color:#000000;font-family:Lato, Tahoma, sans-serif;font-size:12px;line-height:22px;padding:0px 20px;">
      <h2 style="color: #757575; line-height: 100%;">{html.escape(target_name)}</h2>
      <p>{summary_sentence(result_set)}</p>
    </div>
  </td>
  <td style="vertical-align:top;padding:35px 0px;width:50%;">
    <div style="color:#000000;font-family:Ubuntu, Helvetica, Arial, sans-serif;font-size:12px;line-height:22px;padding:0px 20px;">
      <p>
{details}</p>
    </div>
  </td>
</tr>
"""

    def render_document(self, body: str, title: str) -> str:
        return f"""<!DOCTYPE html>
<html xmlns="http://www.w3.org/1999/xhtml">
<head>
  <title>{REPORT_HEADING}</title>
  <meta http-equiv="Content-Type" content="text/html; charset=UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
</head>
<body style="background: #FFFFFF; margin: 0; padding: 0;">
  {format_title(title)}
  <table role="presentation" cellpadding="0" cellspacing="0" border="0" style="background:#000b29;width:100%;">
    <tbody>
      <tr>
        <td style="text-align:center;padding:50px 20px;color:#FFFFFF;font-family:Lato, Tahoma, sans-serif;">
          <h1 style="font-size: 32px; line-height: 100%;">{REPORT_HEADING}</h1>
          <p style="font-size: 14px;">{html.escape(title)}</p>
        </td>
      </tr>
    </tbody>
  </table>
  <table role="presentation" cellpadding="0" cellspacing="0" border="0" align="center" style="width:100%;max-width:600px;">
    <tbody>
{body}
    </tbody>
  </table>
</body>
</html>
"""


class AdapterTextReporter(Reporter):
    """Reporter producing plain text, used for stdout and dry runs."""

    def render_row(self, target_name: str, result_set: ResultSet) -> str:
        if result_set.url_count == 0 and not result_set.error_count:
            return ""

        lines = [target_name, summary_sentence(result_set)]
        findings = ordered_findings(result_set)
        if not findings:
            lines.append(f"  {NO_ISSUES_TEXT}")
        for label, finding in findings:
            lines.append(f"  [{label}] {finding.url} - {finding.message}")
        return "\n".join(lines) + "\n\n"

    def render_document(self, body: str, title: str) -> str:
        rule = "=" * 80
        return f"{rule}\n{REPORT_HEADING}: {title}\n{rule}\n{body.rstrip()}\n{rule}\n"
