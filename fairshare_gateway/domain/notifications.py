"""Transactional email content for friend and expense notifications"""

from decimal import Decimal, ROUND_HALF_UP
from html import escape
from typing import Dict, Optional

from fairshare_gateway.domain.models import EmailMessage

CURRENCY_SYMBOLS: Dict[str, str] = {"USD": "$", "EUR": "€", "GBP": "£"}
DEFAULT_CURRENCY_SYMBOL = "$"

_STYLE = (
    "body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; "
    "margin: 0; padding: 0; background-color: #f5f5f5; } "
    ".container { max-width: 600px; margin: 0 auto; background: white; border-radius: 16px; overflow: hidden; } "
    ".header { background: linear-gradient(135deg, {accent} 0%, {accent_dark} 100%); padding: 40px 30px; "
    "text-align: center; color: white; } "
    ".content { padding: 40px 30px; font-size: 18px; color: #333; line-height: 1.6; text-align: center; } "
    ".cta { display: block; background: {accent}; color: white; text-decoration: none; padding: 16px 32px; "
    "border-radius: 12px; font-weight: 600; margin: 30px auto; max-width: 250px; } "
    ".footer { background: #f9fafb; padding: 20px 30px; text-align: center; color: #6b7280; font-size: 14px; }"
)


def display_name(name: Optional[str], email: str) -> str:
    """Display name, or the local part of the email when none is set"""
    return name or email.split("@")[0]


def currency_symbol(currency_code: Optional[str], default: str = DEFAULT_CURRENCY_SYMBOL) -> str:
    return CURRENCY_SYMBOLS.get((currency_code or "").upper(), default)


def format_amount(amount: Decimal, currency_code: Optional[str], default_symbol: str = DEFAULT_CURRENCY_SYMBOL) -> str:
    """'€12.50' style rendering with two decimals"""
    quantized = Decimal(amount).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"{currency_symbol(currency_code, default_symbol)}{quantized}"


def _render_html(title: str, body: str, cta: str, app_url: str, accent: str, accent_dark: str, footer: str) -> str:
    style = _STYLE.replace("{accent}", accent).replace("{accent_dark}", accent_dark)
    return (
        "<!DOCTYPE html>\n"
        f"<html><head><style>{style}</style></head>\n"
        '<body><div class="container">\n'
        f'<div class="header"><h1>{title}</h1></div>\n'
        f'<div class="content">{body}<a href="{escape(app_url)}" class="cta">{cta}</a></div>\n'
        f'<div class="footer">{footer}</div>\n'
        "</div></body></html>\n"
    )


def friend_request_email(
    recipient_email: str,
    recipient_name: str,
    sender_name: str,
    sender_email: str,
    sender: str,
    app_url: str,
) -> EmailMessage:
    """Sent to the recipient of a new friend request"""
    body = (
        f'<p>Hey {escape(recipient_name)}!<br><br><strong>{escape(sender_name)}</strong> '
        f"({escape(sender_email)}) wants to connect with you on FairShare!<br><br>"
        "Accept their friend request to start splitting expenses together.</p>"
    )
    return EmailMessage(
        sender=sender,
        to=recipient_email,
        subject=f"{sender_name} wants to be your friend on FairShare! 🎉",
        html=_render_html(
            "FairShare",
            body,
            "Open FairShare",
            app_url,
            "#6366F1",
            "#8B5CF6",
            "You received this email because someone sent you a friend request on FairShare.",
        ),
        text=(
            f"Hey {recipient_name}!\n\n{sender_name} ({sender_email}) wants to connect with you on FairShare!\n\n"
            f"Accept their friend request to start splitting expenses together.\n\nOpen FairShare: {app_url}"
        ),
    )


def friend_accepted_email(
    requester_email: str,
    requester_name: str,
    accepter_name: str,
    sender: str,
    app_url: str,
) -> EmailMessage:
    """Sent to the original requester once their request is accepted"""
    body = (
        f"<p>Great news, {escape(requester_name)}!<br><br><strong>{escape(accepter_name)}</strong> "
        "has accepted your friend request on FairShare!<br><br>You can now easily split expenses together.</p>"
    )
    return EmailMessage(
        sender=sender,
        to=requester_email,
        subject=f"{accepter_name} accepted your friend request! 🎊",
        html=_render_html(
            "You're now friends! 🎉",
            body,
            "Start Splitting Expenses",
            app_url,
            "#10B981",
            "#059669",
            "© FairShare App",
        ),
        text=(
            f"Great news, {requester_name}!\n\n{accepter_name} has accepted your friend request on FairShare!\n\n"
            f"You can now easily split expenses together.\n\nOpen FairShare: {app_url}"
        ),
    )


def expense_created_email(
    participant_email: str,
    participant_name: str,
    payer_name: str,
    description: str,
    owed: str,
    category: str,
    sender: str,
    app_url: str,
) -> EmailMessage:
    """Sent to the non-paying participant of a new direct expense"""
    body = (
        f"<p>Hey {escape(participant_name)}, {escape(payer_name)} added a new expense:</p>"
        f"<p><strong>{escape(description)}</strong><br>You owe {escape(owed)}<br>"
        f"<small>Category: {escape(category)}</small></p>"
    )
    return EmailMessage(
        sender=sender,
        to=participant_email,
        subject=f"{payer_name} added an expense: {description}",
        html=_render_html(
            "💸 New Expense Added",
            body,
            "View Details",
            app_url,
            "#F59E0B",
            "#D97706",
            "© FairShare App",
        ),
        text=(
            f"Hey {participant_name}, {payer_name} added a new expense:\n\n{description}\n"
            f"You owe: {owed}\n\nOpen FairShare: {app_url}"
        ),
    )
