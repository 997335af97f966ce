"""
HTML email templates

Each template is a pure function returning the rendered HTML body.
"""
from datetime import datetime
from html import escape
from typing import Optional

from ..config import settings


def _layout(title: str, header: str, gradient: str, body: str, company: Optional[str] = None) -> str:
    company = escape(company or settings.COMPANY_NAME)
    year = datetime.now().year
    return f"""
    <!DOCTYPE html>
    <html lang="en">
    <head>
      <meta charset="UTF-8">
      <meta name="viewport" content="width=device-width, initial-scale=1.0">
      <title>{escape(title)}</title>
    </head>
    <body style="margin: 0; padding: 0; font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif; background-color: #f7f7f7;">
      <table width="100%" cellpadding="0" cellspacing="0" border="0" style="background-color: #f7f7f7;">
        <tr>
          <td align="center">
            <table width="600" cellpadding="0" cellspacing="0" border="0" style="margin: 40px 0; background-color: #ffffff; border-radius: 8px; overflow: hidden;">
              <tr>
                <td style="background: {gradient}; padding: 30px; text-align: center;">
                  <h1 style="color: white; margin: 0; font-size: 28px;">{escape(header)}</h1>
                </td>
              </tr>
              <tr>
                <td style="padding: 30px;">
                  {body}
                </td>
              </tr>
              <tr>
                <td style="background-color: #f5f5f5; padding: 20px; text-align: center; border-top: 1px solid #eeeeee;">
                  <p style="color: #999999; margin: 0; font-size: 14px;">
                    &copy; {year} {company}. All rights reserved.
                  </p>
                  <p style="color: #bbbbbb; margin: 10px 0 0 0; font-size: 12px;">
                    This is an automated message, please do not reply to this email.
                  </p>
                </td>
              </tr>
            </table>
          </td>
        </tr>
      </table>
    </body>
    </html>
    """


def _details_table(rows) -> str:
    cells = []
    for index, (label, value) in enumerate(rows):
        shade = ' style="background-color: #f1f1f1;"' if index % 2 == 0 else ""
        cells.append(
            f'<tr{shade}>'
            f'<td width="30%" style="font-weight: bold; color: #555;">{escape(label)}:</td>'
            f'<td style="color: #333;">{escape(str(value))}</td>'
            f'</tr>'
        )
    return (
        '<table cellpadding="8" cellspacing="0" width="100%">'
        + "".join(cells)
        + '</table>'
    )


def otp_email_template(code: str, expires_in_minutes: Optional[int] = None) -> str:
    """Email verification code sent on registration"""
    minutes = expires_in_minutes or settings.OTP_EXPIRES_MIN
    body = f"""
                  <h2 style="color: #333333; margin-top: 0;">Verify Your Email</h2>
                  <p style="color: #666666; line-height: 1.6; margin-bottom: 20px;">
                    Thank you for registering with {escape(settings.COMPANY_NAME)}. Use the following OTP code to complete your verification:
                  </p>
                  <div style="text-align: center; margin: 30px 0;">
                    <div style="display: inline-block; background-color: #f8f9fa; padding: 15px 30px; border: 2px dashed #4facfe; border-radius: 8px;">
                      <div style="font-size: 32px; font-weight: bold; letter-spacing: 8px; color: #333333;">{escape(code)}</div>
                    </div>
                  </div>
                  <p style="color: #ff6b6b; text-align: center; font-size: 14px;">
                    This code will expire in {minutes} minutes.
                  </p>
                  <p style="color: #999999; font-size: 14px; line-height: 1.6;">
                    If you didn't request this code, please ignore this email or contact support if you have concerns.
                  </p>"""
    return _layout(
        "Email Verification",
        "Email Verification",
        "linear-gradient(135deg, #4facfe 0%, #00f2fe 100%)",
        body,
    )


def welcome_user_template(name: str, email: str, phone: str, custom_id: str, password: str = "Your chosen password") -> str:
    """Welcome email sent once a self-registered user verifies their email.

    The password row never holds the real password; it is not kept in plaintext.
    """
    details = _details_table([
        ("ID", custom_id),
        ("Email", email),
        ("Phone", phone),
        ("Password", password),
    ])
    body = f"""
                  <h2 style="color: #333333; margin-top: 0;">Hello {escape(name)},</h2>
                  <p style="color: #666666; line-height: 1.6; margin-bottom: 20px;">
                    Thank you for joining {escape(settings.COMPANY_NAME)}! Your account has been successfully verified and is now active.
                  </p>
                  <div style="background-color: #f9f9f9; padding: 20px; border-radius: 6px; margin: 25px 0;">
                    <h3 style="color: #333333; margin-top: 0;">Your Account Details:</h3>
                    {details}
                  </div>
                  <p style="color: #999999; font-size: 14px; line-height: 1.6;">
                    Happy shopping! If you need any assistance, our support team is here to help.
                  </p>"""
    return _layout(
        f"Welcome to {settings.COMPANY_NAME}",
        f"Welcome to {settings.COMPANY_NAME}",
        "linear-gradient(135deg, #5ee7df 0%, #b490ca 100%)",
        body,
    )


def welcome_staff_template(name: str, email: str, phone: str, password: str, custom_id: str) -> str:
    """Welcome email for accounts provisioned by staff, with login credentials"""
    details = _details_table([
        ("ID", custom_id),
        ("Email", email),
        ("Phone", phone),
        ("Password", password),
    ])
    body = f"""
                  <h2 style="color: #333333; margin-top: 0;">Hello {escape(name)},</h2>
                  <p style="color: #666666; line-height: 1.6; margin-bottom: 20px;">
                    You have been added as an administrative staff to {escape(settings.COMPANY_NAME)}. We're excited to have you on board!
                  </p>
                  <div style="background-color: #f9f9f9; padding: 20px; border-radius: 6px; margin: 25px 0;">
                    <h3 style="color: #333333; margin-top: 0;">Your Login Credentials:</h3>
                    {details}
                  </div>
                  <p style="color: #666666; line-height: 1.6;">
                    For security reasons, please login and change your password immediately.
                  </p>"""
    return _layout(
        f"Welcome to {settings.COMPANY_NAME}",
        f"Welcome to {settings.COMPANY_NAME}",
        "linear-gradient(135deg, #667eea 0%, #764ba2 100%)",
        body,
    )
