# Transactional email for inquirers and tenants
import os
from html import escape
from typing import Dict

import resend
from dotenv import load_dotenv

load_dotenv()


def _layout(title: str, body_html: str) -> str:
    return f"""
        <!DOCTYPE html>
        <html>
        <head>
            <meta charset="UTF-8">
            <meta name="viewport" content="width=device-width, initial-scale=1.0">
        </head>
        <body style="margin: 0; padding: 0; font-family: 'Segoe UI', Arial, sans-serif; background-color: #f3f4f6;">
            <table width="100%" cellpadding="0" cellspacing="0" style="padding: 30px 20px;">
                <tr>
                    <td align="center">
                        <table width="600" cellpadding="0" cellspacing="0" style="background-color: #ffffff; border-radius: 12px; overflow: hidden;">
                            <tr>
                                <td style="background-color: #1e3a8a; padding: 32px 40px; text-align: center;">
                                    <h1 style="color: #ffffff; margin: 0; font-size: 28px; letter-spacing: 2px;">BRANDSPACE</h1>
                                    <h2 style="color: #dbeafe; margin: 12px 0 0 0; font-size: 20px; font-weight: 500;">{title}</h2>
                                </td>
                            </tr>
                            <tr>
                                <td style="padding: 36px 40px; color: #374151; font-size: 16px; line-height: 1.7;">
                                    {body_html}
                                </td>
                            </tr>
                        </table>
                    </td>
                </tr>
            </table>
        </body>
        </html>
    """


class EmailService:
    """
    Centralized email service using Resend
    """

    def __init__(self):
        self.from_email = os.getenv("RESEND_FROM_EMAIL", "onboarding@resend.dev")
        self.frontend_url = os.getenv("FRONTEND_URL", "http://localhost:3000")
        self.api_key = os.getenv("RESEND_API_KEY")

        if os.getenv("TESTING") in ("1", "True") or not self.api_key:
            self.disabled = True
            print("⚠️ EmailService disabled: RESEND_API_KEY not set or running tests")
            return

        self.disabled = False
        resend.api_key = self.api_key

    def _send(self, to_email: str, subject: str, html: str) -> Dict:
        if self.disabled:
            return {"success": False, "error": "Email service is disabled"}
        try:
            params = {
                "from": self.from_email,
                "to": [to_email],
                "subject": subject,
                "html": html,
            }
            email_response = resend.Emails.send(params)
            return {
                "success": True,
                "message": "Email sent successfully",
                "email_id": email_response.get("id"),
            }
        except Exception as e:
            return {"success": False, "error": str(e)}

    def send_test_email(self, to_email: str) -> Dict:
        """
        Send a test email to verify Resend is working

        Args:
            to_email: Recipient email address

        Returns:
            Dict with 'success' boolean and 'message' or 'error'
        """
        html = _layout(
            "Email delivery check",
            "<p>This is a test message from the Brandspace admin panel.</p>"
            "<p>If you can read it, outgoing email is configured correctly.</p>",
        )
        return self._send(to_email, "Test Email from Brandspace", html)

    def send_inquiry_response(
        self,
        to_email,
        customer_name,
        shop_title,
        original_message,
        response_text,
        inquiry_id,
    ):
        """
        Email the admin's reply to the user who opened the inquiry
        """
        body = f"""
            <p>Hi <strong>{escape(customer_name or "there")}</strong>,</p>
            <p>Thank you for your interest in <strong>{escape(shop_title or "our shop")}</strong>.
               Here is our reply to your inquiry #{inquiry_id}:</p>
            <div style="background-color: #eff6ff; border-left: 4px solid #1e3a8a; padding: 16px 20px; margin: 24px 0;">
                {escape(response_text)}
            </div>
            <p style="color: #6b7280; font-size: 14px;">Your message:</p>
            <p style="color: #6b7280; font-size: 14px; font-style: italic;">{escape(original_message or "")}</p>
            <p style="margin-top: 32px;">
                <a href="{self.frontend_url}" style="background-color: #1e3a8a; color: #ffffff; padding: 12px 28px; border-radius: 6px; text-decoration: none;">
                    Visit Brandspace
                </a>
            </p>
        """
        subject = f"Re: your inquiry about {shop_title}" if shop_title else "Re: your inquiry"
        return self._send(to_email, subject, _layout("Inquiry Response", body))

    def send_payment_reminder(
        self,
        to_email,
        customer_name,
        shop_title,
        amount,
        due_date,
        payment_id,
    ):
        """
        Remind a tenant that a pending payment is past its due date
        """
        body = f"""
            <p>Hi <strong>{escape(customer_name or "there")}</strong>,</p>
            <p>Payment #{payment_id} for <strong>{escape(shop_title or "your booking")}</strong>
               of <strong>{amount:,.2f}</strong> was due on <strong>{due_date}</strong> and is still pending.</p>
            <p>Please complete the payment or contact support if you have already paid.</p>
        """
        return self._send(to_email, "Payment overdue", _layout("Payment Reminder", body))


# Create a singleton instance
email_service = EmailService()
