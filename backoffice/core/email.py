"""
Back-office - Email
Só a redefinição de senha envia email; sem SMTP configurado o envio é ignorado.
"""
import logging
import smtplib
import ssl
from email.message import EmailMessage
from typing import Optional

from .config import settings

logger = logging.getLogger(__name__)

RESET_SUBJECT = "Redefinição de senha - Back-office Contratos"

RESET_TEXT = """Olá, {name}.

Recebemos uma solicitação para redefinir a sua senha.
Para escolher uma nova senha acesse: {url}

O link expira em {minutes} minutos. Se você não fez esta solicitação, ignore este email.
"""

RESET_HTML = """<p>Olá, {name}.</p>
<p>Recebemos uma solicitação para redefinir a sua senha.</p>
<p><a href="{url}">Escolher nova senha</a></p>
<p>O link expira em {minutes} minutos. Se você não fez esta solicitação, ignore este email.</p>
"""


def password_reset_url(token: str) -> str:
    return f"{settings.APP_URL.rstrip('/')}/redefinir-senha?token={token}"


class EmailService:

    def __init__(self, config=settings):
        self.config = config

    def is_configured(self) -> bool:
        return bool(self.config.SMTP_USER and self.config.SMTP_PASSWORD)

    def build_message(self, to_email: str, subject: str, text: str, html: Optional[str] = None) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = f"{self.config.SMTP_FROM_NAME} <{self.config.SMTP_FROM_EMAIL}>"
        message["To"] = to_email
        message.set_content(text)
        if html:
            message.add_alternative(html, subtype="html")
        return message

    def _connect(self) -> smtplib.SMTP:
        if self.config.SMTP_SSL:
            return smtplib.SMTP_SSL(
                self.config.SMTP_HOST, self.config.SMTP_PORT, context=ssl.create_default_context()
            )
        server = smtplib.SMTP(self.config.SMTP_HOST, self.config.SMTP_PORT)
        if self.config.SMTP_TLS:
            server.starttls(context=ssl.create_default_context())
        return server

    def send(self, message: EmailMessage) -> bool:
        """Envia a mensagem. Falha de SMTP é registrada e devolve False"""
        if not self.is_configured():
            logger.warning(f"SMTP não configurado: email para {message['To']} não enviado")
            return False

        try:
            with self._connect() as server:
                server.login(self.config.SMTP_USER, self.config.SMTP_PASSWORD)
                server.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Falha ao enviar email para {message['To']}: {e}")
            return False

        logger.info(f"Email enviado para {message['To']}: {message['Subject']}")
        return True

    def send_password_reset_email(self, to_email: str, name: Optional[str], token: str) -> bool:
        values = {
            "name": name or to_email,
            "url": password_reset_url(token),
            "minutes": self.config.PASSWORD_RESET_EXPIRE_MINUTES,
        }
        message = self.build_message(
            to_email,
            RESET_SUBJECT,
            RESET_TEXT.format(**values),
            RESET_HTML.format(**values),
        )
        return self.send(message)


email_service = EmailService()
