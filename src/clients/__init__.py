"""Clients for the external collaborators: the Wise API and the SMTP relay."""

from clients.mailer import Mailer, MailerError
from clients.wise import WiseAPIError, WiseClient

__all__ = ["Mailer", "MailerError", "WiseAPIError", "WiseClient"]
