from twilio.rest import Client
from typing import Optional


class TwilioClient:
    def __init__(
        self,
        account_sid: Optional[str] = None,
        auth_token: Optional[str] = None,
        phone_number: Optional[str] = None,
    ):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.phone_number = phone_number
        self._client: Optional[Client] = None

    @property
    def configured(self) -> bool:
        return bool(self.account_sid and self.auth_token and self.phone_number)

    @property
    def client(self) -> Client:
        # Created on first use so missing credentials only matter when sending
        if self._client is None:
            self._client = Client(self.account_sid, self.auth_token)
        return self._client

    def send_sms(self, to: str, message: str, from_: str | None = None):
        """Send an SMS to the specified phone number"""
        from_number = from_ or self.phone_number
        if not from_number:
            raise ValueError("Missing Twilio from number for SMS.")
        message = self.client.messages.create(
            to=to,
            from_=from_number,
            body=message
        )
        return message
