from app.integrations.reminders.base import ReminderRequest, ReminderScheduler
from app.integrations.reminders.native import LogReminderScheduler
from app.integrations.reminders.sms import SmsReminderScheduler
from app.integrations.reminders.registry import dispatch_reminder, get_reminder_scheduler, resolve_scheduler

__all__ = [
    "ReminderRequest",
    "ReminderScheduler",
    "LogReminderScheduler",
    "SmsReminderScheduler",
    "dispatch_reminder",
    "get_reminder_scheduler",
    "resolve_scheduler",
]
