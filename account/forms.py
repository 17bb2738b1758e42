"""Typed form payloads for the account actions.

Each action decodes its URL-encoded fields into one of the pydantic models
below.  Checks that depend on more than one field, or on the session, are
expressed as :class:`FieldError` members so the handlers can build their
error payloads without string juggling.
"""

import re
from datetime import datetime, timezone
from enum import Enum
from typing import ClassVar, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_LENGTH = 72

_LEADING_INT = re.compile(r'^\s*([+-]?\d+)')


class FieldError(Enum):
    """Field-level validation failures: (offending fields, message)."""

    EMAIL_REQUIRED = (('email',), 'An email address is required')
    EMAIL_INVALID = (('email',), 'A valid email address is required')

    NEW_PASSWORD_REQUIRED = (('newPassword1',), 'You must type a new password')
    NEW_PASSWORD_REPEAT_REQUIRED = (('newPassword2',), 'You must type the new password twice')
    NEW_PASSWORD_TOO_SHORT = (
        ('newPassword1',),
        f'The new password must be at least {PASSWORD_MIN_LENGTH} charaters long',
    )
    NEW_PASSWORD_TOO_LONG = (
        ('newPassword1',),
        f'The new password can be at most {PASSWORD_MAX_LENGTH} charaters long',
    )
    PASSWORDS_DONT_MATCH = (('newPassword1', 'newPassword2'), "The passwords don't match")
    CURRENT_PASSWORD_REQUIRED = (
        ('currentPassword',),
        "You must include your current password. If you forgot it, sign out then use "
        "'forgot password' on the sign in page.",
    )
    DELETE_PASSWORD_REQUIRED = (
        ('currentPassword',),
        "You must provide your current password to delete your account. If you forgot it, "
        "sign out then use 'forgot password' on the sign in page.",
    )

    FULL_NAME_REQUIRED = (('fullName',), 'Name is required')
    COMPANY_NAME_REQUIRED = (
        ('companyName',),
        'Company name is required. If this is a hobby project or personal app, please put your name.',
    )
    WEBSITE_REQUIRED = (
        ('website',),
        "Company website is required. An app store URL is a good alternative if you don't have a website.",
    )

    TITLE_AND_TEXT_REQUIRED = (('title', 'user_text'), 'Title and text are required')
    ENTRY_ID_REQUIRED = (('id',), 'ID is required to update journal entry.')
    ENTRY_TITLE_REQUIRED = (('title',), 'Title is required to update journal entry.')
    ENTRY_TEXT_REQUIRED = (('user_text',), 'Text is required to update journal entry.')
    ENTRY_DATE_REQUIRED = (('entry_date',), 'Entry date is required to update journal entry.')
    ENTRY_MOOD_REQUIRED = (('mood_indicator',), 'Mood indicator is required to update journal entry.')
    ENTRY_WEATHER_REQUIRED = (('weather',), 'Weather is required to update journal entry.')
    ENTRY_LOCATION_REQUIRED = (('location',), 'Location is required to update journal entry.')
    ENTRY_PRIVACY_REQUIRED = (('privacy_level',), 'Privacy level is required to update journal entry.')
    ENTRY_TYPE_REQUIRED = (('entry_type',), 'Entry type is required to update journal entry.')
    ENTRY_STATUS_REQUIRED = (('status',), 'Status is required to update journal entry.')

    @property
    def fields(self):
        return self.value[0]

    @property
    def message(self):
        return self.value[1]


def error_fields(errors: List[FieldError]) -> List[str]:
    """Offending field names of ``errors``, without duplicates, in order."""
    seen = []
    for error in errors:
        for name in error.fields:
            if name not in seen:
                seen.append(name)
    return seen


class ActionForm(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Fields submitted more than once, collected as lists
    multi_value_fields: ClassVar[Tuple[str, ...]] = ()

    @classmethod
    def from_form(cls, form):
        """Decode a werkzeug ``MultiDict`` of submitted fields."""
        data = {key: form.get(key) for key in form.keys()}
        for name in cls.multi_value_fields:
            data[name] = form.getlist(name)
        return cls.model_validate(data)


class EmailForm(ActionForm):
    email: str = ''

    def errors(self):
        if not self.email:
            return [FieldError.EMAIL_REQUIRED]
        # Anything beyond this is caught by the verification email
        if '@' not in self.email:
            return [FieldError.EMAIL_INVALID]
        return []


def _utf16_length(value):
    # Password limits are counted in UTF-16 code units, as browsers count them
    return len(value.encode('utf-16-le')) // 2


class PasswordForm(ActionForm):
    new_password1: str = Field('', alias='newPassword1')
    new_password2: str = Field('', alias='newPassword2')
    current_password: str = Field('', alias='currentPassword')

    def errors(self, recovery_session=False):
        """Every failing rule, in the order they are checked."""
        errors = []
        if not self.new_password1:
            errors.append(FieldError.NEW_PASSWORD_REQUIRED)
        if not self.new_password2:
            errors.append(FieldError.NEW_PASSWORD_REPEAT_REQUIRED)
        if _utf16_length(self.new_password1) < PASSWORD_MIN_LENGTH:
            errors.append(FieldError.NEW_PASSWORD_TOO_SHORT)
        if _utf16_length(self.new_password1) > PASSWORD_MAX_LENGTH:
            errors.append(FieldError.NEW_PASSWORD_TOO_LONG)
        if self.new_password1 != self.new_password2:
            errors.append(FieldError.PASSWORDS_DONT_MATCH)
        if not self.current_password and not recovery_session:
            errors.append(FieldError.CURRENT_PASSWORD_REQUIRED)
        return errors

    def echo(self):
        return {
            'newPassword1': self.new_password1,
            'newPassword2': self.new_password2,
            'currentPassword': self.current_password,
        }


class DeleteAccountForm(ActionForm):
    current_password: str = Field('', alias='currentPassword')

    def errors(self):
        if not self.current_password:
            return [FieldError.DELETE_PASSWORD_REQUIRED]
        return []


class ProfileForm(ActionForm):
    full_name: str = Field('', alias='fullName')
    company_name: str = Field('', alias='companyName')
    website: str = ''

    def errors(self):
        errors = []
        if not self.full_name:
            errors.append(FieldError.FULL_NAME_REQUIRED)
        if not self.company_name:
            errors.append(FieldError.COMPANY_NAME_REQUIRED)
        if not self.website:
            errors.append(FieldError.WEBSITE_REQUIRED)
        return errors

    def echo(self):
        return {
            'fullName': self.full_name,
            'companyName': self.company_name,
            'website': self.website,
        }


def _now():
    return datetime.now(timezone.utc)


class JournalEntryForm(ActionForm):
    multi_value_fields: ClassVar[Tuple[str, ...]] = ('tags',)

    title: str = ''
    tags: List[str] = Field(default_factory=list)
    user_text: str = ''
    ai_generated_text: Optional[str] = None
    ai_generated_image_url: Optional[str] = None
    entry_date: datetime = Field(default_factory=_now)
    mood_indicator: Optional[str] = None
    weather: Optional[str] = None
    location: Optional[str] = None
    word_count: int = 0
    privacy_level: Optional[str] = None
    daily_quote: Optional[str] = None
    entry_type: Optional[str] = None
    bookmark_flag: bool = False
    status: Optional[str] = None
    image_url: Optional[str] = None
    audio_url: Optional[str] = None
    time_spent: Optional[str] = None

    @field_validator('entry_date', mode='before')
    @classmethod
    def _parse_entry_date(cls, value):
        if isinstance(value, datetime):
            return value
        if not value:
            return _now()
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            return _now()
        # datetime-local inputs carry no offset
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed

    @field_validator('word_count', mode='before')
    @classmethod
    def _parse_word_count(cls, value):
        if isinstance(value, int):
            return value
        match = _LEADING_INT.match(value or '')
        return int(match.group(1)) if match else 0

    @field_validator('bookmark_flag', mode='before')
    @classmethod
    def _parse_bookmark_flag(cls, value):
        if isinstance(value, bool):
            return value
        return value == 'true'

    def errors(self):
        if not self.title or not self.user_text:
            return [FieldError.TITLE_AND_TEXT_REQUIRED]
        return []

    def to_row(self):
        """Column values for an insert or update of ``journal_entries``."""
        return {
            'title': self.title,
            'tags': list(self.tags),
            'user_text': self.user_text,
            'ai_generated_text': self.ai_generated_text,
            'ai_generated_image_url': self.ai_generated_image_url,
            'entry_date': self.entry_date.isoformat(),
            'mood_indicator': self.mood_indicator,
            'weather': self.weather,
            'location': self.location,
            'word_count': self.word_count,
            'privacy_level': self.privacy_level,
            'daily_quote': self.daily_quote,
            'entry_type': self.entry_type,
            'bookmark_flag': self.bookmark_flag,
            'status': self.status,
            'image_url': self.image_url,
            'audio_url': self.audio_url,
            'time_spent': f"interval '{self.time_spent}'" if self.time_spent else None,
        }


class JournalEntryUpdateForm(JournalEntryForm):
    id: str = ''

    def first_error(self) -> Optional[FieldError]:
        """The first missing required field; later ones are not reported."""
        required = (
            (self.id, FieldError.ENTRY_ID_REQUIRED),
            (self.title, FieldError.ENTRY_TITLE_REQUIRED),
            (self.user_text, FieldError.ENTRY_TEXT_REQUIRED),
            (self.entry_date, FieldError.ENTRY_DATE_REQUIRED),
            (self.mood_indicator, FieldError.ENTRY_MOOD_REQUIRED),
            (self.weather, FieldError.ENTRY_WEATHER_REQUIRED),
            (self.location, FieldError.ENTRY_LOCATION_REQUIRED),
            (self.privacy_level, FieldError.ENTRY_PRIVACY_REQUIRED),
            (self.entry_type, FieldError.ENTRY_TYPE_REQUIRED),
            (self.status, FieldError.ENTRY_STATUS_REQUIRED),
        )
        for value, error in required:
            if not value:
                return error
        return None


class EntryIdForm(ActionForm):
    id: str = ''
