"""Row shapes of the Supabase ``profiles`` and ``journal_entries`` tables."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

PROFILES_TABLE = 'profiles'
JOURNAL_ENTRIES_TABLE = 'journal_entries'

# Columns returned by the journal listing action (everything except user_id)
JOURNAL_ENTRY_COLUMNS = (
    'id',
    'title',
    'tags',
    'user_text',
    'ai_generated_text',
    'ai_generated_image_url',
    'entry_date',
    'mood_indicator',
    'weather',
    'location',
    'word_count',
    'privacy_level',
    'daily_quote',
    'entry_type',
    'bookmark_flag',
    'status',
    'image_url',
    'audio_url',
    'time_spent',
)


class Profile(BaseModel):
    """One profile row per auth identity; ``id`` references ``auth.users``."""
    id: Optional[str] = None
    full_name: Optional[str] = None
    company_name: Optional[str] = None
    website: Optional[str] = None
    avatar_url: Optional[str] = None
    updated_at: Optional[datetime] = None

    def is_complete(self):
        return bool(self.full_name and self.company_name and self.website)

    def to_dict(self):
        return self.model_dump(mode='json', exclude_none=True)


class JournalEntry(BaseModel):
    id: Optional[int] = None
    user_id: Optional[str] = None
    title: str
    tags: List[str] = Field(default_factory=list)
    user_text: Optional[str] = None
    ai_generated_text: Optional[str] = None
    ai_generated_image_url: Optional[str] = None
    entry_date: datetime
    mood_indicator: Optional[str] = None
    weather: Optional[str] = None
    location: Optional[str] = None
    word_count: Optional[int] = None
    privacy_level: Optional[str] = None
    daily_quote: Optional[str] = None
    entry_type: Optional[str] = None
    bookmark_flag: bool = False
    status: Optional[str] = None
    image_url: Optional[str] = None
    audio_url: Optional[str] = None
    time_spent: Optional[str] = None

    def to_dict(self):
        return self.model_dump(mode='json')
