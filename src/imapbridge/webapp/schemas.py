# imapbridge/webapp/schemas.py
from __future__ import annotations

from datetime import date
from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

ACCOUNT_ID_PATTERN = r"^[^:\s]{1,64}$"
MESSAGE_ID_MAX_LENGTH = 512

AccountId = Annotated[str, Field(pattern=ACCOUNT_ID_PATTERN)]
MailboxName = Annotated[str, Field(min_length=1, max_length=256)]
FlagName = Annotated[str, Field(min_length=1, max_length=64, pattern=r'^\\?[^\s()"\\]+$')]


class SearchRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    mailbox: MailboxName = "INBOX"
    query: Optional[str] = Field(default=None, max_length=256)
    from_: Optional[str] = Field(default=None, alias="from", max_length=256)
    to: Optional[str] = Field(default=None, max_length=256)
    subject: Optional[str] = Field(default=None, max_length=256)
    unread_only: Optional[bool] = None
    last_days: Optional[int] = Field(default=None, ge=1, le=365)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    include_snippet: bool = False
    snippet_max_chars: Optional[int] = Field(default=None, ge=50, le=500)
    limit: int = Field(default=10, ge=1, le=50)
    page_token: Optional[str] = Field(default=None, min_length=1, max_length=256)

    @model_validator(mode="after")
    def _check_combinations(self) -> "SearchRequest":
        if self.snippet_max_chars is not None and not self.include_snippet:
            raise ValueError("snippet_max_chars requires include_snippet=true")
        if self.last_days is not None and (self.start_date or self.end_date):
            raise ValueError("last_days cannot be combined with start_date/end_date")
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("start_date must be on or before end_date")
        return self


class FlagsRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    add_flags: Optional[List[FlagName]] = Field(default=None, min_length=1, max_length=20)
    remove_flags: Optional[List[FlagName]] = Field(default=None, min_length=1, max_length=20)

    @model_validator(mode="after")
    def _check_any(self) -> "FlagsRequest":
        if not self.add_flags and not self.remove_flags:
            raise ValueError("Provide add_flags and/or remove_flags")
        return self


class MoveRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    destination_mailbox: MailboxName


class CopyRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    destination_mailbox: MailboxName
    destination_account_id: Optional[AccountId] = None
