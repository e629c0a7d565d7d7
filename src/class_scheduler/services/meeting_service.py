'''
Google Meet link creation through the Google Calendar API.
'''
import asyncio
import datetime as dt
import uuid

from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from ..common.config import settings
from ..common.exceptions import MeetingCreationError
from ..common.logger import log

# The scope allows the service to read and write events to the calendar.
SCOPES = ["https://www.googleapis.com/auth/calendar"]
TOKEN_URI = "https://oauth2.googleapis.com/token"


class MeetingService:
    """
    Creates calendar events with an attached Google Meet conference and
    returns their join URL.

    Authenticates with a stored OAuth refresh token (GOOGLE_CLIENT_ID,
    GOOGLE_CLIENT_SECRET, GOOGLE_REFRESH_TOKEN). The Google client is blocking,
    so calls run in a worker thread.
    """

    def _build_calendar(self):
        if not (settings.GOOGLE_CLIENT_ID and settings.GOOGLE_CLIENT_SECRET and settings.GOOGLE_REFRESH_TOKEN):
            raise MeetingCreationError("Google Calendar credentials are not configured.")

        creds = Credentials(
            token=None,
            refresh_token=settings.GOOGLE_REFRESH_TOKEN,
            client_id=settings.GOOGLE_CLIENT_ID,
            client_secret=settings.GOOGLE_CLIENT_SECRET,
            token_uri=TOKEN_URI,
            scopes=SCOPES,
        )
        creds.refresh(Request())
        return build("calendar", "v3", credentials=creds, cache_discovery=False)

    def _create_meeting_sync(self, summary: str, start_time: dt.datetime, duration_minutes: int) -> str:
        end_time = start_time + dt.timedelta(minutes=duration_minutes)
        event = {
            "summary": summary,
            "start": {
                "dateTime": start_time.isoformat(),
                "timeZone": settings.MEETING_TIMEZONE,
            },
            "end": {
                "dateTime": end_time.isoformat(),
                "timeZone": settings.MEETING_TIMEZONE,
            },
            "conferenceData": {
                "createRequest": {
                    "requestId": f"meet_{uuid.uuid4().hex}",
                    "conferenceSolutionKey": {"type": "hangoutsMeet"},
                },
            },
        }

        try:
            service = self._build_calendar()
            created = (
                service.events()
                .insert(
                    calendarId=settings.GOOGLE_CALENDAR_ID,
                    conferenceDataVersion=1,
                    body=event,
                )
                .execute()
            )
        except (HttpError, GoogleAuthError) as error:
            raise MeetingCreationError(f"Google Calendar rejected the event: {error}") from error

        entry_points = created.get("conferenceData", {}).get("entryPoints", [])
        meet_link = next(
            (ep.get("uri") for ep in entry_points if ep.get("entryPointType") == "video"),
            None
        )
        if not meet_link:
            raise MeetingCreationError(f"Event '{summary}' was created without a video entry point.")
        return meet_link

    async def create_meeting(self, summary: str, start_time: dt.datetime, duration_minutes: int) -> str:
        """
        Creates a meeting and returns its join URL.
        Raises MeetingCreationError on any provider failure.
        """
        log.info(f"Creating Google Meet for '{summary}' at {start_time.isoformat()} ({duration_minutes} min).")
        meet_link = await asyncio.to_thread(self._create_meeting_sync, summary, start_time, duration_minutes)
        log.info(f"Google Meet created for '{summary}': {meet_link}")
        return meet_link
