"""
One-off helper that runs the Google OAuth consent flow in a browser and
prints the values the meeting service reads from the environment
(GOOGLE_CLIENT_ID, GOOGLE_CLIENT_SECRET, GOOGLE_REFRESH_TOKEN).

Expects the OAuth client downloaded from the Google Cloud console as
credentials.json in the current directory (or pass another path).
"""
import sys

from google_auth_oauthlib.flow import InstalledAppFlow

from class_scheduler.services.meeting_service import SCOPES


def main(client_secrets_file: str = "credentials.json"):
    flow = InstalledAppFlow.from_client_secrets_file(client_secrets_file, SCOPES)
    # offline access + consent so Google always returns a refresh token
    creds = flow.run_local_server(port=0, access_type="offline", prompt="consent")

    print("Add these to your .env:")
    print(f"GOOGLE_CLIENT_ID={creds.client_id}")
    print(f"GOOGLE_CLIENT_SECRET={creds.client_secret}")
    print(f"GOOGLE_REFRESH_TOKEN={creds.refresh_token}")


if __name__ == "__main__":
    main(*sys.argv[1:2])
