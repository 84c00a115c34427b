# upload_receipt.py: manual smoke test against a running server
#
#   python backend/scripts/upload_receipt.py path/to/receipt.jpg --token <jwt>
#
# Without --token a development token is minted with SECRET_KEY from the env.
import argparse
import mimetypes
import os
import sys

import requests

DEFAULT_URL = "http://127.0.0.1:8000/api/v1/receipts/process"


def main() -> int:
    parser = argparse.ArgumentParser(description="Upload a receipt and print the extraction")
    parser.add_argument("file")
    parser.add_argument("--url", default=DEFAULT_URL)
    parser.add_argument("--token", default=os.getenv("EXPENSE_TRACKER_TOKEN"))
    args = parser.parse_args()

    if not os.path.exists(args.file):
        print(f"File not found: {args.file}")
        return 1

    token = args.token
    if not token:
        from expense_tracker.services.security import create_access_token
        token = create_access_token("dev-user", email="dev@example.com")

    content_type = mimetypes.guess_type(args.file)[0] or "application/octet-stream"
    with open(args.file, "rb") as f:
        files = {"file": (os.path.basename(args.file), f, content_type)}
        headers = {"Authorization": f"Bearer {token}"}
        r = requests.post(args.url, files=files, headers=headers, timeout=120)
    print("Status:", r.status_code)
    print("Response:", r.text)
    return 0 if r.ok else 1


if __name__ == "__main__":
    sys.exit(main())
