"""
Demo Account Seeder - registers one admin, faculty and student via the API.

Existing accounts (409 Conflict) are left untouched, so the script can be
run repeatedly.

Usage:
    python seed_users.py                              # Uses default URL
    python seed_users.py http://localhost:8000         # Custom API URL
    python seed_users.py http://backend:8000           # Inside Docker network
"""

import os
import sys

import httpx

DEMO_PASSWORD = os.getenv("SEED_PASSWORD", "Password123")

DEMO_USERS = [
    {"name": "Admin User", "email": "admin@subtrack.example.com", "role": "admin", "dept": "Office"},
    {"name": "Faculty User", "email": "faculty@subtrack.example.com", "role": "faculty", "dept": "CSE"},
    {"name": "Student User", "email": "student@subtrack.example.com", "role": "student",
     "dept": "CSE", "year": "4"},
]


def register(client: httpx.Client, api_url: str, user: dict) -> str:
    resp = client.post(f"{api_url}/auth/register", json={**user, "password": DEMO_PASSWORD})
    if resp.status_code == 409:
        return "exists"
    resp.raise_for_status()
    return "created"


def main():
    api_url = sys.argv[1] if len(sys.argv) > 1 else os.getenv("API_URL", "http://localhost:8000")
    api_url = api_url.rstrip("/")

    print(f"Seeding demo accounts at: {api_url}")
    print()

    with httpx.Client(timeout=30.0) as client:
        try:
            for user in DEMO_USERS:
                outcome = register(client, api_url, user)
                icon = '✅' if outcome == "created" else '🔁'
                print(f"  {icon} {user['role']:<8} {user['email']}: {outcome}")
        except httpx.HTTPStatusError as e:
            print(f"HTTP Error {e.response.status_code}: {e.response.text}")
            sys.exit(1)
        except httpx.HTTPError as e:
            print(f"Could not reach {api_url}: {e}")
            sys.exit(1)

    print()
    print(f"✅ Done. All demo accounts use the password: {DEMO_PASSWORD}")


if __name__ == "__main__":
    main()
