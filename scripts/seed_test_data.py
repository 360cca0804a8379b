"""
Seed local storage with sample technicians.

Usage:
  python scripts/seed_test_data.py

This script is idempotent: running it multiple times keeps one technician per
login. Orders are not seeded; issue them through the API so ids stay sequential.
"""

from mantemos.config import settings
from mantemos.schemas.technicians import TechnicianCreate
from mantemos.workspace import Workspace, create_storage


SAMPLE_TECHNICIANS = [
    {
        "full_name": "Ana Souza",
        "registration_number": "1001",
        "login": "ana.souza",
        "password": "TestUser123!",
        "shift_start": "07:00",
        "shift_end": "15:00",
    },
    {
        "full_name": "Bruno Lima",
        "registration_number": "1002",
        "login": "bruno.lima",
        "password": "TestUser123!",
        "shift_start": "15:00",
        "shift_end": "23:00",
    },
    {
        "full_name": "Carla Dias",
        "registration_number": "1003",
        "login": "carla.dias",
        "password": "TestUser123!",
        "shift_start": "22:00",
        "shift_end": "06:00",
    },
]


def ensure_technician(workspace: Workspace, data: dict) -> None:
    existing = {t.login for t in workspace.identities.list()}
    if data["login"] in existing:
        print(f"= {data['login']} already present")
        return
    technician = workspace.identities.add(TechnicianCreate(**data))
    print(f"+ {technician.login} ({technician.shift_start}-{technician.shift_end}) id={technician.id}")


def main() -> None:
    # local storage only; the cloud mirror is not touched
    workspace = Workspace(create_storage(settings), settings)
    for data in SAMPLE_TECHNICIANS:
        ensure_technician(workspace, data)
    print(f"Done. {len(workspace.identities.list())} technicians in {settings.data_dir}")


if __name__ == "__main__":
    main()
