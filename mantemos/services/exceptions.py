"""
Domain errors. Routes translate these into HTTP responses; the sync
worker records them in its status instead of raising.
"""


class MantemosError(Exception):
    message = "Unexpected error"

    def __init__(self, message: str = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class InvalidCredentialsError(MantemosError):
    message = "Invalid login or password."


class ShiftClosedError(MantemosError):
    message = "You are outside your shift window. Order issuance is blocked."


class ImportParseFailure(MantemosError):
    message = "Could not import backup file."


class TransportError(MantemosError):
    message = "Cloud mirror unreachable"


class StaleSnapshotError(MantemosError):
    message = "Cloud mirror holds a newer snapshot"

    def __init__(self, offered: int, current: int):
        super().__init__(f"snapshot version {offered} is not newer than mirror version {current}")
        self.offered = offered
        self.current = current


class MirrorCorruptError(MantemosError):
    message = "Cloud mirror holds an unreadable snapshot"
