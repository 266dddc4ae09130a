from enum import Enum


class Community(str, Enum):
    baker = "Baker"
    burton_connor = "Burton Connor"
    east_campus = "East Campus"
    macgregor = "MacGregor"
    maseeh = "Maseeh"
    mccormick = "McCormick"
    new_house = "New House"
    new_vassar = "New Vassar"
    next_house = "Next House"
    random = "Random"
    simmons = "Simmons"
    off_campus_cambridge = "Off-campus Cambridge"
    off_campus_boston = "Off-campus Boston"


# Exact, case-sensitive display names accepted on the wire
VALID_COMMUNITY_NAMES = frozenset(c.value for c in Community)


def is_valid_community_name(name) -> bool:
    return isinstance(name, str) and name in VALID_COMMUNITY_NAMES
