from .repos import ActivitiesRepoPort, ContactsRepoPort

__all__ = [
    "ActivitiesRepoPort",
    "ContactsRepoPort",
]
