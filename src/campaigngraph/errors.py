"""Exceptions raised by the campaign integrity engine."""

from __future__ import annotations


class CampaignGraphError(RuntimeError):
    """Base class for errors raised by :mod:`campaigngraph`."""


class HierarchyCycleError(CampaignGraphError):
    """Raised when stored ``sub_locations`` lead back to an ancestor.

    ``path`` holds the ids from the root down to the location whose
    ``sub_locations`` closed the loop.
    """

    def __init__(self, location_id: str, path: tuple[str, ...]) -> None:
        super().__init__(
            f"Location '{location_id}' is listed below itself: "
            f"{' > '.join(path + (location_id,))}."
        )
        self.location_id = location_id
        self.path = path


__all__ = ["CampaignGraphError", "HierarchyCycleError"]
