class MatchingError(Exception):
    """Fatal error that aborts a matching run."""


class LostItemNotFound(MatchingError):
    def __init__(self, lost_item_id):
        super().__init__(f"Failed to fetch lost item: {lost_item_id} not found")
        self.lost_item_id = lost_item_id


class CandidateFetchError(MatchingError):
    pass


class MatchPersistenceError(MatchingError):
    pass
