"""Profile lookups feeding authorization decisions."""

from formdesk.repositories.memory import InMemoryStore, ProfileRecord


class ProfileNotFoundError(Exception):
    """An authenticated principal has no profile row."""

    def __init__(self, principal_id: str) -> None:
        self.principal_id = principal_id
        super().__init__("Profile not found")


class ProfileGateway:
    """Read-only profile loader scoped to a single request.

    Loaded profiles are memoized on the instance, so one request never reads
    the same profile twice; a new gateway is built per request.
    ``StoreUnavailableError`` from the store is propagated untouched.
    """

    def __init__(self, store: InMemoryStore) -> None:
        self._store = store
        self._loaded: dict[str, ProfileRecord] = {}

    def load_profile(self, principal_id: str) -> ProfileRecord:
        cached = self._loaded.get(principal_id)
        if cached is not None:
            return cached

        record = self._store.get_profile(principal_id)
        if record is None:
            raise ProfileNotFoundError(principal_id)

        self._loaded[principal_id] = record
        return record
