# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Query result envelope."""

from __future__ import annotations

from typing import Any, Iterable, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    import pandas as pd
    from ..client import ForceClient


class RecordCollection(list):
    """
    One page of query results.

    Behaves as a plain list of records and additionally exposes the total
    number of matching rows on the server and, when the result is paged, a
    way to fetch the following page.

    :param records: Records in this page.
    :param total_size: Total number of matching rows (``totalSize``).
    :type total_size: int or None
    :param next_page_url: Locator of the next page (``nextRecordsUrl``).
    :type next_page_url: str or None
    :param client: Client used by :meth:`next_page`.

    Example::

        page = Account.all()
        while True:
            for account in page:
                print(account.Name)
            if not page.has_next_page():
                break
            page = page.next_page()
    """

    def __init__(
        self,
        records: Iterable[Any] = (),
        *,
        total_size: Optional[int] = None,
        next_page_url: Optional[str] = None,
        client: Optional["ForceClient"] = None,
    ) -> None:
        super().__init__(records)
        self.total_size = len(self) if total_size is None else total_size
        self.next_page_url = next_page_url
        self.client = client

    @property
    def current_page_size(self) -> int:
        return len(self)

    def has_next_page(self) -> bool:
        return bool(self.next_page_url)

    def next_page(self) -> "RecordCollection":
        """
        Fetch the following page.

        :return: Next page, or an empty collection when this is the last one.
        :raises RuntimeError: If the collection is not bound to a client.
        """
        if not self.has_next_page():
            return RecordCollection(total_size=self.total_size, client=self.client)
        if self.client is None:
            raise RuntimeError("Collection is not bound to a client; cannot fetch the next page.")
        return self.client.next_page(self)

    def to_dataframe(self) -> "pd.DataFrame":
        """Return the records of this page as a pandas DataFrame (one column per attribute)."""
        from ..utils._pandas import records_to_dataframe

        return records_to_dataframe(self)

    def __repr__(self) -> str:
        return f"RecordCollection({list.__repr__(self)}, total_size={self.total_size!r}, next_page_url={self.next_page_url!r})"


__all__ = ["RecordCollection"]
