"""Player stat feeds."""

from teebox.feeds.base import BaseFeed, StatFetchError
from teebox.feeds.datagolf import DataGolfFeed, get_tour_type

__all__ = ["BaseFeed", "StatFetchError", "DataGolfFeed", "get_tour_type"]
