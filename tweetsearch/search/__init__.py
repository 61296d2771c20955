from tweetsearch.search.remote import RemoteSearchFetch, RemoteTweetSearch
from tweetsearch.search.session import SearchSession, SessionState
from tweetsearch.search.sources import DirectorySource, HistorySource
from tweetsearch.search.strategies import DirectorySearch, DirectorySelect, HistorySearch, Selection

__all__ = [
    "DirectorySearch",
    "DirectorySelect",
    "DirectorySource",
    "HistorySearch",
    "HistorySource",
    "RemoteSearchFetch",
    "RemoteTweetSearch",
    "SearchSession",
    "SessionState",
    "Selection",
]
