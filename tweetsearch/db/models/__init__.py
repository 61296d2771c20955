from tweetsearch.db.models.core import Account, SettingEntry, User

__all__ = ["Account", "SettingEntry", "User"]
