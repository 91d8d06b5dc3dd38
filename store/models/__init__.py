from .setting import Setting, SettingHistory

__all__ = ["Setting", "SettingHistory"]
